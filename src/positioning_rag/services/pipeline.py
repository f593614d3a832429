"""End-to-end positioning pipeline.

One request runs as a single async call chain:

    cache gate → (miss) retrieval → orchestration → cache write-back → attribution

The gate is consulted before retrieval because the cache key depends only on
the request. Concurrent identical requests share one in-flight call.
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field

from positioning_rag.entities import (
    CoreMessaging,
    GeneratedContent,
    HighlightRun,
    HighlightSpan,
    ScoredExample,
)
from positioning_rag.metrics import PipelineMetrics
from positioning_rag.protocols import GenerationProvider
from positioning_rag.utils import SingleFlight

from .attribution_service import PhraseAttributor, resolve_runs
from .generation_cache import GenerationCacheGate, cache_key
from .orchestrator import GenerationOrchestrator, template_fallback
from .retrieval_service import RetrievalService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Produced:
    content: GeneratedContent
    from_cache: bool = False
    is_fallback: bool = False
    examples: list[ScoredExample] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one pipeline run.

    Attributes:
        content: The copy to display
        spans: Non-overlapping highlight spans over ``content.display_text``
        runs: ``content.display_text`` split into highlighted and plain runs
        cache_key: Generation cache key of the request
        from_cache: True if served from the generation cache
        is_fallback: True if the copy was synthesized from the request
        coalesced: True if the result was shared with a concurrent identical request
        examples: Reference examples used for grounding (empty on a cache hit)
    """

    content: GeneratedContent
    spans: list[HighlightSpan]
    runs: list[HighlightRun]
    cache_key: str
    from_cache: bool = False
    is_fallback: bool = False
    coalesced: bool = False
    examples: list[ScoredExample] = field(default_factory=list)


class PositioningPipeline:
    """Composes the retrieval, cache gate, orchestration and attribution services.

    Example:
        ```python
        pipeline = PositioningPipeline(
            retrieval=retrieval_service,
            cache_gate=GenerationCacheGate.create(store=generation_cache),
            orchestrator=GenerationOrchestrator.create(generation_provider=provider),
        )
        result = await pipeline.run(messaging)
        ```
    """

    def __init__(
        self,
        retrieval: RetrievalService,
        cache_gate: GenerationCacheGate,
        orchestrator: GenerationOrchestrator,
        attributor: PhraseAttributor | None = None,
        generation_provider: GenerationProvider | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            retrieval: Similarity retrieval service.
            cache_gate: Generation cache gate.
            orchestrator: Prompt & generation orchestrator.
            attributor: Phrase attributor. Defaults to the lexicon-based one.
            generation_provider: Generation service, only used for health checks.
        """
        self._retrieval = retrieval
        self._gate = cache_gate
        self._orchestrator = orchestrator
        self._attributor = attributor or PhraseAttributor()
        self._generation_provider = generation_provider
        self._inflight: SingleFlight[_Produced] = SingleFlight()
        self._metrics = PipelineMetrics()

    async def run(self, messaging: CoreMessaging) -> PipelineResult:
        """Produce positioning copy and its highlights for ``messaging``.

        Never raises for collaborator failures: every stage degrades to a
        deterministic fallback.
        """
        self._metrics.record_request()
        key = cache_key(messaging)

        produced, shared = await self._inflight.do(key, lambda: self._produce(messaging, key))
        if shared:
            self._metrics.record_coalesced()

        # thesis and risks always come from this request, even on a shared or cached result
        content = dataclasses.replace(produced.content, thesis=messaging.thesis, risks=messaging.risks)

        text = content.display_text
        spans = self._attributor.attribute(text, messaging)
        return PipelineResult(
            content=content,
            spans=spans,
            runs=resolve_runs(text, spans),
            cache_key=key,
            from_cache=produced.from_cache,
            is_fallback=produced.is_fallback,
            coalesced=shared,
            examples=produced.examples,
        )

    async def _produce(self, messaging: CoreMessaging, key: str) -> _Produced:
        cached = await self._gate.lookup(key)
        if cached is not None:
            logger.info("Using cached result for %s", key[:12])
            self._metrics.record_hit()
            return _Produced(content=cached, from_cache=True)
        self._metrics.record_miss()

        try:
            retrieval = await self._retrieval.search(messaging)
            if retrieval.is_fallback:
                self._metrics.record_retrieval_fallback()

            outcome = await self._orchestrator.generate(messaging, retrieval.examples)
        except Exception:
            logger.exception("Positioning generation failed, using template fallback")
            return _Produced(content=template_fallback(messaging), is_fallback=True)

        self._metrics.record_generation(outcome.duration_ms, outcome.is_fallback, outcome.degraded_parse)

        if not outcome.is_fallback:
            await self._gate.store(key, outcome.content)

        return _Produced(
            content=outcome.content,
            is_fallback=outcome.is_fallback,
            examples=retrieval.examples,
        )

    def highlight(self, text: str, messaging: CoreMessaging) -> tuple[list[HighlightSpan], list[HighlightRun]]:
        """Attribute arbitrary (e.g. user-edited) copy against a request."""
        spans = self._attributor.attribute(text, messaging)
        return spans, resolve_runs(text, spans)

    async def clear_cache(self) -> int:
        return await self._gate.clear()

    async def cleanup_cache(self) -> int:
        return await self._gate.cleanup_expired()

    def stats(self) -> dict:
        """Pipeline counters plus cache statistics."""
        return {
            "pipeline": {**self._metrics.to_dict(), "inflight_requests": self._inflight.inflight_count},
            "generation_cache": self._gate.get_stats(),
            **self._retrieval.get_stats(),
        }

    def status(self) -> dict:
        return self._retrieval.status()

    async def is_healthy(self) -> dict[str, bool]:
        """Reachability of every external collaborator."""
        example_store = self._retrieval.example_store
        cache_store = self._gate.cache_store
        store_ok, cache_ok = await asyncio.gather(
            asyncio.to_thread(example_store.health_check),
            asyncio.to_thread(cache_store.health_check),
        )
        generation_ok = (
            await self._generation_provider.is_available() if self._generation_provider is not None else False
        )
        return {
            "vector_store": bool(store_ok),
            "cache_store": bool(cache_ok),
            "generation_service": bool(generation_ok),
        }

    @property
    def metrics(self) -> PipelineMetrics:
        return self._metrics
