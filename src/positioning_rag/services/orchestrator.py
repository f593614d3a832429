"""Prompt & generation orchestration.

Builds the grounded prompt, calls the generation service, parses the
three-line response and, on any generation failure, synthesizes the copy
from the request fields instead.
"""

import logging
import time
from dataclasses import dataclass

from positioning_rag.config import settings
from positioning_rag.entities import CoreMessaging, GeneratedContent, ScoredExample
from positioning_rag.errors import GenerationFailure
from positioning_rag.protocols import GenerationProvider

from .prompt_builder import build_context, build_prompt
from .response_parser import parse_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationOutcome:
    """Result of one orchestration call.

    Attributes:
        content: The generated (or synthesized) copy
        is_fallback: True if the generation service failed and the copy
            was synthesized from the request; such results are not cached
        degraded_parse: True if the response ignored the three-line contract
        duration_ms: Time spent in the generation call
    """

    content: GeneratedContent
    is_fallback: bool = False
    degraded_parse: bool = False
    duration_ms: float = 0.0


def template_fallback(messaging: CoreMessaging) -> GeneratedContent:
    """Deterministic copy built from the request fields alone.

    Never touches an external service and never fails.
    """
    primary = messaging.primary_anchor.content
    secondary = messaging.secondary_anchor.content

    headline = f"{primary} for {secondary.lower()}" if secondary else f"Professional {primary}"
    return GeneratedContent(
        headline=headline,
        subheadline=f"Solve {messaging.problem.lower()} with {messaging.differentiator.lower()}",
        opportunity=f"{secondary or 'Businesses'} can improve efficiency by implementing {primary} solutions.",
        thesis=messaging.thesis,
        risks=messaging.risks,
    )


class GenerationOrchestrator:
    """Turns a request plus retrieved examples into GeneratedContent."""

    def __init__(
        self,
        generation_provider: GenerationProvider,
        max_tokens: int | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            generation_provider: Text generation service.
            max_tokens: Completion token budget. Defaults to settings.
        """
        self._generator = generation_provider
        self._max_tokens = max_tokens or settings.generation_max_tokens

    @classmethod
    def create(
        cls,
        generation_provider: GenerationProvider,
        max_tokens: int | None = None,
    ) -> "GenerationOrchestrator":
        return cls(generation_provider=generation_provider, max_tokens=max_tokens)

    async def generate(
        self,
        messaging: CoreMessaging,
        examples: list[ScoredExample],
    ) -> GenerationOutcome:
        """Generate positioning copy grounded by ``examples``.

        Args:
            messaging: The positioning request
            examples: Retrieved reference examples

        Returns:
            GenerationOutcome; ``is_fallback`` is set when the generation
            service failed and the template copy was used
        """
        prompt = build_prompt(messaging, build_context(examples))
        sampling = messaging.generation_settings

        start_time = time.time()
        try:
            text = await self._generator.generate(
                prompt,
                temperature=sampling.temperature,
                top_p=sampling.top_p,
                max_tokens=self._max_tokens,
            )
            if not text or not text.strip():
                raise GenerationFailure("Generation service returned an empty response")
        except Exception as e:
            # Any provider failure, typed or not, degrades to the template copy
            logger.warning("Generation failed (%s), using template fallback: %s", type(e).__name__, e)
            return GenerationOutcome(content=template_fallback(messaging), is_fallback=True)
        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            "Generated with settings temperature=%.2f top_p=%.2f in %.0fms",
            sampling.temperature,
            sampling.top_p,
            duration_ms,
        )
        logger.debug("Raw generated content: %s", text)

        parsed = parse_response(text)
        if parsed.degraded:
            logger.info("Response ignored the HEADLINE/SUBHEADLINE/OPPORTUNITY format, used degraded parse")

        return GenerationOutcome(
            content=GeneratedContent(
                headline=parsed.headline,
                subheadline=parsed.subheadline,
                opportunity=parsed.opportunity,
                thesis=messaging.thesis,
                risks=messaging.risks,
            ),
            degraded_parse=parsed.degraded,
            duration_ms=duration_ms,
        )
