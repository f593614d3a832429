"""Service layer for business logic.

This layer contains the positioning pipeline and its stages. Services depend
on protocols (interfaces), not concrete implementations, making them testable
and flexible.

Architecture:
    Handler -> PositioningPipeline -> Services -> Repository
    (HTTP)  -> (Composition)       -> (Business) -> (Data Access)

Usage:
    ```python
    from positioning_rag.services import (
        GenerationCacheGate,
        GenerationOrchestrator,
        PositioningPipeline,
        RetrievalService,
    )

    pipeline = PositioningPipeline(
        retrieval=RetrievalService.create(example_store, embedding_cache, embedding_provider),
        cache_gate=GenerationCacheGate.create(store=generation_cache),
        orchestrator=GenerationOrchestrator.create(generation_provider=generation_provider),
    )
    result = await pipeline.run(messaging)
    ```
"""

from .attribution_service import PhraseAttributor, merge_spans, resolve_runs, split_clauses, word_windows
from .clause_classifier import LexiconClauseClassifier
from .generation_cache import GenerationCacheGate, cache_key, round_to_tenth
from .ingestion_service import ExampleIngestor, IngestReport, load_records, parse_records
from .orchestrator import GenerationOrchestrator, GenerationOutcome, template_fallback
from .pipeline import PipelineResult, PositioningPipeline
from .prompt_builder import build_context, build_prompt
from .response_parser import ParsedResponse, parse_response
from .retrieval_service import FALLBACK_EXAMPLES, RetrievalResult, RetrievalService

__all__ = [
    "FALLBACK_EXAMPLES",
    "ExampleIngestor",
    "GenerationCacheGate",
    "GenerationOrchestrator",
    "GenerationOutcome",
    "IngestReport",
    "LexiconClauseClassifier",
    "ParsedResponse",
    "PhraseAttributor",
    "PipelineResult",
    "PositioningPipeline",
    "RetrievalResult",
    "RetrievalService",
    "build_context",
    "build_prompt",
    "cache_key",
    "load_records",
    "merge_spans",
    "parse_records",
    "parse_response",
    "resolve_runs",
    "round_to_tenth",
    "split_clauses",
    "template_fallback",
    "word_windows",
]
