#!/usr/bin/env python3
"""
Demo script for the positioning pipeline.

Runs one positioning request twice (the second run is served from the
generation cache) and prints the copy with its highlighted fragments.
Requires Redis Stack and, for real generations, OPENAI_API_KEY.
"""

import asyncio
import time

from positioning_rag.api.dependencies import build_embedding_provider
from positioning_rag.entities import Anchor, CoreMessaging
from positioning_rag.repositories import (
    OpenAIEmbeddingProvider,
    OpenAIGenerationProvider,
    RedisEmbeddingCacheRepository,
    RedisExampleRepository,
    RedisGenerationCacheRepository,
)
from positioning_rag.services import (
    GenerationCacheGate,
    GenerationOrchestrator,
    PipelineResult,
    PositioningPipeline,
    RetrievalService,
)


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_result(result: PipelineResult, elapsed_ms: float) -> None:
    content = result.content
    source = "cache" if result.from_cache else ("fallback" if result.is_fallback else "generated")
    print(f"\n  Source:      {source} ({elapsed_ms:.0f}ms)")
    print(f"  Headline:    {content.headline}")
    print(f"  Subheadline: {content.subheadline}")
    print(f"  Opportunity: {content.opportunity}")

    print("\n  Highlights:")
    for run in result.runs:
        if run.is_highlighted:
            print(f"    [{run.category.value:>16}] {run.text!r}")


async def main() -> None:
    embedding_provider = build_embedding_provider()
    generation_provider = OpenAIGenerationProvider.create()

    pipeline = PositioningPipeline(
        retrieval=RetrievalService.create(
            example_store=RedisExampleRepository.create(dimension=embedding_provider.dimension),
            embedding_cache=RedisEmbeddingCacheRepository.create(),
            embedding_provider=embedding_provider,
        ),
        cache_gate=GenerationCacheGate.create(store=RedisGenerationCacheRepository.create()),
        orchestrator=GenerationOrchestrator.create(generation_provider=generation_provider),
        generation_provider=generation_provider,
    )

    messaging = CoreMessaging(
        primary_anchor=Anchor("Project Management Software", "Product Category"),
        secondary_anchor=Anchor("Marketing Teams", "Department"),
        problem="Campaign deadlines slip because work is tracked manually in spreadsheets",
        differentiator="Automated timelines that flag at-risk tasks before they slip",
        icp=("Marketing agencies", "In-house marketing teams"),
    )

    try:
        for attempt in ("First run", "Second run (same request)"):
            print_section(attempt)
            start_time = time.time()
            result = await pipeline.run(messaging)
            print_result(result, (time.time() - start_time) * 1000)

        print_section("Pipeline statistics")
        for name, value in pipeline.metrics.to_dict().items():
            print(f"  {name}: {value}")
    finally:
        await generation_provider.close()
        if isinstance(embedding_provider, OpenAIEmbeddingProvider):
            await embedding_provider.close()


if __name__ == "__main__":
    asyncio.run(main())
