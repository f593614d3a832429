#!/usr/bin/env python3
"""
Ingest reference examples into the vector store.

Usage:
    python scripts/ingest_examples.py examples.json

The file may hold a JSON array or a stream of concatenated JSON objects.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from positioning_rag.api.dependencies import build_embedding_provider
from positioning_rag.logging_config import configure_logging
from positioning_rag.repositories import OpenAIEmbeddingProvider, RedisExampleRepository
from positioning_rag.services import ExampleIngestor, load_records


async def run(path: Path) -> int:
    embedding_provider = build_embedding_provider()
    store = RedisExampleRepository.create(dimension=embedding_provider.dimension)
    ingestor = ExampleIngestor(example_store=store, embedding_provider=embedding_provider)

    try:
        report = await ingestor.ingest(load_records(path))
    finally:
        if isinstance(embedding_provider, OpenAIEmbeddingProvider):
            await embedding_provider.close()

    print(f"\nIngested {len(report.ingested)}/{report.total} examples")
    if report.failed:
        print(f"Failed: {', '.join(report.failed)}")
    print(f"Examples in store: {store.count_all()}")
    return 1 if report.failed else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Ingest reference examples into the vector store")
    parser.add_argument("path", type=Path, help="JSON file with example records")
    args = parser.parse_args()

    configure_logging()
    sys.exit(asyncio.run(run(args.path)))


if __name__ == "__main__":
    main()
