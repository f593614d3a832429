"""Offline ingestion of the reference example library.

Reads analyst records (a JSON array, or a stream of concatenated JSON
objects), embeds each one and writes it to the example store. A failing
record is logged and counted; it does not abort the run.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from positioning_rag.entities import AnchorType, Effectiveness, ReferenceExample
from positioning_rag.errors import PositioningError
from positioning_rag.protocols import EmbeddingProvider, ExampleStore

logger = logging.getLogger(__name__)

MAX_FEATURE_TAGS = 3


@dataclass
class IngestReport:
    """Outcome of an ingestion run."""

    ingested: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.ingested) + len(self.failed)


def parse_records(raw: str) -> list[dict[str, Any]]:
    """Parse a JSON array or a sequence of concatenated JSON objects.

    Raises:
        ValueError: If the input is not valid JSON in either form
    """
    raw = raw.strip()
    if not raw:
        return []

    decoder = json.JSONDecoder()
    records: list[dict[str, Any]] = []
    position = 0
    while position < len(raw):
        value, position = decoder.raw_decode(raw, position)
        if isinstance(value, list):
            records.extend(value)
        else:
            records.append(value)
        while position < len(raw) and raw[position] in " \t\r\n,":
            position += 1
    return records


def load_records(path: Path) -> list[dict[str, Any]]:
    records = parse_records(path.read_text(encoding="utf-8"))
    logger.info("Parsed %d examples from %s", len(records), path)
    return records


def embedding_text(record: dict[str, Any]) -> str:
    """Text embedded for a record: identity, copy, audience and value props."""
    metadata = record.get("metadata") or {}
    parts = [
        record.get("company", ""),
        record.get("tagline", ""),
        record.get("problem", ""),
        record.get("differentiator", ""),
        " ".join(record.get("icp") or []),
        " ".join(metadata.get("main_value_props") or []),
        " ".join(metadata.get("use_cases") or []),
        record.get("industry", ""),
    ]
    return " ".join(part for part in parts if part)


def to_example(record: dict[str, Any], embedding: list[float]) -> ReferenceExample:
    """Map an analyst record onto a ReferenceExample.

    The tagline is the company's main positioning statement, so it doubles
    as the primary anchor. ``very_high`` effectiveness is folded into ``high``.
    """
    metadata = record.get("metadata") or {}
    anchor_type = AnchorType(record.get("anchor_type") or AnchorType.PRODUCT_CATEGORY.value)
    effectiveness = record.get("effectiveness") or Effectiveness.HIGH.value
    if effectiveness == "very_high":
        effectiveness = Effectiveness.HIGH.value

    tags = [
        record.get("industry", ""),
        anchor_type.value.lower().replace(" ", "-"),
        effectiveness,
        *(metadata.get("key_features") or [])[:MAX_FEATURE_TAGS],
    ]

    return ReferenceExample(
        company=record["company"],
        tagline=record.get("tagline", ""),
        anchor_type=anchor_type,
        primary_anchor=record.get("tagline", ""),
        problem=record.get("problem", ""),
        differentiator=record.get("differentiator", ""),
        industry=record.get("industry", ""),
        effectiveness=Effectiveness(effectiveness),
        icp=tuple(record.get("icp") or ()),
        tags=frozenset(tag for tag in tags if tag),
        tone="professional",
        structure="problem-solution",
        secondary_anchors={
            "homepage_url": record.get("homepage_url", ""),
            "breadth_scale": record.get("breadth_scale"),
            "competitive_positioning": metadata.get("competitive_positioning", ""),
        },
        embedding=tuple(embedding),
    )


class ExampleIngestor:
    """Embeds analyst records and writes them to the example store.

    Example:
        ```python
        ingestor = ExampleIngestor(
            example_store=RedisExampleRepository.create(),
            embedding_provider=OpenAIEmbeddingProvider.create(),
        )
        report = await ingestor.ingest(load_records(Path("examples.json")))
        ```
    """

    def __init__(self, example_store: ExampleStore, embedding_provider: EmbeddingProvider) -> None:
        self._store = example_store
        self._embeddings = embedding_provider

    async def ingest_one(self, record: dict[str, Any]) -> str:
        """Embed and store one record.

        Returns:
            The storage key

        Raises:
            PositioningError: If embedding or storage fails
            KeyError, ValueError: If the record is malformed
        """
        embedding = await self._embeddings.encode(embedding_text(record))
        example = to_example(record, embedding)
        return await asyncio.to_thread(self._store.add_example, example)

    async def ingest(self, records: list[dict[str, Any]]) -> IngestReport:
        """Ingest ``records`` one at a time, continuing past failures."""
        report = IngestReport()
        for record in records:
            company = str(record.get("company", "<unknown>"))
            try:
                key = await self.ingest_one(record)
            except (PositioningError, KeyError, ValueError) as e:
                logger.error("Failed to ingest %s: %s", company, e)
                report.failed.append(company)
                continue
            logger.info("Ingested %s as %s", company, key)
            report.ingested.append(company)

        logger.info("Ingestion finished: %d ingested, %d failed", len(report.ingested), len(report.failed))
        return report
