"""Redis implementation of ExampleStore.

The reference library lives in a Redis Stack hash index with an HNSW
vector field using the COSINE metric. Redis reports cosine *distance*
(0 = identical, 2 = opposite); this repository converts it to similarity
(1 - distance) before applying the threshold.
"""

import json
import logging
import struct
import time
from datetime import datetime
from typing import Any

import redis
from redisvl.index import SearchIndex
from redisvl.query import VectorQuery

from positioning_rag.config import get_redis_client, settings
from positioning_rag.entities import AnchorType, Effectiveness, ReferenceExample, ScoredExample
from positioning_rag.errors import VectorStoreFailure

logger = logging.getLogger(__name__)

RETURN_FIELDS = [
    "company",
    "tagline",
    "anchor_type",
    "primary_anchor",
    "problem",
    "differentiator",
    "industry",
    "effectiveness",
    "icp",
    "tags",
    "tone",
    "structure",
    "secondary_anchors",
    "created_at",
]


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return "" if value is None else str(value)


def _json_field(value: Any, default: Any) -> Any:
    raw = _text(value)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


class RedisExampleRepository:
    """Redis implementation of the reference example store.

    This class satisfies the ExampleStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        index_name: str | None = None,
        dimension: int | None = None,
        index: SearchIndex | None = None,
    ) -> None:
        """Initialize the Redis example repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            index_name: Name of the Redis search index.
            dimension: Embedding dimension D of stored rows.
            index: Prebuilt search index (skips index creation).
        """
        self._client = redis_client or get_redis_client()
        self._index_name = index_name or settings.example_index_name
        self._dimension = dimension or settings.embedding_dimension
        self._index: SearchIndex | None = index

        if self._index is None:
            self._ensure_index()

    @classmethod
    def create(
        cls,
        index_name: str | None = None,
        dimension: int | None = None,
    ) -> "RedisExampleRepository":
        """Factory method to create RedisExampleRepository with defaults.

        Args:
            index_name: Redis index name. If None, uses settings.
            dimension: Vector dimension. If None, uses settings.

        Returns:
            Configured RedisExampleRepository
        """
        return cls(index_name=index_name, dimension=dimension)

    def _ensure_index(self) -> None:
        """Ensure the Redis vector index exists."""
        index_schema = {
            "index": {
                "name": self._index_name,
                "prefix": f"{self._index_name}:",
                "storage_type": "hash",
            },
            "fields": [
                {"name": "company", "type": "text"},
                {"name": "tagline", "type": "text"},
                {"name": "anchor_type", "type": "tag"},
                {"name": "primary_anchor", "type": "text"},
                {"name": "problem", "type": "text"},
                {"name": "differentiator", "type": "text"},
                {"name": "industry", "type": "tag"},
                {"name": "effectiveness", "type": "tag"},
                {"name": "icp", "type": "text"},
                {"name": "tags", "type": "text"},
                {"name": "tone", "type": "text"},
                {"name": "structure", "type": "text"},
                {"name": "secondary_anchors", "type": "text"},
                {"name": "created_at", "type": "numeric"},
                {
                    "name": "embedding",
                    "type": "vector",
                    "attrs": {
                        "dims": self._dimension,
                        "algorithm": "HNSW",
                        "metric": "COSINE",
                        "datatype": "FLOAT32",
                    },
                },
            ],
        }

        self._index = SearchIndex.from_dict(index_schema)
        self._index.set_client(self._client)

        try:
            self._index.create(overwrite=False)
            logger.info("Created new index: %s", self._index_name)
        except Exception as e:
            if "already exists" in str(e):
                logger.info("Using existing index: %s", self._index_name)
            else:
                raise

    def similarity_search(
        self,
        embedding: list[float],
        threshold: float,
        limit: int,
    ) -> list[ScoredExample]:
        """Find stored examples by cosine similarity.

        Args:
            embedding: The query embedding vector
            threshold: Minimum cosine similarity (exclusive)
            limit: Maximum number of results to return

        Returns:
            Matches with similarity > threshold, highest first

        Raises:
            VectorStoreFailure: If the index cannot be queried or returns a malformed row
        """
        if self._index is None:
            return []

        query = VectorQuery(
            vector=embedding,
            vector_field_name="embedding",
            return_fields=RETURN_FIELDS,
            num_results=limit,
        )

        try:
            results = self._index.query(query)
        except Exception as e:
            raise VectorStoreFailure(f"Vector search failed: {e}") from e

        matches = []
        try:
            for result in results:
                similarity = 1.0 - float(result.get("vector_distance", 2.0))
                if similarity > threshold:
                    matches.append(ScoredExample(example=self._to_example(result), similarity=similarity))
        except (TypeError, ValueError) as e:
            # unknown enum values, malformed JSON fields or distances
            raise VectorStoreFailure(f"Malformed example row: {e}") from e

        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:limit]

    @staticmethod
    def _to_example(row: dict[str, Any]) -> ReferenceExample:
        """Convert a search result row into a ReferenceExample."""
        created_raw = _text(row.get("created_at"))
        return ReferenceExample(
            company=_text(row.get("company")),
            tagline=_text(row.get("tagline")),
            anchor_type=AnchorType(_text(row.get("anchor_type")) or AnchorType.PRODUCT_CATEGORY.value),
            primary_anchor=_text(row.get("primary_anchor")),
            problem=_text(row.get("problem")),
            differentiator=_text(row.get("differentiator")),
            industry=_text(row.get("industry")),
            effectiveness=Effectiveness(_text(row.get("effectiveness")) or Effectiveness.HIGH.value),
            icp=tuple(_json_field(row.get("icp"), [])),
            tags=frozenset(_json_field(row.get("tags"), [])),
            tone=_text(row.get("tone")),
            structure=_text(row.get("structure")),
            secondary_anchors=_json_field(row.get("secondary_anchors"), {}),
            created_at=datetime.fromtimestamp(float(created_raw)) if created_raw else None,
        )

    def add_example(self, example: ReferenceExample) -> str:
        """Store an example with its embedding.

        Args:
            example: The example to store; ``embedding`` must have length D

        Returns:
            The storage key for the example

        Raises:
            ValueError: If the embedding length does not match the index dimension
            VectorStoreFailure: If the write fails
        """
        if len(example.embedding) != self._dimension:
            raise ValueError(
                f"Embedding dimension mismatch for {example.company}: "
                f"expected {self._dimension}, got {len(example.embedding)}"
            )

        vector_bytes = struct.pack(f"{len(example.embedding)}f", *example.embedding)
        created_at = example.created_at.timestamp() if example.created_at else time.time()
        key = f"{self._index_name}:{int(time.time() * 1000)}:{example.company.lower().replace(' ', '-')}"

        try:
            self._client.hset(
                key,
                mapping={
                    "company": example.company,
                    "tagline": example.tagline,
                    "anchor_type": example.anchor_type.value,
                    "primary_anchor": example.primary_anchor,
                    "problem": example.problem,
                    "differentiator": example.differentiator,
                    "industry": example.industry,
                    "effectiveness": example.effectiveness.value,
                    "icp": json.dumps(list(example.icp)),
                    "tags": json.dumps(sorted(example.tags)),
                    "tone": example.tone,
                    "structure": example.structure,
                    "secondary_anchors": json.dumps(example.secondary_anchors),
                    "created_at": str(created_at),
                    "embedding": vector_bytes,
                },
            )
        except redis.RedisError as e:
            raise VectorStoreFailure(f"Failed to store example {example.company}: {e}") from e
        return key

    def count_all(self) -> int:
        """Count stored examples."""
        count = 0
        for _ in self._client.scan_iter(match=f"{self._index_name}:*"):
            count += 1
        return count

    def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def get_stats(self) -> dict:
        """Get repository statistics."""
        return {
            "index_name": self._index_name,
            "total_examples": self.count_all(),
            "dimension": self._dimension,
        }
