"""Repository layer for data access.

This layer wraps the external collaborators (Redis, embedding and
generation APIs) behind the protocol interfaces in ``positioning_rag.protocols``.
The repositories are protocol-based (structural typing), not inheritance-based.
"""

from positioning_rag.protocols import (
    EmbeddingCacheStore,
    EmbeddingProvider,
    ExampleStore,
    GenerationCacheStore,
    GenerationProvider,
)

from .openai_embedding_provider import OpenAIEmbeddingProvider
from .openai_generation_provider import OpenAIGenerationProvider
from .redis_cache_repository import RedisEmbeddingCacheRepository, RedisGenerationCacheRepository
from .redis_example_repository import RedisExampleRepository

__all__ = [
    "EmbeddingCacheStore",
    "EmbeddingProvider",
    "ExampleStore",
    "GenerationCacheStore",
    "GenerationProvider",
    "OpenAIEmbeddingProvider",
    "OpenAIGenerationProvider",
    "RedisEmbeddingCacheRepository",
    "RedisExampleRepository",
    "RedisGenerationCacheRepository",
]
