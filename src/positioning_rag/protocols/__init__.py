"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → pgvector, OpenAI → local, etc.)
- Unit testing with in-memory implementations
- Clear separation of concerns
"""

from .cache_store import EmbeddingCacheStore, GenerationCacheStore
from .clause_classifier import ClauseClassifier, ClauseKind
from .embedding_provider import EmbeddingProvider
from .example_store import ExampleStore
from .generation_provider import GenerationProvider

__all__ = [
    "ClauseClassifier",
    "ClauseKind",
    "EmbeddingCacheStore",
    "EmbeddingProvider",
    "ExampleStore",
    "GenerationCacheStore",
    "GenerationProvider",
]
