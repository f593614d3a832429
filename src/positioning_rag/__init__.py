"""Positioning RAG - retrieval-augmented positioning copy generation.

This package provides a layered architecture for turning a positioning
strategy into customer-facing copy with phrase highlighting:

Layers:
    - protocols: Interface contracts (EmbeddingProvider, GenerationProvider, stores)
    - repositories: Redis stores and embedding/generation API clients
    - services: Retrieval, cache gate, orchestration, attribution, pipeline
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from positioning_rag.services import PositioningPipeline

    result = await pipeline.run(messaging)
    print(result.content.headline)
    ```

For HTTP API:
    ```python
    from positioning_rag.api.app import app
    ```
"""

from positioning_rag.config import get_redis_client, settings
from positioning_rag.entities import (
    Anchor,
    CoreMessaging,
    GeneratedContent,
    GenerationSettings,
    HighlightCategory,
    HighlightRun,
    HighlightSpan,
)
from positioning_rag.errors import PositioningError
from positioning_rag.protocols import (
    EmbeddingCacheStore,
    EmbeddingProvider,
    ExampleStore,
    GenerationCacheStore,
    GenerationProvider,
)
from positioning_rag.services import PipelineResult, PositioningPipeline

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "EmbeddingProvider",
    "GenerationProvider",
    "ExampleStore",
    "EmbeddingCacheStore",
    "GenerationCacheStore",
    # Services (business logic)
    "PositioningPipeline",
    "PipelineResult",
    # Entities (domain models)
    "Anchor",
    "CoreMessaging",
    "GeneratedContent",
    "GenerationSettings",
    "HighlightCategory",
    "HighlightRun",
    "HighlightSpan",
    # Errors
    "PositioningError",
]
