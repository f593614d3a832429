"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class GeneratedContentResponse(BaseModel):
    """Generated positioning copy."""

    headline: str
    subheadline: str
    opportunity: str
    thesis: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)


class HighlightSpanItem(BaseModel):
    """A highlighted character range ``[start, end)``."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    category: str = Field(..., description="Attributed input field")
    color: str = Field(..., description="Display color (hex)")


class HighlightRunItem(BaseModel):
    """A run of the displayed text; ``category`` and ``color`` are null for plain text."""

    text: str
    start: int = Field(..., ge=0)
    category: str | None = None
    color: str | None = None


class HighlightResponse(BaseModel):
    """Response DTO for highlight computation."""

    text: str = Field(..., description="The highlighted text")
    spans: list[HighlightSpanItem] = Field(default_factory=list)
    runs: list[HighlightRunItem] = Field(default_factory=list)


class ReferenceExampleItem(BaseModel):
    """A reference example used to ground the generation."""

    company: str
    tagline: str
    similarity: float = Field(..., description="Cosine similarity to the request")


class PositioningResponse(BaseModel):
    """Response DTO for positioning generation."""

    content: GeneratedContentResponse
    highlights: HighlightResponse
    from_cache: bool = Field(..., description="Whether the copy was served from the generation cache")
    is_fallback: bool = Field(..., description="Whether the copy was synthesized from the request fields")
    cache_key: str = Field(..., description="Generation cache key of the request")
    examples: list[ReferenceExampleItem] = Field(default_factory=list)
    duration_ms: float = Field(..., description="Time taken to serve the request in milliseconds")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache and pipeline statistics."""

    pipeline: dict[str, Any] = Field(default_factory=dict, description="Per-process pipeline counters")
    generation_cache: dict[str, Any] = Field(default_factory=dict, description="Generation cache statistics")
    embedding_cache: dict[str, Any] = Field(default_factory=dict, description="Embedding cache statistics")
    example_store: dict[str, Any] = Field(default_factory=dict, description="Reference library statistics")


class CacheClearResponse(BaseModel):
    """Response DTO for cache clear and cleanup operations."""

    success: bool
    deleted_count: int = Field(..., ge=0)
    message: str


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy', 'degraded' or 'unhealthy'")
    vector_store: bool = Field(..., description="Whether the vector store is reachable")
    cache_store: bool = Field(..., description="Whether the cache store is reachable")
    generation_service: bool = Field(..., description="Whether the generation service is configured")
