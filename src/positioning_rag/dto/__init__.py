"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import AnchorModel, GenerationSettingsModel, HighlightRequest, PositioningRequest
from .responses import (
    CacheClearResponse,
    CacheStatsResponse,
    GeneratedContentResponse,
    HealthCheckResponse,
    HighlightResponse,
    HighlightRunItem,
    HighlightSpanItem,
    PositioningResponse,
    ReferenceExampleItem,
)

__all__ = [
    "AnchorModel",
    "GenerationSettingsModel",
    "PositioningRequest",
    "HighlightRequest",
    "GeneratedContentResponse",
    "HighlightSpanItem",
    "HighlightRunItem",
    "HighlightResponse",
    "ReferenceExampleItem",
    "PositioningResponse",
    "CacheStatsResponse",
    "CacheClearResponse",
    "HealthCheckResponse",
]
