"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import EmbeddingCacheEntry, GenerationCacheEntry
from .highlight import CATEGORY_COLORS, HighlightCategory, HighlightRun, HighlightSpan
from .messaging import Anchor, CoreMessaging, GeneratedContent, GenerationSettings
from .reference_example import AnchorType, Effectiveness, ReferenceExample, ScoredExample

__all__ = [
    "Anchor",
    "AnchorType",
    "CATEGORY_COLORS",
    "CoreMessaging",
    "Effectiveness",
    "EmbeddingCacheEntry",
    "GeneratedContent",
    "GenerationCacheEntry",
    "GenerationSettings",
    "HighlightCategory",
    "HighlightRun",
    "HighlightSpan",
    "ReferenceExample",
    "ScoredExample",
]
