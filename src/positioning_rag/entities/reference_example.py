"""Reference example domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AnchorType(str, Enum):
    """Kind of primary positioning anchor."""

    PRODUCT_CATEGORY = "Product Category"
    USE_CASE = "Use Case"
    COMPETITIVE_ALTERNATIVE = "Competitive Alternative"


class Effectiveness(str, Enum):
    """Analyst rating of how well a reference example performs."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ReferenceExample:
    """A previously analyzed company used to ground generation.

    Rows are created by offline ingestion and are read-only at serving time.
    Search results do not carry the stored vector, so ``embedding`` is empty
    unless the example is being written to the store.

    Attributes:
        company: Company name
        tagline: The company's published tagline
        anchor_type: Kind of primary anchor the tagline uses
        primary_anchor: Primary anchor text
        problem: Problem statement
        differentiator: Differentiator / solution statement
        industry: Industry label
        effectiveness: Analyst rating (high, medium, low)
        icp: Ordered ICP segments
        tags: Free-form tags
        tone: Tone label (e.g. "professional")
        structure: Structure label (e.g. "problem-solution")
        secondary_anchors: Secondary anchor map
        embedding: Stored embedding vector (length D when stored)
        created_at: Creation timestamp
    """

    company: str
    tagline: str
    anchor_type: AnchorType
    primary_anchor: str
    problem: str
    differentiator: str
    industry: str = ""
    effectiveness: Effectiveness = Effectiveness.HIGH
    icp: tuple[str, ...] = ()
    tags: frozenset[str] = frozenset()
    tone: str = ""
    structure: str = ""
    secondary_anchors: dict[str, Any] = field(default_factory=dict)
    embedding: tuple[float, ...] = ()
    created_at: datetime | None = None


@dataclass(frozen=True)
class ScoredExample:
    """A reference example paired with its cosine similarity to the query."""

    example: ReferenceExample
    similarity: float
