"""Highlight domain entities."""

from dataclasses import dataclass
from enum import Enum


class HighlightCategory(str, Enum):
    """Input field a highlighted fragment is attributed to."""

    PRIMARY_ANCHOR = "primary_anchor"
    SECONDARY_ANCHOR = "secondary_anchor"
    ICP = "icp"
    PROBLEM = "problem"
    SOLUTION = "solution"

    @property
    def color(self) -> str:
        return CATEGORY_COLORS[self]


CATEGORY_COLORS: dict[HighlightCategory, str] = {
    HighlightCategory.PRIMARY_ANCHOR: "#fef3c7",  # yellow
    HighlightCategory.SECONDARY_ANCHOR: "#dbeafe",  # blue
    HighlightCategory.ICP: "#dbeafe",  # blue, shared with the secondary anchor
    HighlightCategory.PROBLEM: "#fecaca",  # red
    HighlightCategory.SOLUTION: "#dcfce7",  # green
}


@dataclass(frozen=True)
class HighlightSpan:
    """A half-open character range ``[start, end)`` over the generated text."""

    start: int
    end: int
    category: HighlightCategory

    @property
    def color(self) -> str:
        return self.category.color

    @property
    def length(self) -> int:
        return self.end - self.start

    def text(self, source: str) -> str:
        return source[self.start:self.end]


@dataclass(frozen=True)
class HighlightRun:
    """A contiguous run of the generated text, highlighted or plain.

    Attributes:
        text: The run's text
        start: Offset of the run in the generated text
        category: Attributed category, or None for plain text
    """

    text: str
    start: int
    category: HighlightCategory | None = None

    @property
    def is_highlighted(self) -> bool:
        return self.category is not None

    @property
    def color(self) -> str | None:
        return self.category.color if self.category else None
