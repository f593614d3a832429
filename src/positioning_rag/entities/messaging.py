"""Positioning request and response entities."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Anchor:
    """A positioning anchor.

    Primary anchors are a product category, use case or competitive
    alternative; secondary anchors are a company type, department or
    desired outcome. ``anchor_type`` may be empty when the user left it unset.
    """

    content: str
    anchor_type: str = ""


@dataclass(frozen=True)
class GenerationSettings:
    """Sampling parameters, both in [0, 1] (validated by the caller)."""

    temperature: float = 0.3
    top_p: float = 0.8


@dataclass(frozen=True)
class CoreMessaging:
    """The structured positioning strategy submitted by the user."""

    primary_anchor: Anchor
    secondary_anchor: Anchor = field(default_factory=lambda: Anchor(content=""))
    problem: str = ""
    differentiator: str = ""
    icp: tuple[str, ...] = ()
    generation_settings: GenerationSettings = field(default_factory=GenerationSettings)
    thesis: tuple[str, ...] = ()
    risks: tuple[str, ...] = ()

    @property
    def icp_segments(self) -> list[str]:
        """Non-blank ICP segments, trimmed, in order."""
        return [segment.strip() for segment in self.icp if segment and segment.strip()]


@dataclass(frozen=True)
class GeneratedContent:
    """Customer-facing copy produced by the pipeline.

    ``thesis`` and ``risks`` are copied verbatim from the request.
    """

    headline: str
    subheadline: str
    opportunity: str
    thesis: tuple[str, ...] = ()
    risks: tuple[str, ...] = ()

    @property
    def display_text(self) -> str:
        """Text shown on the canvas and used for phrase attribution."""
        return f"{self.headline} {self.subheadline}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "headline": self.headline,
            "subheadline": self.subheadline,
            "opportunity": self.opportunity,
            "thesis": list(self.thesis),
            "risks": list(self.risks),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneratedContent":
        return cls(
            headline=data.get("headline", ""),
            subheadline=data.get("subheadline", ""),
            opportunity=data.get("opportunity", ""),
            thesis=tuple(data.get("thesis") or ()),
            risks=tuple(data.get("risks") or ()),
        )
