"""Parsing of generation service output.

The generation service is asked to answer with three prefixed lines::

    HEADLINE: <text>
    SUBHEADLINE: <text>
    OPPORTUNITY: <text>

Prefixes are matched exactly and case-sensitively. When none of them is
present the text is split into sentences instead (degraded parse). A
response that does not follow the contract is not an error.
"""

import re
from dataclasses import dataclass

DEFAULT_HEADLINE = "Professional solution for your needs"
DEFAULT_SUBHEADLINE = "Streamline your workflow without complexity"
DEFAULT_OPPORTUNITY = "Significant market opportunity for targeted solutions"

HEADLINE_PREFIX = "HEADLINE:"
SUBHEADLINE_PREFIX = "SUBHEADLINE:"
OPPORTUNITY_PREFIX = "OPPORTUNITY:"

_LEADING_SOLVE = re.compile(r"^Solve\s*", re.IGNORECASE)
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


@dataclass(frozen=True)
class ParsedResponse:
    headline: str
    subheadline: str
    opportunity: str
    degraded: bool = False


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def _degraded_parse(text: str) -> tuple[str, str]:
    cleaned = _LEADING_SOLVE.sub("", text.strip()).strip()
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(cleaned) if s.strip()]
    if not sentences:
        return "", ""
    headline = _capitalize_first(sentences[0])
    subheadline = _capitalize_first(". ".join(sentences[1:]))
    return headline, subheadline


def parse_response(text: str) -> ParsedResponse:
    """Extract headline, subheadline and opportunity from a completion.

    OPPORTUNITY may continue over the following lines until a line that
    contains a colon. Missing fields fall back to fixed default copy.
    """
    lines = [line for line in text.split("\n") if line.strip()]

    headline = ""
    subheadline = ""
    opportunity = ""
    found_marker = False

    for index, line in enumerate(lines):
        if line.startswith(HEADLINE_PREFIX):
            headline = line[len(HEADLINE_PREFIX):].strip()
            found_marker = True
        elif line.startswith(SUBHEADLINE_PREFIX):
            subheadline = line[len(SUBHEADLINE_PREFIX):].strip()
            found_marker = True
        elif line.startswith(OPPORTUNITY_PREFIX):
            parts = [line[len(OPPORTUNITY_PREFIX):].strip()]
            for following in lines[index + 1:]:
                if ":" in following:
                    break
                parts.append(following.strip())
            opportunity = " ".join(part for part in parts if part)
            found_marker = True

    degraded = False
    if not found_marker:
        headline, subheadline = _degraded_parse(text)
        degraded = True

    return ParsedResponse(
        headline=headline or DEFAULT_HEADLINE,
        subheadline=subheadline or DEFAULT_SUBHEADLINE,
        opportunity=opportunity or DEFAULT_OPPORTUNITY,
        degraded=degraded,
    )
