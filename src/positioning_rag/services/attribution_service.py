"""Phrase attribution and highlighting.

Maps fragments of the generated copy back to the input fields that produced
them, in three phases:

1. Exact match: primary anchor, secondary anchor and ICP segments are found
   verbatim (case-insensitive, first occurrence, first registered wins).
2. Heuristic: clauses are classified as problem or solution paraphrases and
   expanded into overlapping 4-8 word candidate phrases.
3. Merge: per color, located spans closer than 3 characters are joined.

``resolve_runs`` then walks the text once and splits it into highlighted and
plain runs that cover it exactly.
"""

import logging
import re

from positioning_rag.entities import CoreMessaging, HighlightCategory, HighlightRun, HighlightSpan
from positioning_rag.protocols import ClauseClassifier, ClauseKind

from .clause_classifier import LexiconClauseClassifier

logger = logging.getLogger(__name__)

MIN_WINDOW_WORDS = 4
MAX_WINDOW_WORDS = 8
MERGE_GAP = 2

_CLAUSE_SPLIT = re.compile(r"[.!?]+|,\s*but\s+|,\s*however\s+|,\s*and\s+our\s+", re.IGNORECASE)

_KIND_CATEGORY = {
    ClauseKind.PROBLEM: HighlightCategory.PROBLEM,
    ClauseKind.SOLUTION: HighlightCategory.SOLUTION,
}


def split_clauses(text: str) -> list[str]:
    """Split on sentence terminators and on ", but", ", however", ", and our"."""
    return [clause.strip() for clause in _CLAUSE_SPLIT.split(text) if clause.strip()]


def word_windows(clause: str, min_words: int = MIN_WINDOW_WORDS, max_words: int = MAX_WINDOW_WORDS) -> list[str]:
    """Overlapping word windows of ``min_words``..``max_words`` words.

    Each start position yields the longest window that fits; the whole clause
    is included when it has at most ``max_words`` words. Order-preserving,
    without duplicates.
    """
    words = clause.split()
    windows = []
    for i in range(len(words) - min_words + 1):
        length = min(max_words, len(words) - i)
        if length >= min_words:
            windows.append(" ".join(words[i:i + length]))

    if len(words) <= max_words:
        windows.append(clause)

    return list(dict.fromkeys(windows))


def find_phrase(text: str, phrase: str, ignore_case: bool = True) -> re.Match[str] | None:
    """First occurrence of ``phrase`` in ``text``, or None.

    Any run of whitespace in ``phrase`` matches any run of whitespace in
    ``text``, so the match may be longer than the phrase itself.
    """
    words = phrase.split()
    if not words:
        return None
    pattern = r"\s+".join(re.escape(word) for word in words)
    return re.search(pattern, text, re.IGNORECASE if ignore_case else 0)


def merge_spans(spans: list[HighlightSpan], max_gap: int = MERGE_GAP) -> list[HighlightSpan]:
    """Merge spans of the same color whose gap is at most ``max_gap`` characters.

    Output is grouped by color in first-seen order, sorted by offset within a
    color. A merged span keeps the category of its earliest member.
    """
    by_color: dict[str, list[HighlightSpan]] = {}
    for span in spans:
        by_color.setdefault(span.color, []).append(span)

    merged: list[HighlightSpan] = []
    for group in by_color.values():
        group.sort(key=lambda s: (s.start, -s.end))
        current = group[0]
        for span in group[1:]:
            if span.start - current.end <= max_gap:
                if span.end > current.end:
                    current = HighlightSpan(current.start, span.end, current.category)
            else:
                merged.append(current)
                current = span
        merged.append(current)
    return merged


def resolve_runs(text: str, spans: list[HighlightSpan]) -> list[HighlightRun]:
    """Split ``text`` into highlighted and plain runs.

    Walks left to right: a span starting at an unclaimed position is emitted
    and claims its range, a span starting inside a claimed range is dropped,
    and the gaps are emitted as plain runs. When several spans start at the
    same offset the first one in ``spans`` wins. Concatenating the runs'
    text reproduces ``text`` exactly.
    """
    length = len(text)
    starts: dict[int, HighlightSpan] = {}
    for span in spans:
        if 0 <= span.start < length and span.end > span.start:
            starts.setdefault(span.start, span)
    ordered = sorted(starts)

    runs: list[HighlightRun] = []
    position = 0
    pointer = 0
    while position < length:
        while pointer < len(ordered) and ordered[pointer] < position:
            pointer += 1

        if pointer < len(ordered) and ordered[pointer] == position:
            span = starts[position]
            end = min(span.end, length)
            runs.append(HighlightRun(text=text[position:end], start=position, category=span.category))
            position = end
            pointer += 1
        else:
            next_start = ordered[pointer] if pointer < len(ordered) else length
            runs.append(HighlightRun(text=text[position:next_start], start=position))
            position = next_start

    return runs


class PhraseAttributor:
    """Attributes fragments of generated copy to request fields.

    Example:
        ```python
        attributor = PhraseAttributor()
        spans = attributor.attribute(content.display_text, messaging)
        runs = resolve_runs(content.display_text, spans)
        ```
    """

    def __init__(self, classifier: ClauseClassifier | None = None) -> None:
        """Initialize the attributor.

        Args:
            classifier: Clause classification policy. Defaults to the lexicon classifier.
        """
        self._classifier = classifier or LexiconClauseClassifier()

    def exact_matches(self, text: str, messaging: CoreMessaging) -> list[HighlightSpan]:
        """Locate the anchors and ICP segments verbatim in ``text``."""
        phrases = [
            (messaging.primary_anchor.content.strip(), HighlightCategory.PRIMARY_ANCHOR),
            (messaging.secondary_anchor.content.strip(), HighlightCategory.SECONDARY_ANCHOR),
        ]
        phrases.extend((segment, HighlightCategory.ICP) for segment in messaging.icp_segments)

        spans: list[HighlightSpan] = []
        for phrase, category in phrases:
            if not phrase:
                continue
            match = find_phrase(text, phrase)
            if match is None:
                continue
            candidate = HighlightSpan(match.start(), match.end(), category)
            if any(candidate.start < s.end and s.start < candidate.end for s in spans):
                continue
            spans.append(candidate)
        return spans

    def heuristic_candidates(self, text: str) -> list[HighlightSpan]:
        """Candidate spans for clauses classified as problem or solution."""
        candidates: list[HighlightSpan] = []
        for clause in split_clauses(text):
            kind = self._classifier.classify(clause)
            category = _KIND_CATEGORY.get(kind)
            if category is None:
                continue
            for phrase in word_windows(clause):
                match = find_phrase(text, phrase, ignore_case=False)
                if match is not None:
                    candidates.append(HighlightSpan(match.start(), match.end(), category))
        return candidates

    def attribute(self, text: str, messaging: CoreMessaging) -> list[HighlightSpan]:
        """Compute non-overlapping highlight spans over ``text``.

        Returns:
            Spans in text order; exact matches take precedence over heuristic
            spans starting at the same offset
        """
        if not text:
            return []

        exact = self.exact_matches(text, messaging)
        heuristic = self.heuristic_candidates(text)
        merged = merge_spans(exact) + merge_spans(heuristic)

        spans = [
            HighlightSpan(run.start, run.start + len(run.text), run.category)
            for run in resolve_runs(text, merged)
            if run.category is not None
        ]
        logger.debug(
            "Attributed %d spans (%d exact, %d heuristic candidates)",
            len(spans),
            len(exact),
            len(heuristic),
        )
        return spans

    def highlight(self, text: str, messaging: CoreMessaging) -> list[HighlightRun]:
        """Attribute and resolve in one step."""
        return resolve_runs(text, self.attribute(text, messaging))
