"""Lexicon-based clause classifier.

Generated copy paraphrases the user's problem and differentiator rather than
quoting them, so attribution falls back to counting indicator terms. Terms
match as case-insensitive substrings, so inflected forms count too
("manual" in "manually", "fast" in "faster", "fail" in "failure"), and each
occurrence of a term in the clause counts once.
"""

from collections.abc import Iterable

from positioning_rag.protocols import ClauseKind

PROBLEM_LEXICON: tuple[str, ...] = (
    "lack", "no", "without", "difficult", "challenge", "issue", "problem", "struggle",
    "fail", "unable", "can't", "don't", "until", "before", "complain", "frustrated",
    "slow", "manual", "inefficient", "time-consuming", "expensive", "costly",
)

SOLUTION_LEXICON: tuple[str, ...] = (
    "predicts", "provides", "enables", "allows", "helps", "gives", "offers", "delivers",
    "automatically", "proactive", "advance", "real-time", "instant", "fast",
    "efficient", "easy", "simple", "automated",
)


def _count_terms(clause: str, terms: tuple[str, ...]) -> int:
    lowered = clause.lower()
    return sum(lowered.count(term) for term in terms)


class LexiconClauseClassifier:
    """Classifies clauses by counting problem vs. solution indicator words.

    A clause is PROBLEM when its problem count is positive and exceeds the
    solution count, SOLUTION when it has any solution hits and is not
    outweighed by problem hits, and NONE otherwise.
    """

    def __init__(
        self,
        problem_terms: Iterable[str] = PROBLEM_LEXICON,
        solution_terms: Iterable[str] = SOLUTION_LEXICON,
    ) -> None:
        self._problem = tuple(term.lower() for term in problem_terms if term)
        self._solution = tuple(term.lower() for term in solution_terms if term)

    def scores(self, clause: str) -> tuple[int, int]:
        """Return (problem_hits, solution_hits) for ``clause``."""
        return _count_terms(clause, self._problem), _count_terms(clause, self._solution)

    def classify(self, clause: str) -> ClauseKind:
        problem_score, solution_score = self.scores(clause)
        if problem_score > solution_score and problem_score > 0:
            return ClauseKind.PROBLEM
        if solution_score > 0:
            return ClauseKind.SOLUTION
        return ClauseKind.NONE
