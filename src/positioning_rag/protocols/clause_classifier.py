"""Clause classification policy.

Phrase attribution needs to decide whether a clause of generated copy
paraphrases the user's problem statement or their differentiator. The
decision is a pluggable policy so it can be tuned or replaced without
touching span merging or run resolution.
"""

from enum import Enum
from typing import Protocol, runtime_checkable


class ClauseKind(str, Enum):
    """Outcome of classifying one clause."""

    PROBLEM = "problem"
    SOLUTION = "solution"
    NONE = "none"


@runtime_checkable
class ClauseClassifier(Protocol):
    """Protocol for clause classifiers."""

    def classify(self, clause: str) -> ClauseKind:
        """Classify a single clause."""
        ...
