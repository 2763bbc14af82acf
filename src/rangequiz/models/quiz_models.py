"""Models for quiz data structures."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

Number = Union[int, float]


class AnswerStatus(Enum):
    """State of the answer for the current hand."""
    AWAITING = "awaiting"  # No answer submitted yet
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class Item:
    """One row of the reference table merged with its miss history."""
    hand: str
    color: str
    players: Number
    misses: int = 1
    last_missed_at: Optional[str] = None  # ISO format datetime string


@dataclass(frozen=True)
class ProgressRecord:
    """Miss statistics of a single hand."""
    misses: int
    last_missed_at: Optional[str] = None  # ISO format datetime string


@dataclass(frozen=True)
class ProgressStore:
    """Lifetime miss total and per-hand records.

    ``total_misses`` is its own counter: it is incremented once per recorded
    miss and never recomputed from ``per_hand``.
    """
    total_misses: int = 0
    per_hand: Dict[str, ProgressRecord] = field(default_factory=dict)

    def get(self, hand: str) -> Optional[ProgressRecord]:
        """Get the record of a hand, if it was ever missed."""
        return self.per_hand.get(hand)


@dataclass(frozen=True)
class AnswerResult:
    """Outcome of an answered hand, used to render the result."""
    status: AnswerStatus
    selected_value: Optional[Number]
    item: Item

    @property
    def is_correct(self) -> bool:
        return self.status == AnswerStatus.CORRECT
