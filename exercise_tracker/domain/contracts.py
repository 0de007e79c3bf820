"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class CreateExerciseInput:
    """Validated inputs required to log an exercise for a user."""

    user_id: str
    description: str
    duration: float
    date: datetime


@dataclass(slots=True)
class LogQuery:
    """Filter and limit applied to a user's exercise log.

    The date range only takes effect when both bounds are set.
    """

    date_from: datetime | None = None
    date_to: datetime | None = None
    limit: int | None = None

    @property
    def has_range(self) -> bool:
        return self.date_from is not None and self.date_to is not None
