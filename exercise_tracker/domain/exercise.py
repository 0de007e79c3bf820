from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Exercise:
    """A single logged exercise referencing its owning user."""

    exercise_id: str
    user_id: str
    description: str
    duration: float
    date: datetime
    created_at: datetime
