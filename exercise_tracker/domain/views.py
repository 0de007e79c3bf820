"""Read-model shapes returned by the stores.

Stored records never leave the domain layer directly: log entries drop the
owner reference and identifiers, and the creation response replaces the owner
reference with the owner's id and username.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .exercise import Exercise
from .user import User

CALENDAR_DATE_FORMAT = "%a %b %d %Y"


def format_calendar_date(value: datetime) -> str:
    """Render a timestamp as a calendar date such as ``Mon Jan 01 2024`` (UTC)."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(CALENDAR_DATE_FORMAT)


def normalize_duration(value: float) -> int | float:
    """Return integral durations as ``int`` so they serialise without a fraction."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(slots=True)
class ExerciseView:
    """One entry of a user's log."""

    description: str
    duration: int | float
    date: str

    @classmethod
    def from_exercise(cls, exercise: Exercise) -> "ExerciseView":
        return cls(
            description=exercise.description,
            duration=normalize_duration(exercise.duration),
            date=format_calendar_date(exercise.date),
        )


@dataclass(slots=True)
class ExerciseCreated:
    """Response to logging an exercise; ``id`` is the owning user's id."""

    id: str
    username: str
    description: str
    duration: int | float
    date: str

    @classmethod
    def from_records(cls, user: User, exercise: Exercise) -> "ExerciseCreated":
        return cls(
            id=user.user_id,
            username=user.username,
            description=exercise.description,
            duration=normalize_duration(exercise.duration),
            date=format_calendar_date(exercise.date),
        )


@dataclass(slots=True)
class UserWithLog:
    """A user together with their (filtered) exercise log and its count."""

    id: str
    username: str
    count: int
    log: list[ExerciseView] = field(default_factory=list)

    @classmethod
    def from_records(cls, user: User, exercises: list[Exercise], count: int) -> "UserWithLog":
        return cls(
            id=user.user_id,
            username=user.username,
            count=count,
            log=[ExerciseView.from_exercise(exercise) for exercise in exercises],
        )
