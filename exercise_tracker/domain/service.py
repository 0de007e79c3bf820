"""User and exercise stores orchestrating validation, persistence, and read models."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Protocol

from .contracts import CreateExerciseInput, LogQuery
from .errors import NotFoundError, ValidationError
from .exercise import Exercise
from .user import User
from .views import ExerciseCreated, UserWithLog

logger = logging.getLogger(__name__)


class TrackerStorage(Protocol):
    """Persistence operations the stores rely on."""

    def create_user(self, username: str) -> User: ...

    def list_users(self) -> list[User]: ...

    def get_user(self, user_id: str) -> User | None: ...

    def create_exercise(self, payload: CreateExerciseInput) -> Exercise: ...

    def list_exercises(self, user_id: str, query: LogQuery) -> list[Exercise]: ...

    def count_exercises(self, user_id: str, query: LogQuery, *, apply_limit: bool) -> int: ...


def parse_date(value: str, field_name: str) -> datetime:
    """Parse ``YYYY-MM-DD`` or an ISO-8601 timestamp into an aware UTC datetime.

    Bare calendar dates resolve to midnight UTC; timestamps without an offset
    are taken as UTC.
    """
    text = value.strip()
    try:
        if len(text) == 10:
            return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"{field_name}: invalid date '{value}'") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_duration(value: str | float | int | None) -> float:
    """Return the duration in minutes, rejecting missing or non-numeric input."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("duration is required")
    try:
        duration = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"duration: '{value}' is not a number") from exc
    if not math.isfinite(duration):
        raise ValidationError(f"duration: '{value}' is not a number")
    return duration


def parse_limit(value: str | int | None) -> int | None:
    """Interpret a log limit; empty, zero and negative values mean no limit."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        limit = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"limit: '{value}' is not an integer") from exc
    return limit if limit > 0 else None


def build_log_query(
    date_from: str | None = None,
    date_to: str | None = None,
    limit: str | int | None = None,
) -> LogQuery:
    """Build a ``LogQuery`` from raw request values.

    A range is only recorded when both bounds are given; a lone ``from`` or
    ``to`` leaves the log unfiltered.
    """
    query = LogQuery(limit=parse_limit(limit))
    if date_from and date_to:
        query.date_from = parse_date(date_from, "from")
        query.date_to = parse_date(date_to, "to")
    return query


class UserStore:
    """User workflows over the users collection."""

    def __init__(self, repository: TrackerStorage) -> None:
        self._repository = repository

    def list_users(self) -> list[User]:
        return self._repository.list_users()

    def create_user(self, username: str | None) -> User:
        """Persist a new user; the username must be non-empty."""
        if not username or not username.strip():
            raise ValidationError("username is required")
        user = self._repository.create_user(username)
        logger.info("created user %s (%s)", user.user_id, user.username)
        return user

    def get_user(self, user_id: str) -> User | None:
        return self._repository.get_user(user_id)

    def require_user(self, user_id: str) -> User:
        """Return the user or raise ``NotFoundError``."""
        user = self._repository.get_user(user_id)
        if user is None:
            raise NotFoundError(f"Could not find user with id '{user_id}'")
        return user


class ExerciseStore:
    """Exercise logging and log retrieval scoped to an existing user."""

    def __init__(self, repository: TrackerStorage, users: UserStore, *, count_applies_limit: bool = True) -> None:
        """Store dependencies and the count policy.

        Parameters
        ----------
        repository:
            Persistence backend for exercises.
        users:
            Store used to resolve the owning user before any exercise operation.
        count_applies_limit:
            When true ``count`` is computed under the same limit as the log
            entries; otherwise it reflects the whole filtered set.
        """
        self._repository = repository
        self._users = users
        self._count_applies_limit = count_applies_limit

    def create_exercise(
        self,
        user_id: str,
        description: str | None,
        duration: str | float | None,
        date: str | datetime | None = None,
    ) -> ExerciseCreated:
        """Log an exercise for ``user_id`` and return the creation response shape."""
        user = self._users.require_user(user_id)
        if not description or not description.strip():
            raise ValidationError("description is required")
        minutes = parse_duration(duration)

        if isinstance(date, datetime):
            when = date
        elif date:
            when = parse_date(date, "date")
        else:
            when = datetime.now(timezone.utc)

        exercise = self._repository.create_exercise(
            CreateExerciseInput(
                user_id=user.user_id,
                description=description,
                duration=minutes,
                date=when,
            )
        )
        logger.info("logged exercise %s for user %s", exercise.exercise_id, user.user_id)
        return ExerciseCreated.from_records(user, exercise)

    def get_log(self, user_id: str, query: LogQuery | None = None) -> UserWithLog:
        """Return the user with their filtered, limited log and its count."""
        query = query or LogQuery()
        user = self._users.require_user(user_id)
        exercises = self._repository.list_exercises(user.user_id, query)
        count = self._repository.count_exercises(
            user.user_id, query, apply_limit=self._count_applies_limit
        )
        return UserWithLog.from_records(user, exercises, count)
