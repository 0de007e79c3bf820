"""HTTP route definitions for the exercise tracker."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from ..domain.errors import TrackerError
from ..domain.service import ExerciseStore, UserStore, build_log_query
from ..domain.user import User
from ..domain.views import ExerciseCreated, ExerciseView, UserWithLog
from ..metrics import EXERCISES_LOGGED, REQUEST_ERRORS, USERS_CREATED

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class UserResponse(BaseModel):
    """Serialised representation of a `User`."""

    id: str
    username: str

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(id=user.user_id, username=user.username)


class ExerciseCreatedResponse(BaseModel):
    """Returned after logging an exercise; `id` and `username` belong to the owner."""

    id: str
    username: str
    description: str
    duration: int | float
    date: str

    @classmethod
    def from_domain(cls, created: ExerciseCreated) -> "ExerciseCreatedResponse":
        return cls(
            id=created.id,
            username=created.username,
            description=created.description,
            duration=created.duration,
            date=created.date,
        )


class LogEntry(BaseModel):
    description: str
    duration: int | float
    date: str

    @classmethod
    def from_domain(cls, view: ExerciseView) -> "LogEntry":
        return cls(description=view.description, duration=view.duration, date=view.date)


class UserLogResponse(BaseModel):
    """A user with their exercise log and its count."""

    id: str
    username: str
    count: int
    log: list[LogEntry] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: UserWithLog) -> "UserLogResponse":
        return cls(
            id=result.id,
            username=result.username,
            count=result.count,
            log=[LogEntry.from_domain(entry) for entry in result.log],
        )


def get_user_store(request: Request) -> UserStore:
    """Resolve the `UserStore` stored on the FastAPI application state."""
    store: UserStore = request.app.state.user_store
    return store


def get_exercise_store(request: Request) -> ExerciseStore:
    """Resolve the `ExerciseStore` stored on the FastAPI application state."""
    store: ExerciseStore = request.app.state.exercise_store
    return store


@router.get("/users", response_model=list[UserResponse])
def list_users(users: UserStore = Depends(get_user_store)):
    """List every user with id and username only."""
    try:
        return [UserResponse.from_domain(user) for user in users.list_users()]
    except TrackerError as exc:
        return _error_response(exc, "listing users")


@router.post("/users", response_model=UserResponse)
def create_user(
    username: str | None = Form(default=None),
    users: UserStore = Depends(get_user_store),
):
    """Create a user from the `username` form field."""
    try:
        user = users.create_user(username)
    except TrackerError as exc:
        return _error_response(exc, "creating user")
    USERS_CREATED.inc()
    return UserResponse.from_domain(user)


@router.post("/users/{user_id}/exercises", response_model=ExerciseCreatedResponse)
def create_exercise(
    user_id: str,
    description: str | None = Form(default=None),
    duration: str | None = Form(default=None),
    date: str | None = Form(default=None),
    exercises: ExerciseStore = Depends(get_exercise_store),
):
    """Log an exercise for an existing user."""
    try:
        created = exercises.create_exercise(user_id, description, duration, date)
    except TrackerError as exc:
        return _error_response(exc, "logging exercise")
    EXERCISES_LOGGED.inc()
    return ExerciseCreatedResponse.from_domain(created)


@router.get("/users/{user_id}/logs", response_model=UserLogResponse)
def get_logs(
    user_id: str,
    date_from: str | None = Query(default=None, alias="from"),
    date_to: str | None = Query(default=None, alias="to"),
    limit: str | None = Query(default=None),
    exercises: ExerciseStore = Depends(get_exercise_store),
):
    """Return the user's log, filtered by `from`/`to` when both are given and capped by `limit`."""
    try:
        result = exercises.get_log(user_id, build_log_query(date_from, date_to, limit))
    except TrackerError as exc:
        return _error_response(exc, "reading logs")
    return UserLogResponse.from_domain(result)


def _error_response(exc: TrackerError, action: str) -> PlainTextResponse:
    # every failure is reported the same way: 500 with the error text
    logger.error("error while %s: %s", action, exc)
    REQUEST_ERRORS.labels(error=type(exc).__name__).inc()
    return PlainTextResponse(
        f"{type(exc).__name__}: {exc}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
