from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from exercise_tracker.api import routes
from exercise_tracker.domain.contracts import CreateExerciseInput, LogQuery
from exercise_tracker.domain.exercise import Exercise
from exercise_tracker.domain.service import ExerciseStore, UserStore
from exercise_tracker.domain.user import User


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviors."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.exercises: list[Exercise] = []

    def create_user(self, username: str) -> User:
        user = User(user_id=str(uuid.uuid4()), username=username)
        self.users[user.user_id] = user
        return user

    def list_users(self) -> list[User]:
        return list(self.users.values())

    def get_user(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    def create_exercise(self, payload: CreateExerciseInput) -> Exercise:
        exercise = Exercise(
            exercise_id=str(uuid.uuid4()),
            user_id=payload.user_id,
            description=payload.description,
            duration=payload.duration,
            date=payload.date,
            created_at=datetime.now(timezone.utc),
        )
        self.exercises.append(exercise)
        return exercise

    def _matching(self, user_id: str, query: LogQuery) -> list[Exercise]:
        results = [exercise for exercise in self.exercises if exercise.user_id == user_id]
        if query.has_range:
            results = [
                exercise
                for exercise in results
                if query.date_from <= exercise.date <= query.date_to
            ]
        return results

    def list_exercises(self, user_id: str, query: LogQuery) -> list[Exercise]:
        results = self._matching(user_id, query)
        if query.limit is not None:
            results = results[: query.limit]
        return results

    def count_exercises(self, user_id: str, query: LogQuery, *, apply_limit: bool) -> int:
        results = self._matching(user_id, query)
        if apply_limit and query.limit is not None:
            results = results[: query.limit]
        return len(results)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def user_store(repository) -> UserStore:
    return UserStore(repository)


@pytest.fixture
def exercise_store(repository, user_store) -> ExerciseStore:
    return ExerciseStore(repository, user_store)


@pytest.fixture
def api_client(repository, user_store, exercise_store):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.user_store = user_store
    app.state.exercise_store = exercise_store

    with TestClient(app) as client:
        yield client, repository
