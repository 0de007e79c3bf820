"""Database repository for users and their exercise records."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

import psycopg
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.contracts import CreateExerciseInput, LogQuery
from .domain.errors import PersistenceError
from .domain.exercise import Exercise
from .domain.user import User

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id TEXT PRIMARY KEY,
        seq BIGINT GENERATED ALWAYS AS IDENTITY,
        username TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS exercises (
        exercise_id TEXT PRIMARY KEY,
        seq BIGINT GENERATED ALWAYS AS IDENTITY,
        user_id TEXT NOT NULL REFERENCES users (user_id),
        description TEXT NOT NULL,
        duration DOUBLE PRECISION NOT NULL,
        date TIMESTAMPTZ NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS exercises_user_seq_idx ON exercises (user_id, seq)",
)


def build_log_filter(user_id: str, query: LogQuery) -> tuple[str, list[Any]]:
    """Return the WHERE clause and parameters selecting a user's log entries."""
    clauses = ["user_id = %s"]
    params: list[Any] = [user_id]
    if query.has_range:
        clauses.append("date >= %s")
        params.append(query.date_from)
        clauses.append("date <= %s")
        params.append(query.date_to)
    return " AND ".join(clauses), params


class TrackerRepository:
    """Postgres-backed store for the ``users`` and ``exercises`` collections."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        try:
            with self._pool.connection() as conn:
                yield conn
        except psycopg.Error as exc:
            raise PersistenceError(str(exc)) from exc

    def ensure_schema(self) -> None:
        """Create the tables and index when they do not exist yet."""
        with self._connection() as conn:
            with conn.cursor() as cur:
                for statement in SCHEMA_STATEMENTS:
                    cur.execute(statement)
            conn.commit()

    def create_user(self, username: str) -> User:
        """Insert a user with a freshly assigned identifier."""
        user_id = str(uuid.uuid4())
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    INSERT INTO users (user_id, username)
                    VALUES (%s, %s)
                    RETURNING user_id, username
                    """,
                    (user_id, username),
                )
                row = cur.fetchone()
            conn.commit()
        return User(user_id=row[0], username=row[1])

    def list_users(self) -> list[User]:
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute("SELECT user_id, username FROM users ORDER BY seq")
                rows = cur.fetchall()
        return [User(user_id=row[0], username=row[1]) for row in rows]

    def get_user(self, user_id: str) -> User | None:
        """Fetch a user by id or return ``None``."""
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    "SELECT user_id, username FROM users WHERE user_id = %s",
                    (user_id,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return User(user_id=row[0], username=row[1])

    def create_exercise(self, payload: CreateExerciseInput) -> Exercise:
        """Persist an exercise referencing ``payload.user_id``."""
        exercise_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    INSERT INTO exercises (exercise_id, user_id, description, duration, date, created_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING exercise_id, user_id, description, duration, date, created_at
                    """,
                    (
                        exercise_id,
                        payload.user_id,
                        payload.description,
                        payload.duration,
                        payload.date,
                        now,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        return self._map_exercise(row)

    def list_exercises(self, user_id: str, query: LogQuery) -> list[Exercise]:
        """Return a user's exercises in insertion order, filtered and limited by ``query``."""
        where_sql, params = build_log_filter(user_id, query)
        sql = f"""
            SELECT exercise_id, user_id, description, duration, date, created_at
            FROM exercises
            WHERE {where_sql}
            ORDER BY seq
        """
        if query.limit is not None:
            sql += " LIMIT %s"
            params.append(query.limit)

        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()
        return [self._map_exercise(row) for row in rows]

    def count_exercises(self, user_id: str, query: LogQuery, *, apply_limit: bool) -> int:
        """Count a user's exercises matching the filter, optionally capped by the limit."""
        where_sql, params = build_log_filter(user_id, query)
        if apply_limit and query.limit is not None:
            sql = f"""
                SELECT COUNT(*) FROM (
                    SELECT 1 FROM exercises WHERE {where_sql} ORDER BY seq LIMIT %s
                ) AS limited
            """
            params.append(query.limit)
        else:
            sql = f"SELECT COUNT(*) FROM exercises WHERE {where_sql}"

        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
        return int(row[0])

    def _map_exercise(self, row: tuple) -> Exercise:
        """Convert a raw database tuple into the domain ``Exercise`` dataclass."""
        return Exercise(
            exercise_id=row[0],
            user_id=row[1],
            description=row[2],
            duration=row[3],
            date=row[4],
            created_at=row[5],
        )
