"""Prometheus collectors shared by the HTTP layer."""

from __future__ import annotations

from prometheus_client import Counter

USERS_CREATED = Counter(
    "exercise_tracker_users_created_total",
    "Users created through the API.",
)
EXERCISES_LOGGED = Counter(
    "exercise_tracker_exercises_logged_total",
    "Exercises logged through the API.",
)
REQUEST_ERRORS = Counter(
    "exercise_tracker_request_errors_total",
    "Requests answered with an error response.",
    ["error"],
)
