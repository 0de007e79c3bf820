"""Error taxonomy surfaced by the stores and the persistence layer."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for every failure reported to API callers."""


class ValidationError(TrackerError):
    """A required field is missing or has the wrong type."""


class NotFoundError(TrackerError):
    """A referenced user does not exist."""


class PersistenceError(TrackerError):
    """The underlying store rejected or failed an operation."""
