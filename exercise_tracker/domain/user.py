from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class User:
    """Owner of an exercise log; count and log are derived at read time."""

    user_id: str
    username: str
