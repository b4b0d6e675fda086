"""User goals, diet days and timezone settings."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from meal_snap.domain.nutrition import DEFAULT_DIET_DAYS, DEFAULT_GOALS, UserGoals

WEEKDAY_INDICES = range(7)


class GoalsRepository(Protocol):
    """Persistence interface for per-user goals and settings."""

    def get_goals(self, user_id: UUID) -> UserGoals | None:
        """Return stored goals, if any."""

    def set_goals(self, user_id: UUID, goals: UserGoals) -> None:
        """Store goals for a user."""

    def get_diet_days(self, user_id: UUID) -> frozenset[int] | None:
        """Return stored diet weekday indices, if any."""

    def set_diet_days(self, user_id: UUID, diet_days: frozenset[int]) -> None:
        """Store diet weekday indices for a user."""

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the user's timezone if set."""

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Update the user's timezone."""


@dataclass
class GoalsService:
    """Service for goals and calendar settings with defaults."""

    repository: GoalsRepository
    default_timezone: str = "UTC"

    def get_goals(self, user_id: UUID) -> UserGoals:
        """Return the user's goals or the defaults."""
        return self.repository.get_goals(user_id) or DEFAULT_GOALS

    def set_goals(self, user_id: UUID, goals: UserGoals) -> UserGoals:
        """Validate and persist goals."""
        for name, value in vars(goals).items():
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number")
        self.repository.set_goals(user_id, goals)
        return goals

    def get_diet_days(self, user_id: UUID) -> frozenset[int]:
        stored = self.repository.get_diet_days(user_id)
        return DEFAULT_DIET_DAYS if stored is None else stored

    def set_diet_days(self, user_id: UUID, diet_days: Iterable[int]) -> frozenset[int]:
        """Persist diet days; an empty set is allowed."""
        resolved = frozenset(diet_days)
        invalid = sorted(day for day in resolved if day not in WEEKDAY_INDICES)
        if invalid:
            raise ValueError(f"weekday indices must be between 0 and 6: {invalid}")
        self.repository.set_diet_days(user_id, resolved)
        return resolved

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone or the configured default."""
        return self.repository.get_timezone(user_id) or self.default_timezone

    def get_zone(self, user_id: UUID) -> ZoneInfo:
        return ZoneInfo(self.get_timezone(user_id))

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Persist a user's timezone after checking it exists."""
        if not is_valid_timezone(timezone):
            raise ValueError(f"unknown timezone: {timezone}")
        self.repository.set_timezone(user_id, timezone)


def is_valid_timezone(value: str) -> bool:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True
