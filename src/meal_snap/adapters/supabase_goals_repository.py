"""Supabase repository for user goals and settings."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from meal_snap.domain.nutrition import UserGoals
from meal_snap.services.goals import GoalsRepository


@dataclass
class SupabaseGoalsRepository(GoalsRepository):
    """Supabase implementation backed by the user_goals table."""

    client: Client

    def get_goals(self, user_id: UUID) -> UserGoals | None:
        """Return the stored goals for a user."""
        row = self._get_row(
            user_id,
            "daily_calories, daily_carbs, daily_protein, daily_fat, daily_fiber",
        )
        if row is None or row.get("daily_calories") is None:
            return None
        return UserGoals(
            daily_calories=float(row["daily_calories"]),
            daily_carbs=float(row["daily_carbs"]),
            daily_protein=float(row["daily_protein"]),
            daily_fat=float(row["daily_fat"]),
            daily_fiber=float(row["daily_fiber"]),
        )

    def set_goals(self, user_id: UUID, goals: UserGoals) -> None:
        """Store goals for a user."""
        self._upsert(
            user_id,
            {
                "daily_calories": goals.daily_calories,
                "daily_carbs": goals.daily_carbs,
                "daily_protein": goals.daily_protein,
                "daily_fat": goals.daily_fat,
                "daily_fiber": goals.daily_fiber,
            },
        )

    def get_diet_days(self, user_id: UUID) -> frozenset[int] | None:
        """Return stored diet weekday indices."""
        row = self._get_row(user_id, "diet_days")
        if row is None or row.get("diet_days") is None:
            return None
        return frozenset(int(day) for day in row["diet_days"])

    def set_diet_days(self, user_id: UUID, diet_days: frozenset[int]) -> None:
        """Store diet weekday indices."""
        self._upsert(user_id, {"diet_days": sorted(diet_days)})

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the stored timezone for a user."""
        row = self._get_row(user_id, "timezone")
        if row is None:
            return None
        return row.get("timezone")

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Update the user's timezone."""
        self._upsert(user_id, {"timezone": timezone})

    def _get_row(self, user_id: UUID, columns: str) -> dict[str, object] | None:
        response = (
            self.client.table("user_goals")
            .select(columns)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def _upsert(self, user_id: UUID, values: dict[str, object]) -> None:
        self.client.table("user_goals").upsert(
            {
                "user_id": str(user_id),
                **values,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
