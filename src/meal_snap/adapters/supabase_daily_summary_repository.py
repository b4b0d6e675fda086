"""Supabase repository for cached daily summaries."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from meal_snap.domain.stats import DailySummary
from meal_snap.services.meals import DailySummaryRepository

SUMMARY_COLUMNS = (
    "user_id, date, total_calories, total_carbs, total_protein, total_fat, "
    "total_fiber, meals_count"
)


@dataclass
class SupabaseDailySummaryRepository(DailySummaryRepository):
    """Supabase implementation for daily summaries."""

    client: Client

    def get_summary(self, user_id: UUID, day: date) -> DailySummary | None:
        """Return the summary row for a user and day."""
        response = (
            self.client.table("daily_summaries")
            .select(SUMMARY_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def list_summaries(self, user_id: UUID, start: date, end: date) -> list[DailySummary]:
        """Return summaries for days in the inclusive range."""
        response = (
            self.client.table("daily_summaries")
            .select(SUMMARY_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def save_summary(self, summary: DailySummary) -> None:
        """Upsert the summary keyed by user and day."""
        self.client.table("daily_summaries").upsert(
            {
                "user_id": str(summary.user_id),
                "date": summary.day.isoformat(),
                "total_calories": summary.total_calories,
                "total_carbs": summary.total_carbs,
                "total_protein": summary.total_protein,
                "total_fat": summary.total_fat,
                "total_fiber": summary.total_fiber,
                "meals_count": summary.meals_count,
            },
            on_conflict="user_id,date",
        ).execute()


def _parse_row(row: dict[str, object]) -> DailySummary:
    return DailySummary(
        user_id=UUID(str(row["user_id"])),
        day=date.fromisoformat(str(row["date"])),
        total_calories=float(row.get("total_calories") or 0.0),
        total_carbs=float(row.get("total_carbs") or 0.0),
        total_protein=float(row.get("total_protein") or 0.0),
        total_fat=float(row.get("total_fat") or 0.0),
        total_fiber=float(row.get("total_fiber") or 0.0),
        meals_count=int(row.get("meals_count") or 0),
    )
