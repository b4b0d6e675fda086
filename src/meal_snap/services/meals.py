"""Meal logging service."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from meal_snap.domain.meals import (
    Meal,
    MealDraft,
    MealType,
    validate_confidence,
    validate_nutrition,
    validate_servings,
)
from meal_snap.domain.nutrition import NutritionData
from meal_snap.domain.stats import DailySummary
from meal_snap.services.aggregation import (
    apply_incremental_add,
    apply_incremental_remove,
    local_day,
    recompute_daily_summary,
    summaries_agree,
)
from meal_snap.services.goals import GoalsService

logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        logged_at: datetime,
        meal_type: MealType,
        image_url: str,
        servings: float,
        nutrition: NutritionData,
        foods: list[str],
        confidence: float,
    ) -> Meal:
        """Create a meal and return it with its id."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Meal]:
        """Return a user's meals, optionally within [start, end)."""

    def update_meal_type(self, meal_id: UUID, meal_type: MealType) -> None:
        """Reclassify a meal."""

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal."""


class DailySummaryRepository(Protocol):
    """Persistence interface for cached daily summaries."""

    def get_summary(self, user_id: UUID, day: date) -> DailySummary | None:
        """Return the cached summary for a day, if any."""

    def list_summaries(self, user_id: UUID, start: date, end: date) -> list[DailySummary]:
        """Return cached summaries for days in [start, end]."""

    def save_summary(self, summary: DailySummary) -> None:
        """Insert or replace the summary for its user and day."""


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of comparing a cached summary with a recomputed one."""

    summary: DailySummary
    cached: DailySummary | None
    drifted: bool


@dataclass
class MealService:
    """Persists meals and keeps the cached daily summaries in step."""

    repository: MealRepository
    summary_repository: DailySummaryRepository
    goals_service: GoalsService

    def log_meal(
        self,
        user_id: UUID,
        draft: MealDraft,
        logged_at: datetime | None = None,
    ) -> Meal:
        """Persist a confirmed draft and add it to its day's summary."""
        validate_servings(draft.servings)
        validate_nutrition(draft.nutrition)
        validate_confidence(draft.confidence)
        meal = self.repository.create_meal(
            user_id=user_id,
            logged_at=logged_at or datetime.now(tz=UTC),
            meal_type=draft.meal_type,
            image_url=draft.image_url,
            servings=draft.servings,
            nutrition=draft.nutrition,
            foods=list(draft.foods),
            confidence=draft.confidence,
        )
        day = self._meal_day(meal)
        current = self.summary_repository.get_summary(user_id, day)
        self.summary_repository.save_summary(
            apply_incremental_add(current or DailySummary.empty(user_id, day), meal)
        )
        logger.info(
            "Meal logged",
            extra={"user_id": str(user_id), "meal_id": str(meal.id)},
        )
        return meal

    def get_meal(self, user_id: UUID, meal_id: UUID) -> Meal | None:
        meal = self.repository.get_meal(meal_id)
        if meal is None or meal.user_id != user_id:
            return None
        return meal

    def list_meals_for_day(
        self, user_id: UUID, day: date, meal_type: MealType | None = None
    ) -> list[Meal]:
        """Return a user's meals on a local calendar day, oldest first.

        Pass ``meal_type`` to keep only meals of that type.
        """
        tz = self.goals_service.get_zone(user_id)
        start, end = day_bounds(day, tz)
        meals = self.repository.list_meals(user_id, start, end)
        return sorted(
            (
                meal
                for meal in meals
                if local_day(meal.logged_at, tz) == day
                and (meal_type is None or meal.meal_type == meal_type)
            ),
            key=lambda meal: meal.logged_at,
        )

    def change_timezone(self, user_id: UUID, timezone: str) -> list[date]:
        """Switch the user's timezone and rebuild the cached days it moves.

        Cached summaries are keyed by local day, so every day that held a meal
        under the old or the new zone is recomputed. Returns the days whose
        cache changed.
        """
        meals = self.repository.list_meals(user_id)
        old_tz = self.goals_service.get_zone(user_id)
        self.goals_service.set_timezone(user_id, timezone)
        new_tz = self.goals_service.get_zone(user_id)
        days = {local_day(meal.logged_at, old_tz) for meal in meals} | {
            local_day(meal.logged_at, new_tz) for meal in meals
        }
        repaired = [
            day for day in sorted(days) if self.reconcile_day(user_id, day).drifted
        ]
        logger.info(
            "Timezone changed",
            extra={
                "user_id": str(user_id),
                "timezone": timezone,
                "repaired_days": len(repaired),
            },
        )
        return repaired

    def reclassify_meal(
        self, user_id: UUID, meal_id: UUID, meal_type: MealType
    ) -> Meal | None:
        """Change a meal's type; totals are unaffected."""
        meal = self.get_meal(user_id, meal_id)
        if meal is None:
            return None
        self.repository.update_meal_type(meal_id, meal_type)
        return self.repository.get_meal(meal_id)

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> bool:
        """Delete a meal and remove its contribution from the cached summary."""
        meal = self.get_meal(user_id, meal_id)
        if meal is None:
            return False
        self.repository.delete_meal(meal_id)
        day = self._meal_day(meal)
        current = self.summary_repository.get_summary(user_id, day)
        if current is None:
            self.reconcile_day(user_id, day)
        else:
            self.summary_repository.save_summary(apply_incremental_remove(current, meal))
        logger.info(
            "Meal deleted",
            extra={"user_id": str(user_id), "meal_id": str(meal_id)},
        )
        return True

    def reconcile_day(self, user_id: UUID, day: date) -> ReconcileResult:
        """Recompute a day from its meals and repair the cached summary."""
        tz = self.goals_service.get_zone(user_id)
        start, end = day_bounds(day, tz)
        meals = self.repository.list_meals(user_id, start, end)
        recomputed = recompute_daily_summary(meals, day, user_id, tz)
        cached = self.summary_repository.get_summary(user_id, day)
        if cached is None:
            drifted = recomputed.meals_count > 0
        else:
            drifted = not summaries_agree(cached, recomputed)
        if drifted:
            if cached is not None:
                logger.warning(
                    "Daily summary drifted from meals",
                    extra={
                        "user_id": str(user_id),
                        "day": day.isoformat(),
                        "cached_calories": cached.total_calories,
                        "recomputed_calories": recomputed.total_calories,
                    },
                )
            self.summary_repository.save_summary(recomputed)
        return ReconcileResult(summary=recomputed, cached=cached, drifted=drifted)

    def _meal_day(self, meal: Meal) -> date:
        return local_day(meal.logged_at, self.goals_service.get_zone(meal.user_id))


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the UTC instants bounding a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)
