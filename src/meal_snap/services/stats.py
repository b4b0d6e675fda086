"""Statistics service for daily and weekly nutrition."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from uuid import UUID

from meal_snap.domain.meals import Meal
from meal_snap.domain.nutrition import UserGoals
from meal_snap.domain.stats import DailyProgress, DailySummary, WeeklyReport
from meal_snap.services.aggregation import (
    WEEK_DAYS,
    build_weekly_report,
    daily_progress,
    recompute_daily_summary,
)
from meal_snap.services.goals import GoalsService
from meal_snap.services.meals import DailySummaryRepository, MealService


@dataclass(frozen=True)
class DailyOverview:
    """A day's meals, totals and progress against goals."""

    summary: DailySummary
    meals: list[Meal]
    goals: UserGoals
    progress: DailyProgress


@dataclass
class StatsService:
    """Service for computing user stats in the user's local calendar."""

    meal_service: MealService
    summary_repository: DailySummaryRepository
    goals_service: GoalsService

    def today(self, user_id: UUID) -> date:
        """Return today's date in the user's timezone."""
        return datetime.now(tz=self.goals_service.get_zone(user_id)).date()

    def get_day(self, user_id: UUID, day: date | None = None) -> DailyOverview:
        """Return a day's totals recomputed from its meals."""
        resolved_day = day or self.today(user_id)
        meals = self.meal_service.list_meals_for_day(user_id, resolved_day)
        summary = recompute_daily_summary(
            meals, resolved_day, user_id, self.goals_service.get_zone(user_id)
        )
        goals = self.goals_service.get_goals(user_id)
        return DailyOverview(
            summary=summary,
            meals=meals,
            goals=goals,
            progress=daily_progress(summary, goals),
        )

    def get_week(
        self, user_id: UUID, reference_date: date | None = None
    ) -> WeeklyReport:
        """Return the last seven days ending on the reference date."""
        end = reference_date or self.today(user_id)
        start = end - timedelta(days=WEEK_DAYS - 1)
        summaries = self.summary_repository.list_summaries(user_id, start, end)
        return build_weekly_report(
            summaries,
            goals=self.goals_service.get_goals(user_id),
            diet_days=self.goals_service.get_diet_days(user_id),
            reference_date=end,
        )
