"""Pure nutrition aggregation over meal snapshots.

Nothing in this module performs I/O or holds state. Callers load meals,
summaries and goals from their repositories and pass snapshots in.

Calendar days are always the user's local days: aware datetimes are converted
to the given zone before their date is taken, naive datetimes are assumed to be
local already.
"""

import math
from collections.abc import Collection, Iterable
from datetime import date, datetime, timedelta, tzinfo
from uuid import UUID

from meal_snap.domain.meals import Meal
from meal_snap.domain.nutrition import NUTRIENTS, NutritionData, UserGoals
from meal_snap.domain.stats import (
    DailyProgress,
    DailySummary,
    MacroProgress,
    WeeklyDay,
    WeeklyReport,
    WeeklyStats,
)

WEEK_DAYS = 7
DEFAULT_TOLERANCE = 1e-6


def local_day(moment: datetime, tz: tzinfo | None = None) -> date:
    """Return the calendar day of a moment in the given zone."""
    if tz is None or moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def weekday_index(day: date) -> int:
    """Return the weekday with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % WEEK_DAYS


def recompute_daily_summary(
    meals: Iterable[Meal],
    day: date,
    user_id: UUID,
    tz: tzinfo | None = None,
) -> DailySummary:
    """Sum the effective nutrition of a user's meals on a calendar day."""
    if isinstance(day, datetime):
        day = local_day(day, tz)
    contributions = [
        meal.effective_nutrition()
        for meal in meals
        if meal.user_id == user_id and local_day(meal.logged_at, tz) == day
    ]
    if not contributions:
        return DailySummary.empty(user_id, day)
    # fsum is correctly rounded, so the result does not depend on meal order.
    totals = NutritionData(
        **{
            name: math.fsum(getattr(item, name) for item in contributions)
            for name in NUTRIENTS
        }
    )
    return _with_totals(
        DailySummary.empty(user_id, day), totals, meals_count=len(contributions)
    )


def apply_incremental_add(summary: DailySummary, meal: Meal) -> DailySummary:
    """Add a meal's effective nutrition to a summary."""
    totals = summary.totals().plus(meal.effective_nutrition())
    return _with_totals(summary, totals, meals_count=summary.meals_count + 1)


def apply_incremental_remove(summary: DailySummary, meal: Meal) -> DailySummary:
    """Remove a meal's effective nutrition from a summary."""
    totals = summary.totals().minus(meal.effective_nutrition())
    return _with_totals(summary, totals, meals_count=summary.meals_count - 1)


def summaries_agree(
    left: DailySummary, right: DailySummary, tolerance: float = DEFAULT_TOLERANCE
) -> bool:
    """Return True when two summaries match up to floating drift."""
    if left.meals_count != right.meals_count:
        return False
    left_totals = left.totals()
    right_totals = right.totals()
    return all(
        math.isclose(
            getattr(left_totals, name),
            getattr(right_totals, name),
            rel_tol=tolerance,
            abs_tol=tolerance,
        )
        for name in NUTRIENTS
    )


def progress_ratio(current: float, goal: float) -> float:
    """Return the progress towards a goal, capped at 1.0 for indicators."""
    _require_positive_goal(goal)
    return min(current / goal, 1.0)


def unbounded_ratio(current: float, goal: float) -> float:
    """Return the raw progress towards a goal; values above 1.0 are over target."""
    _require_positive_goal(goal)
    return current / goal


def macro_progress(current: float, goal: float) -> MacroProgress:
    raw = unbounded_ratio(current, goal)
    return MacroProgress(
        current=current,
        goal=goal,
        ratio=progress_ratio(current, goal),
        unbounded_ratio=raw,
        is_over=current > goal,
        remaining=max(goal - current, 0.0),
    )


def daily_progress(summary: DailySummary, goals: UserGoals) -> DailyProgress:
    """Compare every nutrient total of a day with its goal."""
    totals = summary.totals()
    return DailyProgress(
        **{
            name: macro_progress(getattr(totals, name), goals.for_nutrient(name))
            for name in NUTRIENTS
        }
    )


def build_weekly_report(
    daily_summaries: Iterable[DailySummary],
    goals: UserGoals,
    diet_days: Collection[int],
    reference_date: date,
) -> WeeklyReport:
    """Build the seven-day window ending on the reference date.

    Totals, tracked days and the average only count designated diet days. With
    no diet days the target is 0 and any calories logged in the window put
    the week off track.
    """
    calories_by_day: dict[date, float] = {}
    for summary in daily_summaries:
        calories_by_day[summary.day] = (
            calories_by_day.get(summary.day, 0.0) + summary.total_calories
        )

    days: list[WeeklyDay] = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = reference_date - timedelta(days=offset)
        days.append(
            WeeklyDay(
                day=day,
                total_calories=calories_by_day.get(day, 0.0),
                is_diet_day=weekday_index(day) in diet_days,
            )
        )

    diet_entries = [entry for entry in days if entry.is_diet_day]
    total_calories = math.fsum(entry.total_calories for entry in diet_entries)
    days_tracked = sum(1 for entry in diet_entries if entry.total_calories > 0)
    avg_calories = total_calories / days_tracked if days_tracked > 0 else 0.0
    weekly_target = goals.daily_calories * len(diet_entries)
    if weekly_target > 0:
        on_track = total_calories <= weekly_target
    else:
        on_track = math.fsum(entry.total_calories for entry in days) == 0

    return WeeklyReport(
        days=days,
        stats=WeeklyStats(
            total_calories=total_calories,
            avg_calories=avg_calories,
            days_tracked=days_tracked,
            diet_days_count=len(diet_entries),
            weekly_target=weekly_target,
            on_track=on_track,
        ),
    )


def _require_positive_goal(goal: float) -> None:
    if not goal > 0:
        raise ValueError(f"goal must be positive, got {goal}")


def _with_totals(
    summary: DailySummary, totals: NutritionData, meals_count: int
) -> DailySummary:
    return DailySummary(
        user_id=summary.user_id,
        day=summary.day,
        total_calories=totals.calories,
        total_carbs=totals.carbs,
        total_protein=totals.protein,
        total_fat=totals.fat,
        total_fiber=totals.fiber,
        meals_count=meals_count,
    )
