"""Tests for nutrition aggregation."""

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from meal_snap.domain.nutrition import DEFAULT_DIET_DAYS, DEFAULT_GOALS, UserGoals
from meal_snap.domain.stats import DailySummary
from meal_snap.services.aggregation import (
    apply_incremental_add,
    apply_incremental_remove,
    build_weekly_report,
    daily_progress,
    local_day,
    progress_ratio,
    recompute_daily_summary,
    summaries_agree,
    unbounded_ratio,
    weekday_index,
)
from tests.conftest import make_meal, make_summary

WEDNESDAY = date(2024, 3, 13)


def test_recompute_scales_by_servings(user_id, now) -> None:
    meal = make_meal(user_id, now, calories=200, carbs=30, servings=1.5)

    summary = recompute_daily_summary([meal], now.date(), user_id)

    assert summary.total_calories == 300
    assert summary.total_carbs == 45
    assert summary.meals_count == 1


def test_recompute_is_idempotent_and_order_independent(user_id, now) -> None:
    meals = [
        make_meal(user_id, now, calories=0.1, protein=0.7),
        make_meal(user_id, now + timedelta(hours=1), calories=0.2, protein=1.1),
        make_meal(user_id, now + timedelta(hours=2), calories=0.3, protein=2.3),
    ]

    first = recompute_daily_summary(meals, now.date(), user_id)
    second = recompute_daily_summary(meals, now.date(), user_id)
    reversed_order = recompute_daily_summary(list(reversed(meals)), now.date(), user_id)

    assert first == second
    assert first == reversed_order


def test_recompute_returns_zero_summary_for_empty_day(user_id, now) -> None:
    meal = make_meal(user_id, now - timedelta(days=1))

    summary = recompute_daily_summary([meal], now.date(), user_id)

    assert summary == DailySummary.empty(user_id, now.date())
    assert summary.meals_count == 0
    assert summary.total_calories == 0


def test_recompute_ignores_other_users(user_id, now) -> None:
    meals = [make_meal(user_id, now), make_meal(uuid4(), now, calories=900)]

    summary = recompute_daily_summary(meals, now.date(), user_id)

    assert summary.total_calories == 200
    assert summary.meals_count == 1


def test_recompute_uses_local_calendar_day(user_id) -> None:
    tz = ZoneInfo("America/Sao_Paulo")
    late_dinner = make_meal(user_id, datetime(2024, 3, 13, 2, 0, tzinfo=UTC))

    on_13th = recompute_daily_summary([late_dinner], date(2024, 3, 13), user_id, tz)
    on_12th = recompute_daily_summary([late_dinner], date(2024, 3, 12), user_id, tz)

    assert on_13th.meals_count == 0
    assert on_12th.meals_count == 1


def test_incremental_updates_match_recompute(user_id, now) -> None:
    first = make_meal(user_id, now, calories=200, servings=1.5)
    second = make_meal(user_id, now, calories=450.5, fat=12.5, servings=2)
    third = make_meal(user_id, now, calories=120, fiber=3.5, servings=0.5)

    summary = DailySummary.empty(user_id, now.date())
    for meal in (first, second, third):
        summary = apply_incremental_add(summary, meal)
    summary = apply_incremental_remove(summary, second)

    assert summary == recompute_daily_summary([first, third], now.date(), user_id)


def test_incremental_remove_inverts_add(user_id, now) -> None:
    start = make_summary(user_id, now.date(), calories=750)
    meal = make_meal(user_id, now, calories=320, servings=2.5)

    assert apply_incremental_remove(apply_incremental_add(start, meal), meal) == start


def test_summaries_agree_tolerates_float_drift(user_id, now) -> None:
    base = make_summary(user_id, now.date(), calories=0.3)
    drifted = make_summary(user_id, now.date(), calories=0.1 + 0.2)
    different = make_summary(user_id, now.date(), calories=12)

    assert summaries_agree(base, drifted)
    assert not summaries_agree(base, different)


def test_progress_ratio_clamps_but_unbounded_does_not() -> None:
    assert progress_ratio(1000, 2000) == 0.5
    assert progress_ratio(3000, 2000) == 1.0
    assert unbounded_ratio(3000, 2000) == 1.5


def test_progress_ratio_rejects_non_positive_goal() -> None:
    with pytest.raises(ValueError):
        progress_ratio(100, 0)
    with pytest.raises(ValueError):
        unbounded_ratio(100, -5)


def test_daily_progress_flags_over_target(user_id, now) -> None:
    summary = recompute_daily_summary(
        [make_meal(user_id, now, calories=2500, protein=50)], now.date(), user_id
    )

    progress = daily_progress(summary, DEFAULT_GOALS)

    assert progress.calories.is_over
    assert progress.calories.ratio == 1.0
    assert progress.calories.unbounded_ratio == 1.25
    assert progress.calories.remaining == 0
    assert not progress.protein.is_over
    assert progress.protein.remaining == 100


def test_weekday_index_starts_on_sunday() -> None:
    assert weekday_index(date(2024, 3, 10)) == 0
    assert weekday_index(WEDNESDAY) == 3
    assert weekday_index(date(2024, 3, 16)) == 6


def test_local_day_keeps_naive_datetimes() -> None:
    naive = datetime(2024, 3, 13, 23, 30)

    assert local_day(naive, ZoneInfo("Asia/Tokyo")) == date(2024, 3, 13)


def test_weekly_report_window_is_oldest_first(user_id) -> None:
    report = build_weekly_report([], DEFAULT_GOALS, DEFAULT_DIET_DAYS, WEDNESDAY)

    assert [entry.day for entry in report.days] == [
        WEDNESDAY - timedelta(days=offset) for offset in range(6, -1, -1)
    ]
    assert all(entry.total_calories == 0 for entry in report.days)
    assert report.stats.avg_calories == 0
    assert report.stats.days_tracked == 0


def test_weekly_average_excludes_non_diet_days(user_id) -> None:
    summaries = [
        make_summary(user_id, date(2024, 3, 11), 1800),
        make_summary(user_id, date(2024, 3, 12), 2000),
        make_summary(user_id, date(2024, 3, 9), 3000),
    ]

    report = build_weekly_report(summaries, DEFAULT_GOALS, DEFAULT_DIET_DAYS, WEDNESDAY)

    saturday = next(entry for entry in report.days if entry.day == date(2024, 3, 9))
    assert not saturday.is_diet_day
    assert saturday.total_calories == 3000
    assert report.stats.total_calories == 3800
    assert report.stats.days_tracked == 2
    assert report.stats.avg_calories == 1900
    assert report.stats.diet_days_count == 5
    assert report.stats.weekly_target == 10000
    assert report.stats.on_track


def test_weekly_report_over_target(user_id) -> None:
    goals = UserGoals(daily_calories=1000)
    summaries = [
        make_summary(user_id, WEDNESDAY - timedelta(days=offset), 1500)
        for offset in range(7)
    ]

    report = build_weekly_report(summaries, goals, {3}, WEDNESDAY)

    assert report.stats.weekly_target == 1000
    assert report.stats.total_calories == 1500
    assert not report.stats.on_track


def test_weekly_report_with_no_diet_days_is_off_track_once_logged(user_id) -> None:
    empty_week = build_weekly_report([], DEFAULT_GOALS, set(), WEDNESDAY)
    logged_week = build_weekly_report(
        [make_summary(user_id, WEDNESDAY, 500)], DEFAULT_GOALS, set(), WEDNESDAY
    )

    assert empty_week.stats.weekly_target == 0
    assert empty_week.stats.on_track
    assert logged_week.stats.weekly_target == 0
    assert logged_week.stats.total_calories == 0
    assert not logged_week.stats.on_track
