"""Tests for goals and calendar settings."""

import pytest

from meal_snap.domain.nutrition import DEFAULT_DIET_DAYS, DEFAULT_GOALS, UserGoals
from meal_snap.services.goals import is_valid_timezone


def test_defaults_apply_until_goals_are_set(goals_service, user_id) -> None:
    assert goals_service.get_goals(user_id) == DEFAULT_GOALS
    assert goals_service.get_diet_days(user_id) == DEFAULT_DIET_DAYS
    assert goals_service.get_timezone(user_id) == "UTC"


def test_set_goals_persists(goals_service, user_id) -> None:
    goals = UserGoals(daily_calories=1800, daily_protein=120)

    goals_service.set_goals(user_id, goals)

    assert goals_service.get_goals(user_id) == goals
    assert goals_service.get_goals(user_id).for_nutrient("protein") == 120


@pytest.mark.parametrize(
    "goals",
    [
        UserGoals(daily_calories=0),
        UserGoals(daily_fiber=-5),
        UserGoals(daily_fat=float("inf")),
    ],
)
def test_set_goals_rejects_non_positive_values(goals_service, user_id, goals) -> None:
    with pytest.raises(ValueError):
        goals_service.set_goals(user_id, goals)

    assert goals_service.get_goals(user_id) == DEFAULT_GOALS


def test_empty_diet_days_are_kept(goals_service, user_id) -> None:
    goals_service.set_diet_days(user_id, [])

    assert goals_service.get_diet_days(user_id) == frozenset()


def test_set_diet_days_validates_indices(goals_service, user_id) -> None:
    assert goals_service.set_diet_days(user_id, [0, 6, 6]) == frozenset({0, 6})

    with pytest.raises(ValueError):
        goals_service.set_diet_days(user_id, [1, 7])
    assert goals_service.get_diet_days(user_id) == frozenset({0, 6})


def test_set_timezone_validates_name(goals_service, user_id) -> None:
    goals_service.set_timezone(user_id, "America/Sao_Paulo")

    assert goals_service.get_zone(user_id).key == "America/Sao_Paulo"
    with pytest.raises(ValueError):
        goals_service.set_timezone(user_id, "Mars/Olympus_Mons")


def test_is_valid_timezone() -> None:
    assert is_valid_timezone("Europe/Lisbon")
    assert not is_valid_timezone("Not/A_Zone")
    assert not is_valid_timezone("")
