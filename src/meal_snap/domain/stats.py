"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from meal_snap.domain.nutrition import NutritionData


@dataclass(frozen=True)
class DailySummary:
    """Nutrition totals for one user on one local calendar day."""

    user_id: UUID
    day: date
    total_calories: float
    total_carbs: float
    total_protein: float
    total_fat: float
    total_fiber: float
    meals_count: int

    @classmethod
    def empty(cls, user_id: UUID, day: date) -> "DailySummary":
        return cls(
            user_id=user_id,
            day=day,
            total_calories=0.0,
            total_carbs=0.0,
            total_protein=0.0,
            total_fat=0.0,
            total_fiber=0.0,
            meals_count=0,
        )

    def totals(self) -> NutritionData:
        return NutritionData(
            calories=self.total_calories,
            carbs=self.total_carbs,
            protein=self.total_protein,
            fat=self.total_fat,
            fiber=self.total_fiber,
        )


@dataclass(frozen=True)
class MacroProgress:
    """Progress of one nutrient against its daily goal."""

    current: float
    goal: float
    ratio: float
    unbounded_ratio: float
    is_over: bool
    remaining: float


@dataclass(frozen=True)
class DailyProgress:
    calories: MacroProgress
    carbs: MacroProgress
    protein: MacroProgress
    fat: MacroProgress
    fiber: MacroProgress


@dataclass(frozen=True)
class WeeklyDay:
    day: date
    total_calories: float
    is_diet_day: bool


@dataclass(frozen=True)
class WeeklyStats:
    """Weekly totals computed over designated diet days only."""

    total_calories: float
    avg_calories: float
    days_tracked: int
    diet_days_count: int
    weekly_target: float
    on_track: bool


@dataclass(frozen=True)
class WeeklyReport:
    """Last seven calendar days, oldest first, with their stats."""

    days: list[WeeklyDay]
    stats: WeeklyStats
