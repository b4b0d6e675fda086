"""Domain models for meal logging."""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from meal_snap.domain.analysis import MealAnalysis
from meal_snap.domain.nutrition import NUTRIENTS, NutritionData

MIN_SERVINGS = 0.5
SERVINGS_STEP = 0.5


class MealType(StrEnum):
    """Meal classification shown to the user."""

    BREAKFAST = "café"
    LUNCH = "almoço"
    DINNER = "jantar"
    SNACK = "lanche"
    OTHER = "outro"


MEAL_TYPE_LABELS: dict[MealType, str] = {
    MealType.BREAKFAST: "Café da Manhã",
    MealType.LUNCH: "Almoço",
    MealType.DINNER: "Jantar",
    MealType.SNACK: "Lanche",
    MealType.OTHER: "Outro",
}


@dataclass(frozen=True)
class Meal:
    """A logged eating event.

    ``nutrition`` holds the values for one serving; the meal contributes
    ``nutrition * servings`` to its day.
    """

    id: UUID
    user_id: UUID
    logged_at: datetime
    meal_type: MealType
    image_url: str
    servings: float
    nutrition: NutritionData
    foods: list[str]
    confidence: float

    def effective_nutrition(self) -> NutritionData:
        """Return nutrition scaled by the serving count."""
        return self.nutrition.scaled(self.servings)


@dataclass(frozen=True)
class MealDraft:
    """An analysis result under review, before it becomes a meal."""

    foods: list[str]
    nutrition: NutritionData
    confidence: float
    image_url: str = ""
    servings: float = 1.0
    meal_type: MealType = MealType.LUNCH

    @classmethod
    def from_analysis(cls, analysis: MealAnalysis, image_url: str) -> "MealDraft":
        """Start a draft from a validated analysis of the whole plate."""
        return cls(
            foods=list(analysis.foods),
            nutrition=NutritionData(**analysis.nutrition.model_dump()),
            confidence=analysis.confidence,
            image_url=image_url,
        )

    def with_servings(self, servings: float) -> "MealDraft":
        validate_servings(servings)
        return replace(self, servings=servings)

    def increment_servings(self) -> "MealDraft":
        return replace(self, servings=self.servings + SERVINGS_STEP)

    def decrement_servings(self) -> "MealDraft":
        return replace(self, servings=max(MIN_SERVINGS, self.servings - SERVINGS_STEP))

    def with_nutrition(self, nutrition: NutritionData) -> "MealDraft":
        validate_nutrition(nutrition)
        return replace(self, nutrition=nutrition)

    def with_meal_type(self, meal_type: MealType) -> "MealDraft":
        return replace(self, meal_type=meal_type)

    def adjusted_nutrition(self) -> NutritionData:
        """Return per-serving nutrition times servings, rounded for display."""
        scaled = self.nutrition.scaled(self.servings)
        return NutritionData(
            **{name: float(round(value)) for name, value in scaled.as_dict().items()}
        )


def validate_servings(servings: float) -> None:
    """Reject serving counts below the floor or off the half-serving step."""
    if not math.isfinite(servings) or servings < MIN_SERVINGS:
        raise ValueError(f"servings must be at least {MIN_SERVINGS}")
    if not math.isclose(servings / SERVINGS_STEP, round(servings / SERVINGS_STEP)):
        raise ValueError(f"servings must be a multiple of {SERVINGS_STEP}")


def validate_nutrition(nutrition: NutritionData) -> None:
    """Reject negative or non-finite nutrition values."""
    for name in NUTRIENTS:
        value = getattr(nutrition, name)
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"{name} must be a non-negative number")


def validate_confidence(confidence: float) -> None:
    if not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
        raise ValueError("confidence must be between 0 and 1")
