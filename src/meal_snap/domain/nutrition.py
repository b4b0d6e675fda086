"""Nutrition domain models."""

from dataclasses import dataclass

NUTRIENTS = ("calories", "carbs", "protein", "fat", "fiber")


@dataclass(frozen=True)
class NutritionData:
    """Calories in kcal, everything else in grams."""

    calories: float
    carbs: float
    protein: float
    fat: float
    fiber: float

    @classmethod
    def zero(cls) -> "NutritionData":
        """Return an all-zero nutrition value."""
        return cls(calories=0.0, carbs=0.0, protein=0.0, fat=0.0, fiber=0.0)

    def scaled(self, factor: float) -> "NutritionData":
        """Return a new value multiplied componentwise by factor."""
        return NutritionData(
            calories=self.calories * factor,
            carbs=self.carbs * factor,
            protein=self.protein * factor,
            fat=self.fat * factor,
            fiber=self.fiber * factor,
        )

    def plus(self, other: "NutritionData") -> "NutritionData":
        return NutritionData(
            calories=self.calories + other.calories,
            carbs=self.carbs + other.carbs,
            protein=self.protein + other.protein,
            fat=self.fat + other.fat,
            fiber=self.fiber + other.fiber,
        )

    def minus(self, other: "NutritionData") -> "NutritionData":
        return NutritionData(
            calories=self.calories - other.calories,
            carbs=self.carbs - other.carbs,
            protein=self.protein - other.protein,
            fat=self.fat - other.fat,
            fiber=self.fiber - other.fiber,
        )

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in NUTRIENTS}


@dataclass(frozen=True)
class UserGoals:
    """Daily nutrition targets for a user."""

    daily_calories: float = 2000
    daily_carbs: float = 250
    daily_protein: float = 150
    daily_fat: float = 65
    daily_fiber: float = 30

    def for_nutrient(self, name: str) -> float:
        """Return the daily goal for a nutrient name such as "carbs"."""
        return float(getattr(self, f"daily_{name}"))


DEFAULT_GOALS = UserGoals()

# Weekday indices run 0=Sunday .. 6=Saturday.
DEFAULT_DIET_DAYS = frozenset({1, 2, 3, 4, 5})
