"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from meal_snap.domain.meals import MIN_SERVINGS, SERVINGS_STEP, MealType
from meal_snap.domain.nutrition import NutritionData, UserGoals


class AnalyzeFoodRequest(BaseModel):
    """Analyze-food payload sent by the app."""

    image_base64: str | None = Field(default=None, alias="imageBase64")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("image_base64", mode="before")
    @classmethod
    def non_string_is_missing(cls, value: object) -> object:
        return value if isinstance(value, str) else None


class NutritionPayload(BaseModel):
    """Nutrition values per serving."""

    calories: float = Field(ge=0.0, allow_inf_nan=False)
    carbs: float = Field(ge=0.0, allow_inf_nan=False)
    protein: float = Field(ge=0.0, allow_inf_nan=False)
    fat: float = Field(ge=0.0, allow_inf_nan=False)
    fiber: float = Field(ge=0.0, allow_inf_nan=False)

    def to_domain(self) -> NutritionData:
        return NutritionData(**self.model_dump())


class MealCreateRequest(BaseModel):
    """A reviewed analysis confirmed by the user."""

    meal_type: MealType = MealType.LUNCH
    image_url: str = ""
    servings: float = Field(
        default=1.0, ge=MIN_SERVINGS, multiple_of=SERVINGS_STEP, allow_inf_nan=False
    )
    nutrition: NutritionPayload
    foods: list[str] = Field(min_length=1)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, allow_inf_nan=False)


class MealUpdateRequest(BaseModel):
    meal_type: MealType


class GoalsPayload(BaseModel):
    """Daily goals; every value must be positive."""

    daily_calories: float = Field(gt=0.0, allow_inf_nan=False)
    daily_carbs: float = Field(gt=0.0, allow_inf_nan=False)
    daily_protein: float = Field(gt=0.0, allow_inf_nan=False)
    daily_fat: float = Field(gt=0.0, allow_inf_nan=False)
    daily_fiber: float = Field(gt=0.0, allow_inf_nan=False)

    def to_domain(self) -> UserGoals:
        return UserGoals(**self.model_dump())


class DietDaysPayload(BaseModel):
    """Weekday indices with 0 as Sunday."""

    diet_days: list[int] = Field(default_factory=list)


class TimezonePayload(BaseModel):
    timezone: str
