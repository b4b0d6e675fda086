"""Shared test fixtures."""

import json
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from meal_snap.config import Settings
from meal_snap.containers import AppContainer
from meal_snap.domain.meals import Meal, MealType
from meal_snap.domain.nutrition import NutritionData, UserGoals
from meal_snap.domain.stats import DailySummary
from meal_snap.services.analysis import AnalysisClient, AnalysisService
from meal_snap.services.goals import GoalsRepository, GoalsService
from meal_snap.services.meals import (
    DailySummaryRepository,
    MealRepository,
    MealService,
)
from meal_snap.services.stats import StatsService

RICE_AND_BEANS = {
    "foods": ["arroz", "feijão"],
    "food_details": [
        {"name": "arroz", "grams": 150},
        {"name": "feijão", "grams": 100},
    ],
    "nutrition": {
        "calories": 500,
        "carbs": 80,
        "protein": 20,
        "fat": 10,
        "fiber": 5,
    },
    "confidence": 0.9,
}


def make_meal(  # noqa: PLR0913
    user_id: UUID,
    logged_at: datetime,
    calories: float = 200,
    carbs: float = 20,
    protein: float = 10,
    fat: float = 5,
    fiber: float = 2,
    servings: float = 1.0,
    meal_type: MealType = MealType.LUNCH,
) -> Meal:
    return Meal(
        id=uuid4(),
        user_id=user_id,
        logged_at=logged_at,
        meal_type=meal_type,
        image_url="https://example.com/meal.jpg",
        servings=servings,
        nutrition=NutritionData(
            calories=calories, carbs=carbs, protein=protein, fat=fat, fiber=fiber
        ),
        foods=["arroz"],
        confidence=0.9,
    )


def make_summary(user_id: UUID, day: date, calories: float) -> DailySummary:
    return replace(DailySummary.empty(user_id, day), total_calories=calories, meals_count=1)


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, Meal] = field(default_factory=dict)

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
        meal = Meal(
            id=uuid4(),
            user_id=user_id,
            logged_at=logged_at,
            meal_type=meal_type,
            image_url=image_url,
            servings=servings,
            nutrition=nutrition,
            foods=foods,
            confidence=confidence,
        )
        self.meals[meal.id] = meal
        return meal

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return self.meals.get(meal_id)

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Meal]:
        return [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id
            and (start is None or meal.logged_at >= start)
            and (end is None or meal.logged_at < end)
        ]

    def update_meal_type(self, meal_id: UUID, meal_type: MealType) -> None:
        self.meals[meal_id] = replace(self.meals[meal_id], meal_type=meal_type)

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)


@dataclass
class InMemoryDailySummaryRepository(DailySummaryRepository):
    """In-memory daily summary repository for tests."""

    summaries: dict[tuple[UUID, date], DailySummary] = field(default_factory=dict)

    def get_summary(self, user_id: UUID, day: date) -> DailySummary | None:
        return self.summaries.get((user_id, day))

    def list_summaries(self, user_id: UUID, start: date, end: date) -> list[DailySummary]:
        return sorted(
            (
                summary
                for (owner, day), summary in self.summaries.items()
                if owner == user_id and start <= day <= end
            ),
            key=lambda summary: summary.day,
        )

    def save_summary(self, summary: DailySummary) -> None:
        self.summaries[(summary.user_id, summary.day)] = summary


@dataclass
class InMemoryGoalsRepository(GoalsRepository):
    """In-memory goals repository for tests."""

    goals: dict[UUID, UserGoals] = field(default_factory=dict)
    diet_days: dict[UUID, frozenset[int]] = field(default_factory=dict)
    timezones: dict[UUID, str] = field(default_factory=dict)

    def get_goals(self, user_id: UUID) -> UserGoals | None:
        return self.goals.get(user_id)

    def set_goals(self, user_id: UUID, goals: UserGoals) -> None:
        self.goals[user_id] = goals

    def get_diet_days(self, user_id: UUID) -> frozenset[int] | None:
        return self.diet_days.get(user_id)

    def set_diet_days(self, user_id: UUID, diet_days: frozenset[int]) -> None:
        self.diet_days[user_id] = diet_days

    def get_timezone(self, user_id: UUID) -> str | None:
        return self.timezones.get(user_id)

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        self.timezones[user_id] = timezone


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client returning fixed content or raising an error."""

    content: str | None = field(default_factory=lambda: json.dumps(RICE_AND_BEANS))
    error: Exception | None = None
    calls: list[dict[str, str]] = field(default_factory=list)

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_url: str,
    ) -> str | None:
        self.calls.append({"model": model, "image_url": image_url})
        if self.error is not None:
            raise self.error
        return self.content


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        analysis_api_key="analysis-key",
        default_timezone="UTC",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 3, 13, 12, 0, tzinfo=UTC)


@pytest.fixture
def goals_service() -> GoalsService:
    return GoalsService(InMemoryGoalsRepository(), default_timezone="UTC")


@pytest.fixture
def meal_service(goals_service: GoalsService) -> MealService:
    return MealService(
        repository=InMemoryMealRepository(),
        summary_repository=InMemoryDailySummaryRepository(),
        goals_service=goals_service,
    )


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def container(
    settings: Settings,
    goals_service: GoalsService,
    meal_service: MealService,
    analysis_client: FakeAnalysisClient,
) -> AppContainer:
    stats_service = StatsService(
        meal_service=meal_service,
        summary_repository=meal_service.summary_repository,
        goals_service=goals_service,
    )
    analysis_service = AnalysisService(
        client=analysis_client, model=settings.analysis_model
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_service=analysis_service,
        goals_service=goals_service,
        meal_service=meal_service,
        stats_service=stats_service,
        close_resources=close_resources,
    )
