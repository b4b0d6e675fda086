"""Supabase repository for meals."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_snap.domain.meals import Meal, MealType
from meal_snap.domain.nutrition import NutritionData
from meal_snap.services.meals import MealRepository

MEAL_COLUMNS = (
    "id, user_id, datetime, meal_type, image_url, servings, foods, "
    "calories, carbs, protein, fat, fiber, confidence"
)


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

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
        """Create a meal row and return it."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": str(user_id),
                    "datetime": logged_at.isoformat(),
                    "meal_type": meal_type.value,
                    "image_url": image_url,
                    "servings": servings,
                    "foods": foods,
                    "calories": nutrition.calories,
                    "carbs": nutrition.carbs,
                    "protein": nutrition.protein,
                    "fat": nutrition.fat,
                    "fiber": nutrition.fiber,
                    "confidence": confidence,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        row = response.data[0]
        return Meal(
            id=UUID(row["id"]),
            user_id=user_id,
            logged_at=logged_at,
            meal_type=meal_type,
            image_url=image_url,
            servings=servings,
            nutrition=nutrition,
            foods=list(foods),
            confidence=confidence,
        )

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        response = (
            self.client.table("meals")
            .select(MEAL_COLUMNS)
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Meal]:
        """Return a user's meals ordered by time."""
        query = (
            self.client.table("meals")
            .select(MEAL_COLUMNS)
            .eq("user_id", str(user_id))
        )
        if start is not None:
            query = query.gte("datetime", start.isoformat())
        if end is not None:
            query = query.lt("datetime", end.isoformat())
        response = query.order("datetime", desc=False).execute()
        return [_parse_meal(row) for row in response.data or []]

    def update_meal_type(self, meal_id: UUID, meal_type: MealType) -> None:
        """Update a meal's type."""
        self.client.table("meals").update({"meal_type": meal_type.value}).eq(
            "id", str(meal_id)
        ).execute()

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal row."""
        self.client.table("meals").delete().eq("id", str(meal_id)).execute()


def _parse_meal(row: dict[str, object]) -> Meal:
    return Meal(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        logged_at=datetime.fromisoformat(str(row["datetime"])),
        meal_type=MealType(row.get("meal_type") or MealType.OTHER),
        image_url=str(row.get("image_url") or ""),
        servings=float(row.get("servings") or 1.0),
        nutrition=NutritionData(
            calories=float(row.get("calories") or 0.0),
            carbs=float(row.get("carbs") or 0.0),
            protein=float(row.get("protein") or 0.0),
            fat=float(row.get("fat") or 0.0),
            fiber=float(row.get("fiber") or 0.0),
        ),
        foods=[str(food) for food in row.get("foods") or []],
        confidence=float(row.get("confidence") or 0.0),
    )
