"""User-scoped meal, summary and goal endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date  # noqa: TC003
from http import HTTPStatus
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from meal_snap.api.models import (
    DietDaysPayload,
    GoalsPayload,
    MealCreateRequest,
    MealUpdateRequest,
    TimezonePayload,
)
from meal_snap.domain.meals import MEAL_TYPE_LABELS, Meal, MealDraft, MealType
from meal_snap.domain.stats import DailySummary, WeeklyReport

if TYPE_CHECKING:
    from meal_snap.containers import AppContainer
    from meal_snap.services.stats import DailyOverview

router = APIRouter(prefix="/users/{user_id}", tags=["users"])


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.post(
    "/meals",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_token)],
)
async def create_meal(
    user_id: UUID, payload: MealCreateRequest, request: Request
) -> dict[str, object]:
    """Persist a confirmed meal."""
    draft = MealDraft(
        foods=payload.foods,
        nutrition=payload.nutrition.to_domain(),
        confidence=payload.confidence,
        image_url=payload.image_url,
        servings=payload.servings,
        meal_type=payload.meal_type,
    )
    try:
        meal = _container(request).meal_service.log_meal(user_id, draft)
    except ValueError as exc:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return {"meal": _meal_payload(meal)}


@router.get("/meals", dependencies=[Depends(require_api_token)])
async def list_meals(
    user_id: UUID,
    request: Request,
    day: date | None = None,
    meal_type: MealType | None = None,
) -> dict[str, object]:
    """Return meals for a local calendar day, today by default."""
    container = _container(request)
    resolved_day = day or container.stats_service.today(user_id)
    meals = container.meal_service.list_meals_for_day(
        user_id, resolved_day, meal_type
    )
    return {
        "day": resolved_day.isoformat(),
        "meals": [_meal_payload(meal) for meal in meals],
    }


@router.get("/meals/{meal_id}", dependencies=[Depends(require_api_token)])
async def get_meal(user_id: UUID, meal_id: UUID, request: Request) -> dict[str, object]:
    meal = _container(request).meal_service.get_meal(user_id, meal_id)
    if meal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"meal": _meal_payload(meal)}


@router.patch("/meals/{meal_id}", dependencies=[Depends(require_api_token)])
async def update_meal(
    user_id: UUID, meal_id: UUID, payload: MealUpdateRequest, request: Request
) -> dict[str, object]:
    """Reclassify a meal's type."""
    meal = _container(request).meal_service.reclassify_meal(
        user_id, meal_id, payload.meal_type
    )
    if meal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"meal": _meal_payload(meal)}


@router.delete("/meals/{meal_id}", dependencies=[Depends(require_api_token)])
async def delete_meal(
    user_id: UUID, meal_id: UUID, request: Request
) -> dict[str, str]:
    """Delete a meal and reverse its daily contribution."""
    if not _container(request).meal_service.delete_meal(user_id, meal_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"status": "deleted"}


@router.get("/summary", dependencies=[Depends(require_api_token)])
async def daily_summary(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    """Return a day's totals and progress against goals."""
    overview = _container(request).stats_service.get_day(user_id, day)
    return _overview_payload(overview)


@router.get("/reports/weekly", dependencies=[Depends(require_api_token)])
async def weekly_report(
    user_id: UUID, request: Request, reference_date: date | None = None
) -> dict[str, object]:
    """Return the seven days ending on the reference date."""
    report = _container(request).stats_service.get_week(user_id, reference_date)
    return _weekly_payload(report)


@router.post("/summaries/reconcile", dependencies=[Depends(require_api_token)])
async def reconcile_summary(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    """Recompute a cached daily summary from its meals."""
    container = _container(request)
    resolved_day = day or container.stats_service.today(user_id)
    result = container.meal_service.reconcile_day(user_id, resolved_day)
    return {
        "drifted": result.drifted,
        "summary": _summary_payload(result.summary),
        "cached": _summary_payload(result.cached) if result.cached else None,
    }


@router.get("/goals", dependencies=[Depends(require_api_token)])
async def get_goals(user_id: UUID, request: Request) -> dict[str, object]:
    """Return goals, diet days and timezone."""
    goals_service = _container(request).goals_service
    return {
        "goals": asdict(goals_service.get_goals(user_id)),
        "diet_days": sorted(goals_service.get_diet_days(user_id)),
        "timezone": goals_service.get_timezone(user_id),
    }


@router.put("/goals", dependencies=[Depends(require_api_token)])
async def put_goals(
    user_id: UUID, payload: GoalsPayload, request: Request
) -> dict[str, object]:
    goals = _container(request).goals_service.set_goals(user_id, payload.to_domain())
    return {"goals": asdict(goals)}


@router.put("/diet-days", dependencies=[Depends(require_api_token)])
async def put_diet_days(
    user_id: UUID, payload: DietDaysPayload, request: Request
) -> dict[str, object]:
    try:
        diet_days = _container(request).goals_service.set_diet_days(
            user_id, payload.diet_days
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return {"diet_days": sorted(diet_days)}


@router.put("/timezone", dependencies=[Depends(require_api_token)])
async def put_timezone(
    user_id: UUID, payload: TimezonePayload, request: Request
) -> dict[str, str]:
    try:
        _container(request).meal_service.change_timezone(user_id, payload.timezone)
    except ValueError as exc:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return {"timezone": payload.timezone}


def _meal_payload(meal: Meal) -> dict[str, object]:
    return {
        "id": str(meal.id),
        "user_id": str(meal.user_id),
        "datetime": meal.logged_at.isoformat(),
        "meal_type": meal.meal_type.value,
        "meal_type_label": MEAL_TYPE_LABELS[meal.meal_type],
        "image_url": meal.image_url,
        "servings": meal.servings,
        "nutrition": meal.nutrition.as_dict(),
        "effective_nutrition": meal.effective_nutrition().as_dict(),
        "foods": list(meal.foods),
        "confidence": meal.confidence,
    }


def _summary_payload(summary: DailySummary) -> dict[str, object]:
    payload = asdict(summary)
    payload["user_id"] = str(summary.user_id)
    payload["day"] = summary.day.isoformat()
    return payload


def _overview_payload(overview: DailyOverview) -> dict[str, object]:
    return {
        "summary": _summary_payload(overview.summary),
        "goals": asdict(overview.goals),
        "progress": asdict(overview.progress),
        "meals": [_meal_payload(meal) for meal in overview.meals],
    }


def _weekly_payload(report: WeeklyReport) -> dict[str, object]:
    return {
        "days": [
            {
                "day": entry.day.isoformat(),
                "total_calories": entry.total_calories,
                "is_diet_day": entry.is_diet_day,
            }
            for entry in report.days
        ],
        "stats": asdict(report.stats),
    }
