"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_snap.adapters.openai_analysis_client import OpenAIAnalysisClient
from meal_snap.adapters.supabase_daily_summary_repository import (
    SupabaseDailySummaryRepository,
)
from meal_snap.adapters.supabase_goals_repository import SupabaseGoalsRepository
from meal_snap.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_snap.config import Settings
from meal_snap.services.analysis import AnalysisService
from meal_snap.services.goals import GoalsService
from meal_snap.services.meals import MealService
from meal_snap.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_service: AnalysisService
    goals_service: GoalsService
    meal_service: MealService
    stats_service: StatsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_repository = SupabaseMealRepository(supabase_client)
    summary_repository = SupabaseDailySummaryRepository(supabase_client)
    goals_repository = SupabaseGoalsRepository(supabase_client)

    analysis_client = (
        OpenAIAnalysisClient.create(
            api_key=resolved_settings.analysis_api_key,
            base_url=resolved_settings.analysis_base_url,
            timeout=resolved_settings.analysis_timeout,
        )
        if resolved_settings.analysis_api_key
        else None
    )
    analysis_service = AnalysisService(
        client=analysis_client,
        model=resolved_settings.analysis_model,
    )
    goals_service = GoalsService(
        goals_repository, default_timezone=resolved_settings.default_timezone
    )
    meal_service = MealService(
        repository=meal_repository,
        summary_repository=summary_repository,
        goals_service=goals_service,
    )
    stats_service = StatsService(
        meal_service=meal_service,
        summary_repository=summary_repository,
        goals_service=goals_service,
    )

    async def close_resources() -> None:
        if analysis_client is not None:
            await analysis_client.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_service=analysis_service,
        goals_service=goals_service,
        meal_service=meal_service,
        stats_service=stats_service,
        close_resources=close_resources,
    )
