"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrimate.adapters.openai_advice_client import OpenAIAdviceClient
from nutrimate.adapters.supabase_caregiver_repository import (
    SupabaseCaregiverRepository,
)
from nutrimate.adapters.supabase_food_history_repository import (
    SupabaseFoodHistoryRepository,
)
from nutrimate.adapters.supabase_profile_repository import SupabaseProfileRepository
from nutrimate.config import Settings
from nutrimate.services.advice import AdviceService
from nutrimate.services.cache import InMemoryCache
from nutrimate.services.goals import GoalService, ProfileRepository
from nutrimate.services.intake import IntakeService
from nutrimate.services.reports import ReportService
from nutrimate.services.safety import SafetyService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_repository: ProfileRepository
    goal_service: GoalService
    intake_service: IntakeService
    safety_service: SafetyService
    advice_service: AdviceService
    report_service: ReportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    history_repository = SupabaseFoodHistoryRepository(supabase_client)
    caregiver_repository = SupabaseCaregiverRepository(supabase_client)
    goal_service = GoalService(
        repository=profile_repository,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.goal_cache_ttl_seconds,
    )
    intake_service = IntakeService(history_repository)
    safety_service = SafetyService(
        repository=caregiver_repository,
        brand_matching=resolved_settings.brand_matching,
    )
    advice_client = OpenAIAdviceClient.create(resolved_settings.openai_api_key)
    advice_service = AdviceService(
        client=advice_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        hysteresis_kcal=resolved_settings.advice_hysteresis_kcal,
    )
    report_service = ReportService(
        profile_repository=profile_repository,
        consumption_repository=history_repository,
        connection_repository=caregiver_repository,
    )

    async def close_resources() -> None:
        await advice_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_repository=profile_repository,
        goal_service=goal_service,
        intake_service=intake_service,
        safety_service=safety_service,
        advice_service=advice_service,
        report_service=report_service,
        close_resources=close_resources,
    )
