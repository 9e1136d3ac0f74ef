"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI, HTTPException, Request, status

from nutrimate.api.models import SafetyCheckRequest, SafetyCheckResponse
from nutrimate.app_logging import configure_logging
from nutrimate.containers import AppContainer
from nutrimate.domain.analysis import AnalysisResult
from nutrimate.domain.caregivers import FoodIdentity
from nutrimate.domain.nutrition import NutrientTargets, NutrientVector
from nutrimate.domain.profiles import InsufficientData, Profile, Unavailable
from nutrimate.services.body_mass import classify


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    def _container(request: Request) -> AppContainer:
        return request.app.state.container

    def _load_profile(request: Request, user_id: str) -> Profile:
        profile = _container(request).profile_repository.get_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return profile

    def _timezone(request: Request, timezone: str | None) -> str:
        name = timezone or _container(request).settings.default_timezone
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown timezone: {name}",
            ) from exc
        return name

    def _now(timezone_name: str) -> datetime:
        return datetime.now(ZoneInfo(timezone_name))

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/users/{user_id}/targets")
    async def get_targets(
        user_id: str, request: Request, timezone: str | None = None
    ) -> dict[str, object]:
        """Return the user's daily targets."""
        profile = _load_profile(request, user_id)
        today = _now(_timezone(request, timezone)).date()
        result = _container(request).goal_service.targets_for(profile, today)
        return _serialize_targets(result)

    @app.post("/users/{user_id}/targets/refresh")
    async def refresh_targets(
        user_id: str, request: Request, timezone: str | None = None
    ) -> dict[str, object]:
        """Recompute and store the user's daily targets."""
        today = _now(_timezone(request, timezone)).date()
        result = _container(request).goal_service.refresh_targets(user_id, today)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_targets(result)

    @app.get("/users/{user_id}/bmi")
    async def get_bmi(user_id: str, request: Request) -> dict[str, object]:
        """Return the user's BMI and category."""
        profile = _load_profile(request, user_id)
        result = classify(profile.weight_kg, profile.height_cm)
        if isinstance(result, Unavailable):
            return {"status": "unavailable", "reason": result.reason}
        return {"status": "ok", **asdict(result)}

    @app.get("/users/{user_id}/today")
    async def get_today(
        user_id: str, request: Request, timezone: str | None = None
    ) -> dict[str, object]:
        """Return today's running totals next to the targets."""
        state_container = _container(request)
        profile = _load_profile(request, user_id)
        timezone_name = _timezone(request, timezone)
        now = _now(timezone_name)
        intake = state_container.intake_service.today(user_id, timezone_name, now)
        targets = state_container.goal_service.targets_for(profile, now.date())
        return {
            "intake": _serialize_vector(intake),
            "targets": _serialize_targets(targets),
        }

    @app.post("/users/{user_id}/safety")
    async def check_safety(
        user_id: str, payload: SafetyCheckRequest, request: Request
    ) -> SafetyCheckResponse:
        """Check a candidate item against caregiver lists and medical history."""
        profile = _load_profile(request, user_id)
        verdict = _container(request).safety_service.check(
            profile,
            FoodIdentity(payload.name, payload.brand),
            payload.nutrition.to_vector(),
        )
        return SafetyCheckResponse(is_safe=verdict.is_safe, reason=verdict.reason)

    @app.post("/users/{user_id}/analysis")
    async def reconcile_analysis(
        user_id: str, analysis: AnalysisResult, request: Request
    ) -> AnalysisResult:
        """Replace an analysis result's verdict with the authoritative one."""
        profile = _load_profile(request, user_id)
        return _container(request).safety_service.check_analysis(profile, analysis)

    @app.post("/users/{user_id}/insight")
    async def update_insight(
        user_id: str, request: Request, timezone: str | None = None
    ) -> dict[str, object]:
        """Refresh the health insight when today's total moved enough."""
        state_container = _container(request)
        profile = _load_profile(request, user_id)
        timezone_name = _timezone(request, timezone)
        now = _now(timezone_name)
        intake = state_container.intake_service.today(user_id, timezone_name, now)
        targets = state_container.goal_service.targets_for(profile, now.date())
        update = await state_container.advice_service.update(
            profile, targets, intake, now.date()
        )
        return {
            "decision": update.decision.value,
            "insight": update.insight.model_dump() if update.insight else None,
        }

    @app.get("/users/{user_id}/history/summary")
    async def history_summary(
        user_id: str, request: Request, timezone: str | None = None
    ) -> dict[str, object]:
        """Return formatted history rows and headline numbers."""
        _load_profile(request, user_id)
        rows, totals = _container(request).report_service.user_history(
            user_id, _timezone(request, timezone)
        )
        return {
            "rows": [row.as_dict() for row in rows],
            "entry_count": totals.entry_count,
            "last_date": totals.last_date.isoformat() if totals.last_date else None,
            "today_calorie_total": totals.today_calorie_total,
        }

    @app.get("/caregivers/{caregiver_id}/patients/summary")
    async def caregiver_summary(
        caregiver_id: str, request: Request, timezone: str | None = None
    ) -> dict[str, object]:
        """Return the summary row of every connected patient."""
        summaries = _container(request).report_service.caregiver_patients(
            caregiver_id, _timezone(request, timezone)
        )
        logger.info(
            "Caregiver summary: caregiver_id=%s patients=%s",
            caregiver_id,
            len(summaries),
        )
        return {"patients": [asdict(summary) for summary in summaries]}

    return app


def _serialize_targets(
    result: NutrientTargets | InsufficientData,
) -> dict[str, object]:
    if isinstance(result, InsufficientData):
        return {"status": "insufficient_data", "missing": list(result.missing)}
    return {"status": "ok", **asdict(result)}


def _serialize_vector(vector: NutrientVector) -> dict[str, object]:
    return {
        "calories": vector.calories,
        "protein_g": vector.protein_g,
        "fat_g": vector.fat_g,
        "carbs_g": vector.carbs_g,
        "sugar_g": vector.sugar_g,
        "sodium_mg": vector.sodium_mg,
        "micronutrients": (
            asdict(vector.micronutrients) if vector.micronutrients else None
        ),
    }
