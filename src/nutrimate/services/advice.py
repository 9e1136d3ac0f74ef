"""Hysteresis-gated health advice generation."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Protocol

from nutrimate.domain.advice import HealthInsight
from nutrimate.domain.nutrition import NutrientTargets, NutrientVector
from nutrimate.domain.profiles import InsufficientData, Profile
from nutrimate.services.goals import calculate_age

NO_ADVICE = -1.0
DEFAULT_HYSTERESIS_KCAL = 50.0

INSIGHT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "emoji": {"type": "string"},
        "title": {"type": "string"},
        "message": {"type": "string"},
    },
    "required": ["emoji", "title", "message"],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class RefreshDecision(str, Enum):
    """Outcome of offering a new intake total to the gate."""

    REFRESH = "refresh"
    RESET = "reset"
    SKIP = "skip"


class AdviceRefreshGate:
    """Suppresses advice requests until the calorie total moves past a band.

    One gate belongs to one user session. Calls are serialized with a lock so
    the gate can be shared between threads of a single session.
    """

    def __init__(self, hysteresis_kcal: float = DEFAULT_HYSTERESIS_KCAL) -> None:
        self.hysteresis_kcal = hysteresis_kcal
        self._last_trigger_value = NO_ADVICE
        self._lock = threading.Lock()

    @property
    def last_trigger_value(self) -> float:
        return self._last_trigger_value

    def should_refresh(self, current_total: float) -> RefreshDecision:
        """Offer the current calorie total and return what the caller must do."""
        with self._lock:
            if current_total <= 0:
                self._last_trigger_value = NO_ADVICE
                return RefreshDecision.RESET
            if abs(current_total - self._last_trigger_value) > self.hysteresis_kcal:
                self._last_trigger_value = current_total
                return RefreshDecision.REFRESH
            return RefreshDecision.SKIP


class AdviceClient(Protocol):
    """Interface for the advice-generating model."""

    async def generate(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return a structured insight payload."""


@dataclass
class AdviceSession:
    """Per-user gate and the last insight it let through."""

    gate: AdviceRefreshGate
    insight: HealthInsight | None = None


@dataclass(frozen=True)
class AdviceUpdate:
    """Result of reconciling advice with a new intake total."""

    decision: RefreshDecision
    insight: HealthInsight | None


@dataclass
class AdviceService:
    """Requests fresh advice only when the gate allows it."""

    client: AdviceClient
    model: str
    reasoning_effort: str | None
    store: bool
    hysteresis_kcal: float = DEFAULT_HYSTERESIS_KCAL
    _sessions: dict[str, AdviceSession] = field(default_factory=dict, repr=False)
    _sessions_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def session_for(self, user_id: str) -> AdviceSession:
        """Return the advice session of a user, creating it on first use."""
        with self._sessions_lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = AdviceSession(gate=AdviceRefreshGate(self.hysteresis_kcal))
                self._sessions[user_id] = session
            return session

    def end_session(self, user_id: str) -> None:
        """Forget the gate and cached insight of a user."""
        with self._sessions_lock:
            self._sessions.pop(user_id, None)

    async def update(
        self,
        profile: Profile,
        targets: NutrientTargets | InsufficientData,
        intake: NutrientVector,
        today: date | None = None,
    ) -> AdviceUpdate:
        """Reconcile cached advice with today's intake total.

        A reset ends the user's session; the next positive total starts a new one.
        """
        if isinstance(targets, InsufficientData):
            with self._sessions_lock:
                existing = self._sessions.get(profile.id)
            return AdviceUpdate(
                decision=RefreshDecision.SKIP,
                insight=existing.insight if existing else None,
            )

        session = self.session_for(profile.id)
        decision = session.gate.should_refresh(intake.calories)
        if decision is RefreshDecision.RESET:
            session.insight = None
            self.end_session(profile.id)
        elif decision is RefreshDecision.REFRESH:
            prompt = _build_prompt(profile, targets, intake, today)
            try:
                raw = await self.client.generate(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    schema=INSIGHT_SCHEMA,
                    prompt=prompt,
                )
                session.insight = HealthInsight.model_validate(raw)
                _logger.info(
                    "Advice refreshed: user_id=%s calories=%s",
                    profile.id,
                    intake.calories,
                )
            except Exception:
                _logger.exception("Advice generation failed: user_id=%s", profile.id)
        return AdviceUpdate(decision=decision, insight=session.insight)


def _build_prompt(
    profile: Profile,
    targets: NutrientTargets,
    intake: NutrientVector,
    today: date | None,
) -> str:
    age = calculate_age(profile.dob, today)
    return (
        "You are a friendly health coach. "
        f"A user (age {age if age is not None else 'N/A'}) has a daily calorie goal "
        f"of {targets.calories} kcal and has consumed {intake.calories:.0f} kcal "
        f"so far today. Their medical history is: "
        f'"{profile.medical_history or "None"}". '
        "Provide a single, brief, encouraging and actionable health insight "
        "relevant to their progress and medical history, with an emoji, "
        "a short title and a one or two sentence message."
    )
