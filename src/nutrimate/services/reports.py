"""History summaries for reports and caregiver exports."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import Literal, Protocol
from zoneinfo import ZoneInfo

from nutrimate.domain.nutrition import (
    MICRONUTRIENT_FIELDS,
    NutrientTargets,
    clamp_amount,
)
from nutrimate.domain.profiles import Profile
from nutrimate.domain.records import ConsumptionRecord
from nutrimate.domain.reports import NOT_AVAILABLE, PatientSummary, Rollup, SummaryRow
from nutrimate.services.goals import ProfileRepository, compute_targets, format_age
from nutrimate.services.intake import (
    ConsumptionRepository,
    aggregate,
    local_day,
    local_time,
)

CalorieStatus = Literal["low", "normal", "high"]

CALORIE_STATUS_WINDOW = 7
LOW_RATIO = 0.75
HIGH_RATIO = 1.25


def _fmt(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{clamp_amount(value):.1f}"


def _newest_first(
    records: Iterable[ConsumptionRecord], timezone: tzinfo | None = None
) -> list[ConsumptionRecord]:
    return sorted(
        records,
        key=lambda record: local_time(record.occurred_at, timezone),
        reverse=True,
    )


def summarize(
    records: Iterable[ConsumptionRecord], timezone: tzinfo | None = None
) -> list[SummaryRow]:
    """Format records as export rows, newest first."""
    rows = []
    for record in _newest_first(records, timezone):
        moment = local_time(record.occurred_at, timezone)
        nutrients = record.nutrients.clamped()
        micros = nutrients.micronutrients
        micro_values = {
            name: _fmt(getattr(micros, name) if micros else None)
            for name in MICRONUTRIENT_FIELDS
        }
        rows.append(
            SummaryRow(
                date=moment.strftime("%Y-%m-%d %H:%M"),
                tag=record.tag,
                item=record.name,
                calories=_fmt(nutrients.calories),
                protein_g=_fmt(nutrients.protein_g),
                carbs_g=_fmt(nutrients.carbs_g),
                fat_g=_fmt(nutrients.fat_g),
                sugar_g=_fmt(nutrients.sugar_g),
                sodium_mg=_fmt(nutrients.sodium_mg),
                **micro_values,
            )
        )
    return rows


def rollup(
    records: Sequence[ConsumptionRecord],
    today: date,
    timezone: tzinfo | None = None,
) -> Rollup:
    """Entry count, last logged day and today's calories."""
    last = max(
        (local_time(record.occurred_at, timezone) for record in records),
        default=None,
    )
    return Rollup(
        entry_count=len(records),
        last_date=last.date() if last else None,
        today_calorie_total=aggregate(records, today, timezone).calories,
    )


def health_stars(average_calories: float, calorie_goal: float | None) -> int:
    """Star rating (1-5) of average intake against the calorie goal."""
    if not calorie_goal:
        return 3
    ratio = average_calories / calorie_goal
    if ratio > 1.5:
        return 1
    if ratio > 1.25:
        return 2
    if ratio < 0.7:
        return 3
    if ratio > 1.1:
        return 4
    if ratio >= 0.8:
        return 5
    return 4


def calorie_status(
    records: Iterable[ConsumptionRecord],
    calorie_goal: float | None,
    timezone: tzinfo | None = None,
) -> CalorieStatus | None:
    """Classify recent intake, averaged per logged day, against the goal."""
    recent = _newest_first(records, timezone)[:CALORIE_STATUS_WINDOW]
    if not calorie_goal or not recent:
        return None
    days = {local_day(record.occurred_at, timezone) for record in recent}
    total = sum(record.nutrients.clamped().calories for record in recent)
    ratio = total / max(1, len(days)) / calorie_goal
    if ratio < LOW_RATIO:
        return "low"
    if ratio > HIGH_RATIO:
        return "high"
    return "normal"


def patient_summary(
    profile: Profile,
    records: Sequence[ConsumptionRecord],
    today: date,
    timezone: tzinfo | None = None,
) -> PatientSummary:
    """Build the caregiver summary row for one patient."""
    totals = rollup(records, today, timezone)
    targets = compute_targets(profile, today)
    calorie_goal = targets.calories if isinstance(targets, NutrientTargets) else None
    status = calorie_status(records, calorie_goal, timezone)
    return PatientSummary(
        full_name=profile.full_name,
        phone_number=profile.phone_number,
        age=format_age(profile.dob, today),
        sex=profile.sex,
        height_cm=profile.height_cm,
        weight_kg=profile.weight_kg,
        medical_history=profile.medical_history,
        total_entries=totals.entry_count,
        last_logged_date=(
            totals.last_date.isoformat() if totals.last_date else NOT_AVAILABLE
        ),
        calories_today=(
            f"{totals.today_calorie_total:.0f}"
            if totals.today_calorie_total > 0
            else NOT_AVAILABLE
        ),
        calorie_status=status or NOT_AVAILABLE,
        health_stars=health_stars(
            average_daily_calories(records, timezone), calorie_goal
        ),
    )


def average_daily_calories(
    records: Iterable[ConsumptionRecord], timezone: tzinfo | None = None
) -> float:
    """Average calories per logged day."""
    by_day: dict[date, float] = {}
    for record in records:
        day = local_day(record.occurred_at, timezone)
        by_day[day] = by_day.get(day, 0.0) + record.nutrients.clamped().calories
    if not by_day:
        return 0.0
    return sum(by_day.values()) / len(by_day)


class PatientConnectionRepository(Protocol):
    """Persistence interface for caregiver-patient connections."""

    def list_patient_ids(self, caregiver_id: str) -> list[str]:
        """Return ids of every patient connected to a caregiver."""


@dataclass
class ReportService:
    """Assembles history reports for users and their caregivers."""

    profile_repository: ProfileRepository
    consumption_repository: ConsumptionRepository
    connection_repository: PatientConnectionRepository

    def user_history(
        self, user_id: str, timezone_name: str
    ) -> tuple[list[SummaryRow], Rollup]:
        """Return a user's formatted history and its rollup."""
        tz = ZoneInfo(timezone_name)
        records = self.consumption_repository.list_recent_records(user_id)
        today = datetime.now(tz=UTC).astimezone(tz).date()
        return summarize(records, tz), rollup(records, today, tz)

    def caregiver_patients(
        self, caregiver_id: str, timezone_name: str
    ) -> list[PatientSummary]:
        """Return the summary row of every connected patient."""
        tz = ZoneInfo(timezone_name)
        today = datetime.now(tz=UTC).astimezone(tz).date()
        summaries = []
        for patient_id in self.connection_repository.list_patient_ids(caregiver_id):
            profile = self.profile_repository.get_profile(patient_id)
            if profile is None:
                continue
            records = self.consumption_repository.list_recent_records(patient_id)
            summaries.append(patient_summary(profile, records, today, tz))
        return summaries
