"""Same-day intake totals from consumption history."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

from nutrimate.domain.nutrition import (
    MICRONUTRIENT_FIELDS,
    Micronutrients,
    NutrientVector,
    clamp_amount,
)
from nutrimate.domain.records import ConsumptionRecord


class ConsumptionRepository(Protocol):
    """Persistence interface for consumption history."""

    def list_records(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[ConsumptionRecord]:
        """Return records with start <= occurred_at < end."""

    def list_recent_records(
        self, user_id: str, limit: int | None = None
    ) -> list[ConsumptionRecord]:
        """Return records newest first."""


def local_time(moment: datetime, timezone: tzinfo | None = None) -> datetime:
    """Naive wall-clock time of an instant; naive instants are already local."""
    if timezone is not None and moment.tzinfo is not None:
        moment = moment.astimezone(timezone)
    return moment.replace(tzinfo=None)


def local_day(moment: datetime, timezone: tzinfo | None = None) -> date:
    """Calendar day of an instant; naive instants are already local."""
    return local_time(moment, timezone).date()


def add_vectors(
    left: NutrientVector,
    right: NutrientVector,
    *,
    include_micronutrients: bool = False,
) -> NutrientVector:
    """Field-wise sum of two vectors with negatives clamped to zero."""
    a = left.clamped()
    b = right.clamped()
    micros = None
    if include_micronutrients:
        micros = _add_micronutrients(a.micronutrients, b.micronutrients)
    return NutrientVector(
        calories=a.calories + b.calories,
        protein_g=a.protein_g + b.protein_g,
        fat_g=a.fat_g + b.fat_g,
        carbs_g=a.carbs_g + b.carbs_g,
        sugar_g=a.sugar_g + b.sugar_g,
        sodium_mg=a.sodium_mg + b.sodium_mg,
        micronutrients=micros,
    )


def aggregate(
    records: Iterable[ConsumptionRecord],
    reference_date: date | datetime,
    timezone: tzinfo | None = None,
    *,
    include_micronutrients: bool = False,
) -> NutrientVector:
    """Sum nutrients of records that fall on the reference calendar day."""
    if isinstance(reference_date, datetime):
        day = local_day(reference_date, timezone)
    else:
        day = reference_date
    total = NutrientVector.zero()
    for record in records:
        if local_day(record.occurred_at, timezone) != day:
            continue
        total = add_vectors(
            total, record.nutrients, include_micronutrients=include_micronutrients
        )
    return total


def _add_micronutrients(
    left: Micronutrients | None, right: Micronutrients | None
) -> Micronutrients | None:
    if left is None and right is None:
        return None
    values: dict[str, float | None] = {}
    for name in MICRONUTRIENT_FIELDS:
        a = getattr(left, name) if left else None
        b = getattr(right, name) if right else None
        if a is None and b is None:
            values[name] = None
        else:
            values[name] = clamp_amount(a or 0.0) + clamp_amount(b or 0.0)
    return Micronutrients(**values)


@dataclass
class IntakeService:
    """Loads a user's history and reconciles the running daily total."""

    repository: ConsumptionRepository

    def today(
        self, user_id: str, timezone_name: str, now: datetime | None = None
    ) -> NutrientVector:
        """Return today's totals in the user's timezone."""
        tz = ZoneInfo(timezone_name)
        current = (now or datetime.now(tz=UTC)).astimezone(tz)
        start = current.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)
        records = self.repository.list_records(
            user_id, start.astimezone(UTC), end.astimezone(UTC)
        )
        return aggregate(records, current.date(), tz, include_micronutrients=True)

    def history(self, user_id: str, limit: int | None = None) -> list[ConsumptionRecord]:
        """Return the user's history newest first."""
        return self.repository.list_recent_records(user_id, limit)
