"""Supabase repository for consumption history."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from nutrimate.domain.nutrition import NutrientVector
from nutrimate.domain.records import ConsumptionRecord
from nutrimate.services.intake import ConsumptionRepository

_COLUMNS = "id, created_at, type, food_name, estimated_weight_grams, nutrition"


@dataclass
class SupabaseFoodHistoryRepository(ConsumptionRepository):
    """Supabase implementation for food_history queries."""

    client: Client

    def list_records(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[ConsumptionRecord]:
        """Return records in the time range."""
        response = (
            self.client.table("food_history")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .gte("created_at", start.isoformat())
            .lt("created_at", end.isoformat())
            .order("created_at", desc=False)
            .execute()
        )
        rows = response.data or []
        return [_parse_row(row) for row in rows if _is_complete(row)]

    def list_recent_records(
        self, user_id: str, limit: int | None = None
    ) -> list[ConsumptionRecord]:
        """Return a user's records newest first."""
        query = (
            self.client.table("food_history")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        rows = response.data or []
        return [_parse_row(row) for row in rows if _is_complete(row)]


def _is_complete(row: dict[str, object]) -> bool:
    return bool(row.get("nutrition")) and isinstance(row.get("created_at"), str)


def _parse_row(row: dict[str, object]) -> ConsumptionRecord:
    nutrition = row.get("nutrition")
    weight = row.get("estimated_weight_grams")
    return ConsumptionRecord(
        id=row.get("id"),
        occurred_at=datetime.fromisoformat(str(row["created_at"])),
        tag="label" if row.get("type") == "label" else "food",
        name=str(row.get("food_name") or "Unnamed Food"),
        nutrients=NutrientVector.from_mapping(
            nutrition if isinstance(nutrition, dict) else None
        ),
        weight_grams=float(weight) if weight is not None else None,
    )
