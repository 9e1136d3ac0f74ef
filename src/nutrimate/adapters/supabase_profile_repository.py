"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrimate.domain.nutrition import NutrientTargets
from nutrimate.domain.profiles import Profile
from nutrimate.services.goals import ProfileRepository

_SEXES = {"female", "male", "other"}
_ACTIVITY_LEVELS = {"sedentary", "lightly_active", "active", "very_active"}
_TARGET_COLUMNS = {
    "calories": "daily_calorie_goal",
    "protein_g": "daily_protein_goal",
    "fat_g": "daily_fat_goal",
    "carbs_g": "daily_carbohydrates_goal",
    "sugar_g": "daily_sugar_goal",
    "sodium_mg": "daily_sodium_goal",
}


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile persistence."""

    client: Client

    def get_profile(self, user_id: str) -> Profile | None:
        """Return the profile row for a user, if present."""
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def update_targets(self, user_id: str, targets: NutrientTargets | None) -> None:
        """Store daily goals, or clear them when targets is None."""
        payload: dict[str, object] = {
            column: getattr(targets, field) if targets else None
            for field, column in _TARGET_COLUMNS.items()
        }
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        self.client.table("profiles").update(payload).eq("id", user_id).execute()


def _parse_profile(row: dict[str, object]) -> Profile:
    sex = row.get("gender")
    activity = row.get("activity_level")
    return Profile(
        id=str(row["id"]),
        sex=sex if sex in _SEXES else None,
        dob=row.get("dob") or None,
        height_cm=_optional_float(row.get("height_cm")),
        weight_kg=_optional_float(row.get("weight_kg")),
        activity_level=activity if activity in _ACTIVITY_LEVELS else None,
        medical_history=row.get("medical_history"),
        targets=_parse_targets(row),
        full_name=row.get("full_name"),
        phone_number=row.get("phone_number"),
    )


def _parse_targets(row: dict[str, object]) -> NutrientTargets | None:
    values = {field: row.get(column) for field, column in _TARGET_COLUMNS.items()}
    if any(value is None for value in values.values()):
        return None
    return NutrientTargets(**{field: int(value) for field, value in values.items()})


def _optional_float(raw: object) -> float | None:
    if raw is None:
        return None
    return float(raw)
