"""Daily nutrient targets from a biometric profile."""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from nutrimate.domain.nutrition import NutrientTargets
from nutrimate.domain.profiles import InsufficientData, Profile
from nutrimate.services.cache import Cache

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "active": 1.55,
    "very_active": 1.725,
}

PROTEIN_SHARE = 0.20
CARBS_SHARE = 0.50
FAT_SHARE = 0.30
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

# American Heart Association guideline limits, not personalized.
SUGAR_TARGET_G = 25
SODIUM_TARGET_MG = 1500

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: str) -> Profile | None:
        """Return the profile for a user, if present."""

    def update_targets(self, user_id: str, targets: NutrientTargets | None) -> None:
        """Store computed targets, or clear them when None."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def calculate_age(dob: date | str | None, today: date | None = None) -> int | None:
    """Return completed years since dob, or None when it can't be derived."""
    birth = _parse_dob(dob)
    if birth is None:
        return None
    current = today or date.today()
    age = current.year - birth.year
    if (current.month, current.day) < (birth.month, birth.day):
        age -= 1
    if age < 0:
        return None
    return age


def format_age(dob: date | str | None, today: date | None = None) -> str:
    """Human readable age for reports."""
    age = calculate_age(dob, today)
    if age is None:
        return "N/A"
    return f"{age} years old"


def missing_goal_fields(profile: Profile, today: date | None = None) -> tuple[str, ...]:
    """List the profile fields that block goal computation."""
    missing = []
    if profile.sex is None:
        missing.append("sex")
    if calculate_age(profile.dob, today) is None:
        missing.append("dob")
    if not profile.height_cm or profile.height_cm <= 0:
        missing.append("height_cm")
    if not profile.weight_kg or profile.weight_kg <= 0:
        missing.append("weight_kg")
    if profile.activity_level not in ACTIVITY_MULTIPLIERS:
        missing.append("activity_level")
    return tuple(missing)


def is_profile_complete(profile: Profile, today: date | None = None) -> bool:
    """Return True when every field needed for targets is present."""
    return not missing_goal_fields(profile, today)


def compute_targets(
    profile: Profile, today: date | None = None
) -> NutrientTargets | InsufficientData:
    """Compute daily targets with Mifflin-St Jeor and a fixed macro split."""
    missing = missing_goal_fields(profile, today)
    if missing:
        return InsufficientData(missing=missing)

    age = calculate_age(profile.dob, today)
    offset = 5 if profile.sex == "male" else -161
    bmr = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * age + offset
    tdee = bmr * ACTIVITY_MULTIPLIERS[profile.activity_level]

    calories = round_half_up(tdee / 10) * 10
    return NutrientTargets(
        calories=calories,
        protein_g=round_half_up(calories * PROTEIN_SHARE / KCAL_PER_G_PROTEIN),
        fat_g=round_half_up(calories * FAT_SHARE / KCAL_PER_G_FAT),
        carbs_g=round_half_up(calories * CARBS_SHARE / KCAL_PER_G_CARBS),
        sugar_g=SUGAR_TARGET_G,
        sodium_mg=SODIUM_TARGET_MG,
    )


@dataclass
class GoalService:
    """Targets keyed by the profile inputs they depend on."""

    repository: ProfileRepository
    cache: Cache
    ttl_seconds: int = 86400

    def targets_for(
        self, profile: Profile, today: date | None = None
    ) -> NutrientTargets | InsufficientData:
        """Return targets for a profile, reusing a result for identical inputs."""
        current = today or date.today()
        key = _goal_key(profile, current)
        cached = self.cache.get(key)
        if isinstance(cached, NutrientTargets | InsufficientData):
            return cached
        result = compute_targets(profile, current)
        self.cache.set(key, result, ttl_seconds=self.ttl_seconds)
        return result

    def get_targets(
        self, user_id: str, today: date | None = None
    ) -> NutrientTargets | InsufficientData | None:
        """Return targets for a stored user, or None if the user is unknown."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            return None
        return self.targets_for(profile, today)

    def refresh_targets(
        self, user_id: str, today: date | None = None
    ) -> NutrientTargets | InsufficientData | None:
        """Recompute targets and persist them when they differ from stored ones."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            return None
        current = today or date.today()
        self.cache.invalidate(_goal_key(profile, current))
        result = self.targets_for(profile, current)
        computed = result if isinstance(result, NutrientTargets) else None
        if computed != profile.targets:
            self.repository.update_targets(user_id, computed)
            _logger.info(
                "Stored targets updated: user_id=%s calories=%s",
                user_id,
                computed.calories if computed else None,
            )
        return result


def _goal_key(profile: Profile, today: date) -> tuple[object, ...]:
    return (
        "goals",
        profile.sex,
        str(profile.dob) if profile.dob is not None else None,
        profile.height_cm,
        profile.weight_kg,
        profile.activity_level,
        today.isoformat(),
    )


def _parse_dob(dob: date | str | None) -> date | None:
    if dob is None:
        return None
    if isinstance(dob, date):
        return dob
    try:
        return date.fromisoformat(dob.strip())
    except ValueError:
        return None
