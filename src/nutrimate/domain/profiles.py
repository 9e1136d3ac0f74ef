"""Domain models for user profiles and body metrics."""

from dataclasses import dataclass
from datetime import date
from typing import Literal

from nutrimate.domain.nutrition import NutrientTargets

Sex = Literal["female", "male", "other"]
ActivityLevel = Literal["sedentary", "lightly_active", "active", "very_active"]
BodyMassCategory = Literal["underweight", "normal", "overweight", "obesity"]


@dataclass(frozen=True)
class Profile:
    """Biometric profile of a tracked user."""

    id: str
    sex: Sex | None
    dob: date | str | None
    height_cm: float | None
    weight_kg: float | None
    activity_level: ActivityLevel | None
    medical_history: str | None = None
    targets: NutrientTargets | None = None
    full_name: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class InsufficientData:
    """Goal computation is impossible until the listed fields are filled in."""

    missing: tuple[str, ...]


@dataclass(frozen=True)
class BodyMassResult:
    """Body mass index with its category."""

    bmi: float
    category: BodyMassCategory
    is_risk: bool


@dataclass(frozen=True)
class Unavailable:
    """Body mass index cannot be computed without height and weight."""

    reason: str = "Enter height and weight to see your BMI."
