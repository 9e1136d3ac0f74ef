"""Nutrition domain models."""

import math
from collections.abc import Mapping
from dataclasses import dataclass

MICRONUTRIENT_FIELDS = (
    "iron_mg",
    "calcium_mg",
    "potassium_mg",
    "vitamin_a_iu",
    "vitamin_c_mg",
    "vitamin_d_iu",
)

# Keys used by the analysis collaborator and the food_history JSON column.
_VECTOR_KEYS = {
    "calories": "calories",
    "protein_g": "proteinGrams",
    "fat_g": "fatGrams",
    "carbs_g": "carbohydratesGrams",
    "sugar_g": "sugarGrams",
    "sodium_mg": "sodiumMilligrams",
}
_MICRO_KEYS = {
    "iron_mg": "ironMg",
    "calcium_mg": "calciumMg",
    "potassium_mg": "potassiumMg",
    "vitamin_a_iu": "vitaminAIU",
    "vitamin_c_mg": "vitaminCMg",
    "vitamin_d_iu": "vitaminDIU",
}


@dataclass(frozen=True)
class Micronutrients:
    """Optional micronutrient measurements; None means not measured."""

    iron_mg: float | None = None
    calcium_mg: float | None = None
    potassium_mg: float | None = None
    vitamin_a_iu: float | None = None
    vitamin_c_mg: float | None = None
    vitamin_d_iu: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Micronutrients":
        """Parse micronutrients, keeping absent values as None."""
        values = {
            name: _optional_amount(data.get(key, data.get(name)))
            for name, key in _MICRO_KEYS.items()
        }
        return cls(**values)


@dataclass(frozen=True)
class NutrientVector:
    """Six-field nutrient measurement, also used as an accumulator."""

    calories: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0
    sugar_g: float = 0.0
    sodium_mg: float = 0.0
    micronutrients: Micronutrients | None = None

    @classmethod
    def zero(cls) -> "NutrientVector":
        """Return the empty accumulator."""
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, object] | None) -> "NutrientVector":
        """Parse a nutrition payload; missing or negative fields become zero."""
        if not data:
            return cls()
        values = {
            name: _amount(data.get(key, data.get(name)))
            for name, key in _VECTOR_KEYS.items()
        }
        micros_raw = data.get("micronutrients")
        micros = (
            Micronutrients.from_mapping(micros_raw)
            if isinstance(micros_raw, Mapping)
            else None
        )
        return cls(**values, micronutrients=micros)

    def clamped(self) -> "NutrientVector":
        """Return a copy with negative or non-finite required fields set to zero."""
        return NutrientVector(
            calories=clamp_amount(self.calories),
            protein_g=clamp_amount(self.protein_g),
            fat_g=clamp_amount(self.fat_g),
            carbs_g=clamp_amount(self.carbs_g),
            sugar_g=clamp_amount(self.sugar_g),
            sodium_mg=clamp_amount(self.sodium_mg),
            micronutrients=self.micronutrients,
        )


@dataclass(frozen=True)
class NutrientTargets:
    """Daily nutrient targets derived from a biometric profile."""

    calories: int
    protein_g: int
    fat_g: int
    carbs_g: int
    sugar_g: int
    sodium_mg: int


def clamp_amount(value: float) -> float:
    """Map negative, NaN and infinite amounts to zero."""
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _amount(raw: object) -> float:
    value = _optional_amount(raw)
    return value if value is not None else 0.0


def _optional_amount(raw: object) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return max(value, 0.0)
