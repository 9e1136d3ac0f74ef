"""Models for results returned by the analysis collaborator."""

from typing import Literal

from pydantic import BaseModel, Field

from nutrimate.domain.caregivers import FoodIdentity
from nutrimate.domain.nutrition import Micronutrients, NutrientVector


class MicronutrientsPayload(BaseModel):
    """Micronutrients as reported by the analysis collaborator."""

    iron_mg: float | None = Field(default=None, ge=0.0)
    calcium_mg: float | None = Field(default=None, ge=0.0)
    potassium_mg: float | None = Field(default=None, ge=0.0)
    vitamin_a_iu: float | None = Field(default=None, ge=0.0)
    vitamin_c_mg: float | None = Field(default=None, ge=0.0)
    vitamin_d_iu: float | None = Field(default=None, ge=0.0)


class NutritionPayload(BaseModel):
    """Nutrient vector as reported by the analysis collaborator."""

    calories: float = Field(default=0.0, ge=0.0)
    protein_g: float = Field(default=0.0, ge=0.0)
    fat_g: float = Field(default=0.0, ge=0.0)
    carbs_g: float = Field(default=0.0, ge=0.0)
    sugar_g: float = Field(default=0.0, ge=0.0)
    sodium_mg: float = Field(default=0.0, ge=0.0)
    micronutrients: MicronutrientsPayload | None = None

    def to_vector(self) -> NutrientVector:
        """Convert to the domain nutrient vector."""
        micros = (
            Micronutrients(**self.micronutrients.model_dump())
            if self.micronutrients
            else None
        )
        return NutrientVector(
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
            sugar_g=self.sugar_g,
            sodium_mg=self.sodium_mg,
            micronutrients=micros,
        )


class VerdictPayload(BaseModel):
    """Safety verdict in wire form."""

    is_safe: bool
    reason: str


class AnalysisResult(BaseModel):
    """Single analysis of a food photo or product label."""

    tag: Literal["food", "label"]
    name: str
    brand: str | None = None
    nutrition: NutritionPayload
    expiry_date: str | None = None
    warnings: list[str] | None = None
    safety_verdict: VerdictPayload | None = None

    @property
    def identity(self) -> FoodIdentity:
        return FoodIdentity(self.name, self.brand)
