"""Request and response models for the HTTP API."""

from pydantic import BaseModel, Field

from nutrimate.domain.analysis import NutritionPayload


class SafetyCheckRequest(BaseModel):
    """Candidate item to check against the user's caregiver lists."""

    name: str = Field(min_length=1)
    brand: str | None = None
    nutrition: NutritionPayload = Field(default_factory=NutritionPayload)


class SafetyCheckResponse(BaseModel):
    """Authoritative safety verdict."""

    is_safe: bool
    reason: str
