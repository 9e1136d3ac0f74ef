"""Domain models for consumption history."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from nutrimate.domain.nutrition import NutrientVector

RecordTag = Literal["food", "label"]


@dataclass(frozen=True)
class ConsumptionRecord:
    """A committed food or label analysis in the user's history."""

    occurred_at: datetime
    tag: RecordTag
    name: str
    nutrients: NutrientVector
    id: int | None = None
    brand: str | None = None
    weight_grams: float | None = None
