"""Domain models for history reports and caregiver exports."""

from dataclasses import dataclass, fields
from datetime import date

NOT_AVAILABLE = "N/A"

SUMMARY_COLUMNS = (
    "Date",
    "Type",
    "Item",
    "Calories (kcal)",
    "Protein (g)",
    "Carbs (g)",
    "Fat (g)",
    "Sugar (g)",
    "Sodium (mg)",
    "Iron (mg)",
    "Calcium (mg)",
    "Potassium (mg)",
    "Vitamin A (IU)",
    "Vitamin C (mg)",
    "Vitamin D (IU)",
)


@dataclass(frozen=True)
class SummaryRow:
    """One formatted history entry, fields in export column order."""

    date: str
    tag: str
    item: str
    calories: str
    protein_g: str
    carbs_g: str
    fat_g: str
    sugar_g: str
    sodium_mg: str
    iron_mg: str
    calcium_mg: str
    potassium_mg: str
    vitamin_a_iu: str
    vitamin_c_mg: str
    vitamin_d_iu: str

    def as_dict(self) -> dict[str, str]:
        """Return the row keyed by export column titles."""
        values = [getattr(self, item.name) for item in fields(self)]
        return dict(zip(SUMMARY_COLUMNS, values, strict=True))


@dataclass(frozen=True)
class Rollup:
    """Headline numbers for a user's history."""

    entry_count: int
    last_date: date | None
    today_calorie_total: float


@dataclass(frozen=True)
class PatientSummary:
    """Caregiver summary sheet row for one patient."""

    full_name: str | None
    phone_number: str | None
    age: str
    sex: str | None
    height_cm: float | None
    weight_kg: float | None
    medical_history: str | None
    total_entries: int
    last_logged_date: str
    calories_today: str
    calorie_status: str
    health_stars: int
