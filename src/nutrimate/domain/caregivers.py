"""Domain models for caregiver food rules and safety verdicts."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodIdentity:
    """Item name plus optional brand, the join key against caregiver rules."""

    name: str
    brand: str | None = None

    def normalized(self) -> "FoodIdentity":
        """Return the case and whitespace insensitive form of this identity."""
        brand = normalize_text(self.brand) if self.brand is not None else None
        return FoodIdentity(name=normalize_text(self.name), brand=brand or None)


@dataclass(frozen=True)
class AllowRule:
    """Caregiver-approved food for one user."""

    name: str
    brand: str | None = None
    note: str | None = None
    caregiver_id: str | None = None

    @property
    def identity(self) -> FoodIdentity:
        return FoodIdentity(self.name, self.brand)


@dataclass(frozen=True)
class DenyRule:
    """Caregiver-restricted food for one user."""

    name: str
    reason: str
    brand: str | None = None
    caregiver_id: str | None = None

    def __post_init__(self) -> None:
        if not self.reason or not self.reason.strip():
            raise ValueError("A restricted food needs a reason")

    @property
    def identity(self) -> FoodIdentity:
        return FoodIdentity(self.name, self.brand)


@dataclass(frozen=True)
class SafetyVerdict:
    """Whether an item is safe for the user, with a one-sentence reason."""

    is_safe: bool
    reason: str


def normalize_text(value: str) -> str:
    """Casefold and collapse whitespace."""
    return " ".join(value.split()).casefold()
