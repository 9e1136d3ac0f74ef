"""Caregiver-aware food safety checks."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from nutrimate.domain.analysis import AnalysisResult, VerdictPayload
from nutrimate.domain.caregivers import (
    AllowRule,
    DenyRule,
    FoodIdentity,
    SafetyVerdict,
    normalize_text,
)
from nutrimate.domain.nutrition import NutrientVector
from nutrimate.domain.profiles import Profile

ConflictChecker = Callable[[NutrientVector, str | None], tuple[bool, str]]

NO_CONFLICT_REASON = "No conflicts found with your medical history or caregiver lists."

_logger = logging.getLogger(__name__)


class BrandMatching(str, Enum):
    """How a rule's brand is compared with a candidate's brand."""

    # Brandless rule covers every brand; branded rule needs the same brand.
    STANDARD = "standard"
    # Brands must be equal, a brandless rule only covers brandless items.
    STRICT = "strict"
    # Brands are ignored.
    NAME_ONLY = "name_only"


class CaregiverRuleRepository(Protocol):
    """Persistence interface for caregiver food lists."""

    def list_allow_rules(self, user_id: str) -> list[AllowRule]:
        """Return every caregiver-approved food for a user."""

    def list_deny_rules(self, user_id: str) -> list[DenyRule]:
        """Return every caregiver-restricted food for a user."""


def identity_matches(
    candidate: FoodIdentity,
    rule: FoodIdentity,
    brand_matching: BrandMatching = BrandMatching.STANDARD,
) -> bool:
    """Return True when a rule identity confirms the candidate identity."""
    left = candidate.normalized()
    right = rule.normalized()
    if left.name != right.name:
        return False
    if brand_matching is BrandMatching.NAME_ONLY:
        return True
    if brand_matching is BrandMatching.STRICT:
        return left.brand == right.brand
    if right.brand is None:
        return True
    return left.brand == right.brand


def resolve(  # noqa: PLR0913
    candidate: FoodIdentity,
    nutrients: NutrientVector,
    profile: Profile,
    allow_rules: Sequence[AllowRule],
    deny_rules: Sequence[DenyRule],
    conflict_checker: ConflictChecker | None = None,
    brand_matching: BrandMatching = BrandMatching.STANDARD,
) -> SafetyVerdict:
    """Decide whether an item is safe for the user.

    A matching restricted food always yields an unsafe verdict; the medical
    history check and the approved list are only consulted afterwards.
    """
    for rule in deny_rules:
        if identity_matches(candidate, rule.identity, brand_matching):
            return SafetyVerdict(
                is_safe=False,
                reason=(
                    f"{candidate.name.strip()} is on your caregiver's restricted "
                    f"list: {_sentence(rule.reason)}"
                ),
            )

    if conflict_checker is not None:
        conflict, reason = conflict_checker(nutrients, profile.medical_history)
        if conflict:
            return SafetyVerdict(is_safe=False, reason=reason)

    for rule in allow_rules:
        if identity_matches(candidate, rule.identity, brand_matching):
            note = "."
            if rule.note and rule.note.strip():
                note = f": {_sentence(rule.note)}"
            return SafetyVerdict(
                is_safe=True,
                reason=f"{candidate.name.strip()} is approved by your caregiver{note}",
            )

    return SafetyVerdict(is_safe=True, reason=NO_CONFLICT_REASON)


def reconcile_analysis(
    analysis: AnalysisResult, verdict: SafetyVerdict
) -> AnalysisResult:
    """Replace the collaborator's verdict guess with the authoritative one."""
    return analysis.model_copy(
        update={
            "safety_verdict": VerdictPayload(
                is_safe=verdict.is_safe, reason=verdict.reason
            )
        }
    )


def _sentence(text: str) -> str:
    cleaned = " ".join(text.split())
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


@dataclass(frozen=True)
class ConditionLimit:
    """Per-item nutrient ceiling for a medical condition."""

    keywords: tuple[str, ...]
    nutrient: str
    limit: float
    unit: str
    label: str
    condition: str


DEFAULT_CONDITION_LIMITS = (
    ConditionLimit(
        keywords=("hypertension", "high blood pressure", "blood pressure"),
        nutrient="sodium_mg",
        limit=600.0,
        unit="mg",
        label="sodium",
        condition="high blood pressure",
    ),
    ConditionLimit(
        keywords=("diabetes", "pre-diabetes", "prediabetes", "blood sugar"),
        nutrient="sugar_g",
        limit=15.0,
        unit="g",
        label="sugar",
        condition="diabetes",
    ),
    ConditionLimit(
        keywords=("cholesterol", "hyperlipidemia", "heart disease"),
        nutrient="fat_g",
        limit=20.0,
        unit="g",
        label="fat",
        condition="high cholesterol",
    ),
    ConditionLimit(
        keywords=("kidney", "renal", "ckd"),
        nutrient="protein_g",
        limit=25.0,
        unit="g",
        label="protein",
        condition="kidney disease",
    ),
)


@dataclass(frozen=True)
class MedicalHistoryKeywordChecker:
    """Flags items that exceed a ceiling tied to a condition in the history."""

    limits: tuple[ConditionLimit, ...] = DEFAULT_CONDITION_LIMITS

    def __call__(
        self, nutrients: NutrientVector, medical_history: str | None
    ) -> tuple[bool, str]:
        if not medical_history or not medical_history.strip():
            return False, NO_CONFLICT_REASON
        history = normalize_text(medical_history)
        for limit in self.limits:
            if not any(keyword in history for keyword in limit.keywords):
                continue
            amount = getattr(nutrients.clamped(), limit.nutrient)
            if amount > limit.limit:
                return True, (
                    f"Risky for {limit.condition}: {amount:.0f}{limit.unit} of "
                    f"{limit.label} is above the {limit.limit:.0f}{limit.unit} "
                    "limit for a single item."
                )
        return False, NO_CONFLICT_REASON


@dataclass
class SafetyService:
    """Runs the safety check against freshly loaded caregiver lists."""

    repository: CaregiverRuleRepository
    conflict_checker: ConflictChecker | None = field(
        default_factory=MedicalHistoryKeywordChecker
    )
    brand_matching: BrandMatching = BrandMatching.STANDARD

    def check(
        self,
        profile: Profile,
        candidate: FoodIdentity,
        nutrients: NutrientVector,
    ) -> SafetyVerdict:
        """Return the verdict for a candidate item."""
        allow_rules = self.repository.list_allow_rules(profile.id)
        deny_rules = self.repository.list_deny_rules(profile.id)
        verdict = resolve(
            candidate,
            nutrients,
            profile,
            allow_rules,
            deny_rules,
            conflict_checker=self.conflict_checker,
            brand_matching=self.brand_matching,
        )
        if not verdict.is_safe:
            _logger.info(
                "Unsafe item: user_id=%s item=%s", profile.id, candidate.name
            )
        return verdict

    def check_analysis(
        self, profile: Profile, analysis: AnalysisResult
    ) -> AnalysisResult:
        """Re-check an analysis result and attach the authoritative verdict."""
        verdict = self.check(profile, analysis.identity, analysis.nutrition.to_vector())
        return reconcile_analysis(analysis, verdict)
