"""Supabase repository for caregiver food lists and connections."""

from dataclasses import dataclass

from supabase import Client

from nutrimate.domain.caregivers import AllowRule, DenyRule
from nutrimate.services.reports import PatientConnectionRepository
from nutrimate.services.safety import CaregiverRuleRepository

# Stored rows may predate the non-empty reason constraint.
MISSING_REASON = "No reason was recorded by your caregiver."


@dataclass
class SupabaseCaregiverRepository(CaregiverRuleRepository, PatientConnectionRepository):
    """Supabase implementation for safe_foods, restricted_foods and connections."""

    client: Client

    def list_allow_rules(self, user_id: str) -> list[AllowRule]:
        """Return approved foods for a user."""
        response = (
            self.client.table("safe_foods")
            .select("doctor_id, food_name, brand_name, notes")
            .eq("user_id", user_id)
            .execute()
        )
        return [
            AllowRule(
                name=str(row.get("food_name", "")),
                brand=row.get("brand_name") or None,
                note=row.get("notes"),
                caregiver_id=row.get("doctor_id"),
            )
            for row in response.data or []
        ]

    def list_deny_rules(self, user_id: str) -> list[DenyRule]:
        """Return restricted foods for a user."""
        response = (
            self.client.table("restricted_foods")
            .select("doctor_id, food_name, brand_name, reason")
            .eq("user_id", user_id)
            .execute()
        )
        return [
            DenyRule(
                name=str(row.get("food_name", "")),
                brand=row.get("brand_name") or None,
                reason=str(row.get("reason") or "").strip() or MISSING_REASON,
                caregiver_id=row.get("doctor_id"),
            )
            for row in response.data or []
        ]

    def list_patient_ids(self, caregiver_id: str) -> list[str]:
        """Return ids of patients connected to a caregiver."""
        response = (
            self.client.table("doctor_connections")
            .select("user_id")
            .eq("doctor_id", caregiver_id)
            .execute()
        )
        return [str(row["user_id"]) for row in response.data or []]
