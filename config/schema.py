"""
Dataset and store schema definitions for the pesticide registry import.

Defines the expected column headers of the regulatory export, which of them
must be populated for a row to be accepted, the canonical approval statuses,
and the column names used by the relational store.
"""

from enum import Enum


# Expected header columns of the regulatory dataset export, in export order.
# Header names are matched exactly (case-sensitive).
DATASET_COLUMNS: list[str] = [
    "Active substance",
    "Product name",
    "Registration number",
    "Approval status",
    "Approval date",
    "Expiry date",
    "Approved crops",
    "MRL (mg/kg)",
    "Member states",
    "Restrictions",
    "Hazard classification",
]

# Columns that must be non-blank for a row to become a canonical record.
REQUIRED_COLUMNS: list[str] = [
    "Active substance",
    "Product name",
]


class ApprovalStatus(str, Enum):
    """Canonical approval states of a registered product."""

    APPROVED = "approved"
    PENDING = "pending"
    WITHDRAWN = "withdrawn"
    EXPIRED = "expired"


# Values written to new products that the dataset does not carry.
DEFAULT_PRODUCT_TYPE: str = "chemical"
DEFAULT_MANUFACTURER: str = "EU Registered"

# ---------------------------------------------------------------------------
# Store columns (pesticide_products / pesticide_dosages tables)
# ---------------------------------------------------------------------------
PRODUCT_COLUMNS: list[str] = [
    "id",
    "name",
    "active_ingredient",
    "type",
    "description",
    "manufacturer",
    "safety_rating",
    "eu_approved",
    # Needs a migration on top of the base product table, which only has eu_approved
    "eu_approval_status",
    "eu_approval_date",
    "eu_expiry_date",
    "eu_registration_number",
    "eu_member_states",
    "eu_restrictions",
    "eu_hazard_classification",
    "updated_at",
]

DOSAGE_COLUMNS: list[str] = [
    "id",
    "pesticide_id",
    "crop",
    "mrl_value",
    "mrl_unit",
    "eu_compliant",
    "notes",
]
