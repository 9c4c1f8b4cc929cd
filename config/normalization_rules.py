"""
Deterministic normalization tables for regulatory dataset fields.

Approval status is matched by substring against an ORDERED rule table: the
first rule with a keyword contained in the lowercased value wins.  Crop names
use an exact (lowercased, stripped) synonym lookup; values not found are
kept as-is.
"""

import re

from config.schema import ApprovalStatus

# ---------------------------------------------------------------------------
# Approval Status: (keywords, canonical) evaluated top to bottom.
# ---------------------------------------------------------------------------
APPROVAL_STATUS_RULES: list[tuple[tuple[str, ...], ApprovalStatus]] = [
    (("approved", "authorised"), ApprovalStatus.APPROVED),
    (("pending", "under review"), ApprovalStatus.PENDING),
    (("withdrawn", "cancelled"), ApprovalStatus.WITHDRAWN),
    (("expired", "not renewed"), ApprovalStatus.EXPIRED),
]

# Used when no rule matches (e.g. "Restricted").
DEFAULT_APPROVAL_STATUS: ApprovalStatus = ApprovalStatus.APPROVED

# ---------------------------------------------------------------------------
# Crop names: common and botanical synonyms → canonical store name
# ---------------------------------------------------------------------------
CROP_SYNONYM_MAP: dict[str, str] = {
    # canonical names, so "Grapes" and "grapes" agree
    "grapes": "grapes",
    "tomatoes": "tomatoes",
    "cucumbers": "cucumbers",
    "apples": "apples",
    "corn": "corn",
    "potatoes": "potatoes",
    "grape": "grapes",
    "vine": "grapes",
    "vitis vinifera": "grapes",
    "tomato": "tomatoes",
    "solanum lycopersicum": "tomatoes",
    "cucumber": "cucumbers",
    "cucumis sativus": "cucumbers",
    "apple": "apples",
    "malus domestica": "apples",
    "wheat": "wheat",
    "triticum aestivum": "wheat",
    "maize": "corn",
    "zea mays": "corn",
    "potato": "potatoes",
    "solanum tuberosum": "potatoes",
}

# ---------------------------------------------------------------------------
# Separators for list-valued columns
# ---------------------------------------------------------------------------
JURISDICTION_SEPARATOR: str = ","
HAZARD_CODE_SEPARATOR: str = ","
RESTRICTION_SEPARATOR: str = ";"
CROP_SEPARATOR: str = ";"
MRL_SEPARATOR: str = ";"

# One MRL segment, e.g. "Grapes: 5.0 mg/kg" or "wheat:0.2 PPM"
MRL_ENTRY_PATTERN = re.compile(r"(.+?):\s*([0-9.]+)\s*(mg/kg|ppm)", re.IGNORECASE)
