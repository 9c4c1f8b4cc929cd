"""
Field normalizers: pure functions turning raw dataset cells into canonical
domain values.

  - Approval status: ordered substring rule table with a default fallback.
  - Crop names: synonym lookup, unmatched names pass through.
  - List fields (jurisdictions, restrictions, hazard codes, crops): split,
    trim, drop empties.
  - MRL field: "<crop>: <number> <unit>" segments separated by ";".
    Segments that do not match are skipped; partial MRL data is normal.

Public API:
    normalize_approval_status(text) → ApprovalStatus
    match_approval_status(text) → ApprovalStatus | None
    normalize_crop_name(text) → str
    parse_list_field(text, separator, uppercase) → list[str]
    parse_jurisdictions(text) → list[str]
    parse_restrictions(text) → list[str]
    parse_hazard_codes(text) → list[str]
    parse_approved_crops(text) → list[str]
    parse_mrl_values(text) → list[MRLEntry]
"""

import logging
from dataclasses import dataclass

from config.normalization_rules import (
    APPROVAL_STATUS_RULES,
    CROP_SEPARATOR,
    CROP_SYNONYM_MAP,
    DEFAULT_APPROVAL_STATUS,
    HAZARD_CODE_SEPARATOR,
    JURISDICTION_SEPARATOR,
    MRL_ENTRY_PATTERN,
    MRL_SEPARATOR,
    RESTRICTION_SEPARATOR,
)
from config.schema import ApprovalStatus

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MRLEntry:
    """A maximum residue level for one crop."""

    crop: str
    mrl: float
    unit: str


# ═══════════════════════════════════════════════════════════════════════════
# Approval status
# ═══════════════════════════════════════════════════════════════════════════

def match_approval_status(text: str | None) -> ApprovalStatus | None:
    """
    Return the status of the first rule whose keyword occurs in *text*.

    Matching is case-insensitive and ignores surrounding whitespace.
    Returns None when no rule matches (including blank input).
    """
    if not text:
        return None

    normalized = text.strip().lower()
    if not normalized:
        return None

    for keywords, status in APPROVAL_STATUS_RULES:
        if any(keyword in normalized for keyword in keywords):
            return status
    return None


def normalize_approval_status(text: str | None) -> ApprovalStatus:
    """Canonical approval status, falling back to DEFAULT_APPROVAL_STATUS."""
    status = match_approval_status(text)
    if status is None:
        logger.debug(
            f"Unrecognized approval status '{text}' → "
            f"defaulting to '{DEFAULT_APPROVAL_STATUS.value}'"
        )
        return DEFAULT_APPROVAL_STATUS
    return status


# ═══════════════════════════════════════════════════════════════════════════
# Crop names
# ═══════════════════════════════════════════════════════════════════════════

def normalize_crop_name(text: str) -> str:
    """
    Map a crop name or botanical synonym to its canonical store name.

    Unknown names are returned stripped but otherwise unchanged (case is
    not altered).
    """
    stripped = text.strip()
    return CROP_SYNONYM_MAP.get(stripped.lower(), stripped)


# ═══════════════════════════════════════════════════════════════════════════
# List fields
# ═══════════════════════════════════════════════════════════════════════════

def parse_list_field(
    text: str | None,
    separator: str,
    uppercase: bool = False,
) -> list[str]:
    """
    Split a list-valued cell into trimmed, non-empty tokens.

    Args:
        text: Raw cell value (None or blank yields an empty list).
        separator: Token separator.
        uppercase: Upper-case every token.

    Returns:
        Tokens in source order.
    """
    if not text:
        return []

    tokens = [token.strip() for token in text.split(separator)]
    tokens = [token for token in tokens if token]
    if uppercase:
        tokens = [token.upper() for token in tokens]
    return tokens


def parse_jurisdictions(text: str | None) -> list[str]:
    """Upper-cased member state codes, duplicates removed (first seen wins)."""
    codes = parse_list_field(text, JURISDICTION_SEPARATOR, uppercase=True)
    return list(dict.fromkeys(codes))


def parse_restrictions(text: str | None) -> list[str]:
    return parse_list_field(text, RESTRICTION_SEPARATOR)


def parse_hazard_codes(text: str | None) -> list[str]:
    return parse_list_field(text, HAZARD_CODE_SEPARATOR)


def parse_approved_crops(text: str | None) -> list[str]:
    return [
        normalize_crop_name(crop)
        for crop in parse_list_field(text, CROP_SEPARATOR)
    ]


# ═══════════════════════════════════════════════════════════════════════════
# MRL values
# ═══════════════════════════════════════════════════════════════════════════

def parse_mrl_values(text: str | None) -> list[MRLEntry]:
    """
    Parse a "Grapes: 5.0 mg/kg; Tomatoes: 1.0 mg/kg" style MRL cell.

    Each ";" segment is matched against MRL_ENTRY_PATTERN.  Matching
    segments become MRLEntry objects with a canonical crop name, a float
    threshold and a lower-cased unit.  Non-matching segments, and numbers
    such as "1.2.3" that match the pattern but are not valid floats, are
    skipped.

    Args:
        text: Raw MRL cell value.

    Returns:
        MRL entries in source order.
    """
    if not text:
        return []

    entries: list[MRLEntry] = []
    for segment in text.split(MRL_SEPARATOR):
        if not segment.strip():
            continue

        match = MRL_ENTRY_PATTERN.search(segment)
        if match is None:
            logger.debug(f"Skipping MRL segment without a threshold: '{segment.strip()}'")
            continue

        label, number, unit = match.groups()
        try:
            value = float(number)
        except ValueError:
            logger.debug(f"Skipping MRL segment with bad number: '{segment.strip()}'")
            continue

        entries.append(
            MRLEntry(
                crop=normalize_crop_name(label),
                mrl=value,
                unit=unit.lower(),
            )
        )

    return entries
