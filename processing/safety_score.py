"""
Safety score calculator: derives a 1-5 safety rating from hazard codes.

Public API:
    calculate_risk_score(hazard_codes) → int
    calculate_safety_rating(hazard_codes) → int
"""

import logging
from collections.abc import Iterable

from config.hazard_rules import (
    COMBINED_CODE_SEPARATOR,
    HAZARD_TIERS,
    NO_DATA_RATING,
    RATING_THRESHOLDS,
    HazardTier,
)

logger = logging.getLogger(__name__)


def calculate_risk_score(hazard_codes: Iterable[str]) -> int:
    """
    Sum the severity points of every hazard code.

    Each code scores the points of the most severe tier it matches, and
    only that tier.  Codes match exactly; "H301+H410" style combinations
    are matched part by part.  Unknown codes score nothing.
    """
    score = 0
    for code in hazard_codes:
        tier = _match_tier(code)
        if tier is not None:
            score += tier.points
    return score


def calculate_safety_rating(hazard_codes: Iterable[str]) -> int:
    """
    Map hazard codes to a safety rating in [1, 5], 5 being the safest.

    An empty code list yields the neutral NO_DATA_RATING rather than 5.
    """
    codes = list(hazard_codes)
    if not codes:
        return NO_DATA_RATING

    risk_score = calculate_risk_score(codes)
    for minimum, rating in RATING_THRESHOLDS:
        if risk_score >= minimum:
            return rating

    # Only reached when the table has no 0 threshold.
    return RATING_THRESHOLDS[-1][1]


def _match_tier(code: str) -> HazardTier | None:
    """Most severe tier matched by any part of a "+"-combined code."""
    parts = {
        part.strip()
        for part in code.upper().split(COMBINED_CODE_SEPARATOR)
        if part.strip()
    }
    matching = [tier for tier in HAZARD_TIERS if parts.intersection(tier.codes)]
    if not matching:
        return None
    return max(matching, key=lambda tier: tier.points)
