"""
Hazard severity tiers used to derive a product's safety rating.

A single hazard code scores the points of the most severe tier it matches
and nothing else.  The accumulated risk score is mapped to a 1-5 rating
(5 = safest) through RATING_THRESHOLDS.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HazardTier:
    """One severity category of GHS hazard statements."""

    name: str
    codes: tuple[str, ...]
    points: int


HAZARD_TIERS: list[HazardTier] = [
    HazardTier("acute toxicity: fatal", ("H300", "H310", "H330"), 3),
    HazardTier("acute toxicity: toxic", ("H301", "H311", "H331"), 2),
    HazardTier("acute toxicity: harmful", ("H302", "H312", "H332"), 1),
    HazardTier("aquatic toxicity: very toxic", ("H400", "H410"), 2),
    HazardTier("aquatic toxicity: toxic", ("H401", "H411"), 1),
]

# (minimum risk score, rating), checked top to bottom.
RATING_THRESHOLDS: list[tuple[int, int]] = [
    (6, 1),
    (4, 2),
    (2, 3),
    (1, 4),
    (0, 5),
]

# No hazard data is not evidence of safety.
NO_DATA_RATING: int = 3

# Joins the statements of a combined code, e.g. "H301+H311".
COMBINED_CODE_SEPARATOR: str = "+"
