"""
Tests for processing/safety_score.py

Covers: tier points, one tier per code, rating thresholds, the neutral
no-data rating, and monotonicity when adding severe codes.
"""

import pytest

from config.hazard_rules import HAZARD_TIERS, NO_DATA_RATING
from processing.safety_score import calculate_risk_score, calculate_safety_rating


# ═══════════════════════════════════════════════════════════════════════════
# Risk score
# ═══════════════════════════════════════════════════════════════════════════

class TestRiskScore:
    @pytest.mark.parametrize("code, points", [
        ("H300", 3), ("H310", 3), ("H330", 3),
        ("H301", 2), ("H311", 2), ("H331", 2),
        ("H302", 1), ("H312", 1), ("H332", 1),
        ("H400", 2), ("H410", 2),
        ("H401", 1), ("H411", 1),
    ])
    def test_tier_points(self, code, points):
        assert calculate_risk_score([code]) == points

    def test_unknown_codes_score_nothing(self):
        assert calculate_risk_score(["H315", "H319", "H335", "EUH401"]) == 0

    def test_lowercase_and_whitespace_tolerated(self):
        assert calculate_risk_score([" h300 "]) == 3

    def test_codes_are_summed(self):
        assert calculate_risk_score(["H302", "H411"]) == 2

    def test_combined_token_scores_most_severe_tier_only(self):
        assert calculate_risk_score(["H301+H410"]) == 2
        assert calculate_risk_score(["H302+H400"]) == 2
        assert calculate_risk_score(["H411+H300"]) == 3
        assert calculate_risk_score([" h302 + h312 "]) == 1

    @pytest.mark.parametrize("code", ["EUH401", "H4011", "XH300", "H30", "H300A"])
    def test_codes_match_exactly(self, code):
        assert calculate_risk_score([code]) == 0

    def test_combined_token_with_unknown_part(self):
        assert calculate_risk_score(["EUH401+H302"]) == 1

    def test_tiers_ordered_most_severe_first_within_category(self):
        acute = [t.points for t in HAZARD_TIERS if t.name.startswith("acute")]
        aquatic = [t.points for t in HAZARD_TIERS if t.name.startswith("aquatic")]
        assert acute == sorted(acute, reverse=True)
        assert aquatic == sorted(aquatic, reverse=True)


# ═══════════════════════════════════════════════════════════════════════════
# Safety rating
# ═══════════════════════════════════════════════════════════════════════════

class TestSafetyRating:
    def test_empty_list_is_neutral(self):
        assert calculate_safety_rating([]) == NO_DATA_RATING == 3

    def test_only_unknown_codes_is_safest(self):
        assert calculate_safety_rating(["H315"]) == 5

    @pytest.mark.parametrize("codes, expected", [
        (["H411"], 4),                          # score 1
        (["H302", "H411"], 3),                  # score 2
        (["H301", "H411"], 3),                  # score 3
        (["H300", "H411"], 2),                  # score 4
        (["H300", "H410"], 2),                  # score 5
        (["H300", "H310"], 1),                  # score 6
        (["H301", "H311", "H331", "H410"], 1),  # score 8
    ])
    def test_thresholds(self, codes, expected):
        assert calculate_safety_rating(codes) == expected

    def test_accepts_generators(self):
        assert calculate_safety_rating(code for code in ["H302", "H411"]) == 3

    @pytest.mark.parametrize("base", [
        ["H315"],
        ["H302"],
        ["H302", "H411"],
        ["H301", "H410"],
        ["H300", "H310"],
    ])
    @pytest.mark.parametrize("extra", ["H300", "H310", "H330", "H400", "H410"])
    def test_adding_severe_code_never_raises_rating(self, base, extra):
        assert calculate_safety_rating(base + [extra]) <= calculate_safety_rating(base)
