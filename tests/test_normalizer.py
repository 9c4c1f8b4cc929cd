"""
Tests for processing/normalizer.py

Covers: approval status rule order and default, crop synonyms, list-field
splitting, jurisdiction upper-casing, and MRL parsing with partial data.
"""

import pytest

from config.normalization_rules import APPROVAL_STATUS_RULES, DEFAULT_APPROVAL_STATUS
from config.schema import ApprovalStatus
from processing.normalizer import (
    MRLEntry,
    match_approval_status,
    normalize_approval_status,
    normalize_crop_name,
    parse_approved_crops,
    parse_hazard_codes,
    parse_jurisdictions,
    parse_list_field,
    parse_mrl_values,
    parse_restrictions,
)


# ═══════════════════════════════════════════════════════════════════════════
# Approval status
# ═══════════════════════════════════════════════════════════════════════════

class TestApprovalStatus:
    @pytest.mark.parametrize("raw, expected", [
        ("Approved", ApprovalStatus.APPROVED),
        ("Authorised", ApprovalStatus.APPROVED),
        ("  AUTHORISED until 2030 ", ApprovalStatus.APPROVED),
        ("Pending", ApprovalStatus.PENDING),
        ("Under review", ApprovalStatus.PENDING),
        ("Withdrawn", ApprovalStatus.WITHDRAWN),
        ("Cancelled by applicant", ApprovalStatus.WITHDRAWN),
        ("Expired", ApprovalStatus.EXPIRED),
        ("Not renewed", ApprovalStatus.EXPIRED),
    ])
    def test_known_values(self, raw, expected):
        assert normalize_approval_status(raw) == expected

    def test_unrecognized_defaults_to_approved(self):
        assert normalize_approval_status("Restricted") == ApprovalStatus.APPROVED
        assert DEFAULT_APPROVAL_STATUS == ApprovalStatus.APPROVED

    def test_blank_and_none_default(self):
        assert normalize_approval_status("") == DEFAULT_APPROVAL_STATUS
        assert normalize_approval_status(None) == DEFAULT_APPROVAL_STATUS

    def test_match_returns_none_without_rule(self):
        assert match_approval_status("Restricted") is None
        assert match_approval_status("   ") is None

    def test_first_rule_wins(self):
        # "approved" is checked before "withdrawn"
        assert normalize_approval_status("Approved, later withdrawn") == ApprovalStatus.APPROVED

    def test_rule_table_order(self):
        assert [status for _, status in APPROVAL_STATUS_RULES] == [
            ApprovalStatus.APPROVED,
            ApprovalStatus.PENDING,
            ApprovalStatus.WITHDRAWN,
            ApprovalStatus.EXPIRED,
        ]


# ═══════════════════════════════════════════════════════════════════════════
# Crop names
# ═══════════════════════════════════════════════════════════════════════════

class TestCropName:
    @pytest.mark.parametrize("raw, expected", [
        ("vine", "grapes"),
        ("Vitis vinifera", "grapes"),
        ("Grape", "grapes"),
        ("Solanum lycopersicum", "tomatoes"),
        ("Maize", "corn"),
        ("zea mays", "corn"),
        ("  Potato  ", "potatoes"),
    ])
    def test_synonyms(self, raw, expected):
        assert normalize_crop_name(raw) == expected

    def test_unmatched_passes_through_unchanged(self):
        assert normalize_crop_name("Sugar beet") == "Sugar beet"
        assert normalize_crop_name("Leafy Vegetables") == "Leafy Vegetables"

    def test_canonical_name_any_case(self):
        assert normalize_crop_name("Grapes") == "grapes"
        assert normalize_crop_name("TOMATOES") == "tomatoes"

    def test_unmatched_is_stripped(self):
        assert normalize_crop_name("  Stone fruits ") == "Stone fruits"


# ═══════════════════════════════════════════════════════════════════════════
# List fields
# ═══════════════════════════════════════════════════════════════════════════

class TestListFields:
    def test_split_trim_drop_empty(self):
        assert parse_list_field(" a ;; b ;", ";") == ["a", "b"]

    def test_blank_gives_empty_list(self):
        assert parse_list_field("", ",") == []
        assert parse_list_field(None, ",") == []

    def test_jurisdictions_upper_cased(self):
        assert parse_jurisdictions("de, fr ,It") == ["DE", "FR", "IT"]

    def test_jurisdictions_deduplicated(self):
        assert parse_jurisdictions("DE,de,FR") == ["DE", "FR"]

    def test_restrictions_split_on_semicolon(self):
        assert parse_restrictions("Not for use during flowering; Max 6, per season") == [
            "Not for use during flowering",
            "Max 6, per season",
        ]

    def test_hazard_codes_keep_case(self):
        assert parse_hazard_codes("H302, h411,H361f") == ["H302", "h411", "H361f"]

    def test_approved_crops_are_canonicalized(self):
        assert parse_approved_crops("Vine;Tomato; Lettuce") == ["grapes", "tomatoes", "Lettuce"]


# ═══════════════════════════════════════════════════════════════════════════
# MRL values
# ═══════════════════════════════════════════════════════════════════════════

class TestMRLValues:
    def test_two_entries(self):
        assert parse_mrl_values("Grapes: 5.0 mg/kg; Tomatoes: 1.0 mg/kg") == [
            MRLEntry(crop="grapes", mrl=5.0, unit="mg/kg"),
            MRLEntry(crop="tomatoes", mrl=1.0, unit="mg/kg"),
        ]

    def test_crop_synonym_applied(self):
        assert parse_mrl_values("vine: 2 mg/kg") == [MRLEntry("grapes", 2.0, "mg/kg")]

    def test_ppm_unit_lowercased(self):
        assert parse_mrl_values("Wheat:0.2 PPM") == [MRLEntry("wheat", 0.2, "ppm")]

    def test_non_matching_segments_skipped(self):
        result = parse_mrl_values("Grapes: 5.0 mg/kg; Apples: n/a; Cereals 10 mg/kg")
        assert result == [MRLEntry("grapes", 5.0, "mg/kg")]

    def test_unknown_unit_skipped(self):
        assert parse_mrl_values("Grapes: 5.0 g/ha") == []

    def test_bad_number_skipped(self):
        assert parse_mrl_values("Grapes: 1.2.3 mg/kg; Apples: 0.5 mg/kg") == [
            MRLEntry("apples", 0.5, "mg/kg"),
        ]

    def test_blank(self):
        assert parse_mrl_values("") == []
        assert parse_mrl_values(None) == []
