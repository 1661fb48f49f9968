"""Tests for profile and drive payload normalization."""

import pytest

from placement_portal.services.profile_normalizer import (
    build_student_snapshot,
    is_profile_complete,
    missing_profile_fields,
    normalize_department,
    normalize_drive_payload,
    normalize_eligibility,
    normalize_profile,
)


class TestNormalizeProfile:
    """Canonical comparison values from stored profiles."""

    @pytest.mark.parametrize("raw", ["CSE", " cse", "Cse ", "CSE  "])
    def test_department_is_case_and_space_insensitive(self, raw):
        assert normalize_profile({"department": raw}).department == "cse"

    def test_inner_whitespace_collapsed(self):
        assert normalize_department("Computer   Science ") == "computer science"

    def test_batch_falls_back_to_graduation_year(self):
        assert normalize_profile({"graduation_year": 2025}).batch == "2025"
        assert normalize_profile({"graduationYear": "2026"}).batch == "2026"

    def test_batch_wins_over_graduation_year(self):
        profile = normalize_profile({"batch": "2024", "graduation_year": 2025})
        assert profile.batch == "2024"

    def test_float_year_is_rendered_without_decimals(self):
        assert normalize_profile({"batch": 2025.0}).batch == "2025"

    def test_missing_batch_is_unknown(self):
        assert normalize_profile({}).batch is None

    def test_camel_case_backlogs(self):
        assert normalize_profile({"currentBacklogs": "2"}).backlogs == 2

    def test_garbage_values_degrade_to_restrictive_defaults(self):
        profile = normalize_profile({"cgpa": "n/a", "current_backlogs": "many"})
        assert profile.cgpa == 0.0
        assert profile.backlogs == 0

    @pytest.mark.parametrize("raw, expected", [
        ({"is_placed": True}, True),
        ({"isPlaced": True}, True),
        ({"placement_status": "Placed"}, True),
        ({"placement_status": "unplaced"}, False),
        ({}, False),
    ])
    def test_placement_status(self, raw, expected):
        assert normalize_profile(raw).is_placed is expected

    def test_none_profile(self):
        profile = normalize_profile(None)
        assert profile.department == ""
        assert profile.cgpa == 0.0


class TestProfileCompletion:
    def test_complete_flag(self):
        assert is_profile_complete({"is_profile_complete": True})
        assert is_profile_complete({"isProfileComplete": True})
        assert not is_profile_complete({})

    def test_missing_fields(self):
        assert missing_profile_fields({"missingFields": ["cgpa"]}) == ["cgpa"]
        assert missing_profile_fields({}) == []


class TestStudentSnapshot:
    def test_snapshot_uses_profile_details(self):
        snapshot = build_student_snapshot("a@x.edu", {
            "name": "Asha", "rollNumber": "21CS001", "department": " CSE ", "phoneNumber": 98765,
        })
        assert snapshot.name == "Asha"
        assert snapshot.roll_number == "21CS001"
        assert snapshot.department == "CSE"
        assert snapshot.email == "a@x.edu"
        assert snapshot.phone == "98765"

    def test_snapshot_defaults(self):
        snapshot = build_student_snapshot("a@x.edu", {}, fallback_name="Account Name")
        assert snapshot.name == "Account Name"
        assert snapshot.roll_number == "N/A"
        assert snapshot.department == "N/A"
        assert snapshot.phone is None


class TestDrivePayload:
    def test_eligibility_aliases(self):
        rule = normalize_eligibility({"cgpa": "7.5", "maxBacklogs": 1,
                                      "departments": "CSE, ECE", "batches": [2025]})
        assert rule == {
            "min_cgpa": 7.5,
            "max_backlogs": 1,
            "allowed_departments": ["CSE", "ECE"],
            "allowed_batches": ["2025"],
        }

    def test_blank_criteria_are_unrestricted(self):
        rule = normalize_eligibility({"minCGPA": "", "maxBacklogs": None})
        assert rule["min_cgpa"] is None
        assert rule["max_backlogs"] is None
        assert rule["allowed_departments"] == []

    def test_legacy_drive_keys(self):
        data = normalize_drive_payload({
            "companyName": "Acme", "type": "internship", "isActive": False,
            "placementFinalized": True, "location": "Chennai",
        })
        assert data["company_name"] == "Acme"
        assert data["job_type"] == "internship"
        assert data["is_active"] is False
        assert data["stage"] == "finalized"
        assert data["locations"] == ["Chennai"]
        assert "companyName" not in data
        assert "placementFinalized" not in data

    def test_explicit_stage_is_kept(self):
        data = normalize_drive_payload({"stage": "open", "placement_finalized": True})
        assert data["stage"] == "open"
