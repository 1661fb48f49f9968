"""Tests for the placement consent gate."""

import pytest

from placement_portal.core.errors import (
    ConsentNotGiven,
    ConsentRequired,
    InvalidSignature,
    OtpNotVerified,
    PolicyNotAgreed,
    ProfileIncomplete,
)
from placement_portal.services import consent_gate
from tests.conftest import NOW, make_officer, make_student


class TestCheck:
    def test_fully_consented_student_passes(self):
        student = make_student()
        consent_gate.check(student)
        assert consent_gate.can_apply(student)

    def test_officers_bypass_the_gate(self):
        officer = make_officer()
        consent_gate.check(officer)
        assert consent_gate.can_apply(officer)

    def test_requirements_checked_in_order(self):
        student = make_student(verified=False, is_profile_complete=False)
        with pytest.raises(ProfileIncomplete):
            consent_gate.check(student)

        student.profile["is_profile_complete"] = True
        with pytest.raises(PolicyNotAgreed):
            consent_gate.check(student)

        student.placement_policy_consent.has_agreed = True
        with pytest.raises(OtpNotVerified):
            consent_gate.check(student)

        student.verification_status.otp_verified = True
        consent_gate.check(student)

    def test_all_gate_errors_are_consent_required(self):
        for error in (ProfileIncomplete(), PolicyNotAgreed(), OtpNotVerified()):
            assert isinstance(error, ConsentRequired)
            assert error.status_code == 403

    def test_can_apply_false_when_unverified(self):
        assert not consent_gate.can_apply(make_student(verified=False))


class TestStatus:
    def test_status_flags(self):
        student = make_student(verified=False)
        assert consent_gate.status(student) == {
            "profile_complete": True,
            "consent_given": False,
            "consent_date": None,
            "otp_verified": False,
            "can_access_dashboard": False,
        }

    def test_dashboard_access_when_everything_done(self):
        assert consent_gate.status(make_student())["can_access_dashboard"] is True


class TestRecordConsent:
    def test_records_consent_and_resets_verification(self):
        student = make_student(verified=False)
        student.verification_status.otp_verified = True

        record = consent_gate.record_consent(student, True, "signature_s1.png", NOW,
                                             ip_address="10.0.0.1", user_agent="pytest")

        assert record.has_agreed
        assert record.agreed_at == NOW
        assert record.signature == "signature_s1.png"
        assert record.ip_address == "10.0.0.1"
        assert student.verification_status.otp_verified is False

    def test_requires_complete_profile(self):
        student = make_student(verified=False, is_profile_complete=False)
        with pytest.raises(ProfileIncomplete):
            consent_gate.record_consent(student, True, "sig.png", NOW)

    def test_requires_agreement(self):
        with pytest.raises(ConsentNotGiven):
            consent_gate.record_consent(make_student(verified=False), False, "sig.png", NOW)

    def test_requires_signature(self):
        with pytest.raises(InvalidSignature):
            consent_gate.record_consent(make_student(verified=False), True, None, NOW)
