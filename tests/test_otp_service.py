"""Tests for OTP issue / verify / resend."""

from datetime import timedelta

import pytest

from placement_portal.core.errors import (
    Expired,
    InvalidCode,
    NoOtpIssued,
    PolicyNotAgreed,
    ResendLimitReached,
    TooManyAttempts,
    TooSoon,
)
from placement_portal.services.otp_service import OtpIssuer, generate_otp_code
from tests.conftest import NOW, OTP_CODE, FailingMailer, make_student


@pytest.fixture
def student():
    student = make_student()
    student.verification_status.otp_verified = False
    return student


class TestGenerate:
    def test_codes_are_six_digits_in_range(self):
        for _ in range(200):
            code = generate_otp_code()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999


class TestIssue:
    def test_issue_sets_state_and_sends_mail(self, issuer, mailer, student):
        vs = issuer.issue(student, NOW)

        assert vs.otp_code == OTP_CODE
        assert vs.otp_expires == NOW + timedelta(minutes=2)
        assert vs.otp_attempts == 0
        assert vs.otp_verified is False
        assert vs.last_otp_sent == NOW
        assert mailer.sent == [{"to": "s1@college.edu", "code": OTP_CODE, "name": "Student s1"}]

    def test_mail_failure_keeps_the_code(self, settings, student):
        issuer = OtpIssuer(FailingMailer(), settings, code_factory=lambda: OTP_CODE)
        issuer.issue(student, NOW)
        assert student.verification_status.otp_code == OTP_CODE
        issuer.verify(student, OTP_CODE, NOW)
        assert student.verification_status.otp_verified


class TestVerify:
    def test_correct_code(self, issuer, student):
        issuer.issue(student, NOW)
        issuer.verify(student, OTP_CODE, NOW + timedelta(seconds=30))

        vs = student.verification_status
        assert vs.otp_verified is True
        assert vs.verified_at == NOW + timedelta(seconds=30)
        assert vs.otp_code is None
        assert vs.otp_expires is None
        assert vs.otp_attempts == 0

    def test_no_code_issued(self, issuer, student):
        with pytest.raises(NoOtpIssued):
            issuer.verify(student, OTP_CODE, NOW)

    def test_expired(self, issuer, student):
        issuer.issue(student, NOW)
        with pytest.raises(Expired):
            issuer.verify(student, OTP_CODE, NOW + timedelta(minutes=2, seconds=1))

    def test_code_valid_at_exact_expiry(self, issuer, student):
        issuer.issue(student, NOW)
        issuer.verify(student, OTP_CODE, NOW + timedelta(minutes=2))
        assert student.verification_status.otp_verified

    def test_wrong_code_counts_down_attempts(self, issuer, student):
        issuer.issue(student, NOW)
        with pytest.raises(InvalidCode) as exc:
            issuer.verify(student, "000000", NOW)
        assert exc.value.extra["attempts_left"] == 2
        assert student.verification_status.otp_attempts == 1

    def test_locked_after_three_failures_even_with_right_code(self, issuer, student):
        issuer.issue(student, NOW)
        for left in (2, 1, 0):
            with pytest.raises(InvalidCode) as exc:
                issuer.verify(student, "000000", NOW)
            assert exc.value.extra["attempts_left"] == left

        with pytest.raises(TooManyAttempts) as exc:
            issuer.verify(student, OTP_CODE, NOW)
        assert exc.value.extra["needs_new_otp"] is True
        assert student.verification_status.otp_verified is False

    def test_fresh_code_resets_attempts(self, issuer, student):
        issuer.issue(student, NOW)
        for _ in range(3):
            with pytest.raises(InvalidCode):
                issuer.verify(student, "000000", NOW)
        issuer.issue(student, NOW + timedelta(minutes=1))
        issuer.verify(student, OTP_CODE, NOW + timedelta(minutes=1))
        assert student.verification_status.otp_verified


class TestResend:
    def test_resend_requires_consent(self, issuer):
        with pytest.raises(PolicyNotAgreed):
            issuer.resend(make_student(verified=False), NOW)

    def test_resend_too_soon(self, issuer, student):
        issuer.issue(student, NOW)
        with pytest.raises(TooSoon) as exc:
            issuer.resend(student, NOW + timedelta(seconds=10))
        assert exc.value.extra["wait_time"] == 20

    def test_resend_after_cooldown(self, issuer, mailer, student):
        issuer.issue(student, NOW)
        remaining = issuer.resend(student, NOW + timedelta(seconds=30))
        assert remaining == 2
        assert student.verification_status.otp_resend_count == 1
        assert student.verification_status.last_otp_sent == NOW + timedelta(seconds=30)
        assert len(mailer.sent) == 2

    def test_resend_limit(self, issuer, student):
        issuer.issue(student, NOW)
        at = NOW
        for expected in (2, 1, 0):
            at += timedelta(seconds=31)
            assert issuer.resend(student, at) == expected

        with pytest.raises(ResendLimitReached) as exc:
            issuer.resend(student, at + timedelta(minutes=5))
        assert exc.value.extra["max_limit_reached"] is True
