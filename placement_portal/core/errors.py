"""
Domain errors for the drive pipeline and the consent/OTP flow.

Every error carries the HTTP status it maps to, a stable machine-readable
`code`, and an `extra` dict merged into the JSON body so the UI can drive
its retry/remediation screens (attempts left, wait time, ...).
"""

from typing import Iterable, Optional


class PlacementError(Exception):
    """Base class for all recoverable domain errors."""

    status_code: int = 400
    code: str = "placement_error"
    message: str = "Request could not be completed"

    def __init__(self, message: Optional[str] = None, **extra):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, **self.extra}


# ============================================================
# LOOKUPS / STORE
# ============================================================

class DriveNotFound(PlacementError):
    status_code = 404
    code = "drive_not_found"
    message = "Job drive not found"


class UserNotFound(PlacementError):
    status_code = 404
    code = "user_not_found"
    message = "User not found"


class Forbidden(PlacementError):
    status_code = 403
    code = "forbidden"
    message = "Access denied"


class ConcurrentModification(PlacementError):
    status_code = 409
    code = "concurrent_modification"
    message = "The record was modified by another request. Please retry."


# ============================================================
# APPLICATIONS
# ============================================================

class NotActive(PlacementError):
    code = "not_active"
    message = "Job drive is not active"


class DeadlinePassed(PlacementError):
    code = "deadline_passed"
    message = "Application deadline has passed"


class AlreadyApplied(PlacementError):
    code = "already_applied"
    message = "Already applied to this job drive"


class NotEligible(PlacementError):
    status_code = 403
    code = "not_eligible"
    message = "You are not eligible for this job drive"


class ConsentRequired(PlacementError):
    status_code = 403
    code = "consent_required"
    message = "Placement consent required"


class ProfileIncomplete(ConsentRequired):
    code = "profile_incomplete"
    message = "Profile completion required"

    def __init__(self, message: Optional[str] = None, **extra):
        super().__init__(message, needs_profile_completion=True, **extra)


class PolicyNotAgreed(ConsentRequired):
    code = "policy_not_agreed"
    message = "Placement policy consent required"

    def __init__(self, message: Optional[str] = None, **extra):
        super().__init__(message, needs_placement_consent=True, **extra)


class OtpNotVerified(ConsentRequired):
    code = "otp_not_verified"
    message = "OTP verification required"

    def __init__(self, message: Optional[str] = None, **extra):
        super().__init__(message, needs_otp_verification=True, **extra)


# ============================================================
# ROUNDS / FINALIZATION
# ============================================================

class InvalidRound(PlacementError):
    status_code = 404
    code = "invalid_round"
    message = "Round not found"

    def __init__(self, round_index: int):
        super().__init__(f"Round {round_index} does not exist", round_index=round_index)


class PreviousRoundEmpty(PlacementError):
    code = "previous_round_empty"
    message = "No candidates: no students were selected in the previous round"


class NotASubsetOfPool(PlacementError):
    code = "not_a_subset_of_pool"
    message = "Some students are not in the candidate pool for this round"

    def __init__(self, student_ids: Iterable[str]):
        super().__init__(invalid_student_ids=sorted(student_ids))


class AlreadyFinalized(PlacementError):
    status_code = 409
    code = "already_finalized"
    message = "Placement has already been finalized for this drive"


class NoRounds(PlacementError):
    code = "no_rounds"
    message = "No selection rounds found for this drive"


class NoFinalSelection(PlacementError):
    code = "no_final_selection"
    message = "No students selected in the final round"


# ============================================================
# CONSENT / OTP
# ============================================================

class ConsentNotGiven(PlacementError):
    code = "consent_not_given"
    message = "Consent agreement is required"


class InvalidSignature(PlacementError):
    code = "invalid_signature"
    message = "Signature file is required"


class SignatureTooLarge(PlacementError):
    status_code = 413
    code = "signature_too_large"
    message = "Signature file too large"


class NoOtpIssued(PlacementError):
    code = "no_otp_issued"
    message = "No OTP found. Please request a new one."


class TooManyAttempts(PlacementError):
    status_code = 429
    code = "too_many_attempts"
    message = "Too many failed attempts. Please request a new OTP."

    def __init__(self):
        super().__init__(needs_new_otp=True)


class Expired(PlacementError):
    code = "otp_expired"
    message = "OTP has expired. Please request a new one."

    def __init__(self):
        super().__init__(expired=True)


class InvalidCode(PlacementError):
    code = "invalid_code"

    def __init__(self, attempts_left: int):
        super().__init__(
            f"Invalid OTP code. {attempts_left} attempts remaining.",
            attempts_left=attempts_left,
        )


class ResendLimitReached(PlacementError):
    status_code = 429
    code = "resend_limit_reached"
    message = "Maximum resend limit reached. Please try again later or contact support."

    def __init__(self):
        super().__init__(max_limit_reached=True)


class TooSoon(PlacementError):
    status_code = 429
    code = "too_soon"

    def __init__(self, wait_time: int):
        super().__init__(
            f"Please wait {wait_time} seconds before requesting a new OTP.",
            wait_time=wait_time,
        )
