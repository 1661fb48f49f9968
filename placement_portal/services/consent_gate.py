"""
Consent Gate

A candidate may apply to drives only after three independent steps:
1. profile complete (flag maintained by the profile completion calculator)
2. placement policy agreed (signed consent recorded)
3. email OTP verified

Each unmet step raises its own ConsentRequired subclass, because each one
sends the UI to a different remediation screen.
"""

import logging
from datetime import datetime
from typing import Optional

from placement_portal.core.errors import (
    ConsentNotGiven,
    InvalidSignature,
    OtpNotVerified,
    PolicyNotAgreed,
    ProfileIncomplete,
)
from placement_portal.models.user import ConsentRecord, User
from placement_portal.services.profile_normalizer import (
    is_profile_complete,
    missing_profile_fields,
)

logger = logging.getLogger(__name__)


def check(user: User) -> None:
    """Raise the first unmet consent requirement. Non-candidates pass."""
    if not user.is_candidate:
        return

    if not is_profile_complete(user.profile):
        raise ProfileIncomplete(missing_fields=missing_profile_fields(user.profile))

    if not user.placement_policy_consent.has_agreed:
        raise PolicyNotAgreed()

    if not user.verification_status.otp_verified:
        raise OtpNotVerified()


def can_apply(user: User) -> bool:
    try:
        check(user)
    except (ProfileIncomplete, PolicyNotAgreed, OtpNotVerified):
        return False
    return True


def status(user: User) -> dict:
    """Consent flags for the status screen."""
    profile_complete = is_profile_complete(user.profile)
    consent_given = user.placement_policy_consent.has_agreed
    otp_verified = user.verification_status.otp_verified
    return {
        "profile_complete": profile_complete,
        "consent_given": consent_given,
        "consent_date": user.placement_policy_consent.agreed_at,
        "otp_verified": otp_verified,
        "can_access_dashboard": profile_complete and consent_given and otp_verified,
    }


def record_consent(user: User, has_agreed: bool, signature: Optional[str], now: datetime,
                   ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> ConsentRecord:
    """
    Store the signed placement-policy consent on the user.

    The caller issues the verification OTP afterwards; the consent only
    counts toward `check()` once that OTP is verified.
    """
    if not is_profile_complete(user.profile):
        raise ProfileIncomplete("Profile must be completed first",
                                missing_fields=missing_profile_fields(user.profile))
    if not has_agreed:
        raise ConsentNotGiven()
    if not signature:
        raise InvalidSignature()

    user.placement_policy_consent = ConsentRecord(
        has_agreed=True,
        agreed_at=now,
        signature=signature,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    user.verification_status.otp_verified = False
    logger.info("Placement consent recorded for user %s", user.id)
    return user.placement_policy_consent
