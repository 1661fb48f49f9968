"""
OTP Service - one-time codes proving control of the student's email.

Lifecycle (all state lives in `user.verification_status`):
- issue:  new 6-digit code, 2 minute expiry, attempts reset, email sent
- verify: at most 3 attempts per code; the attempt counter is bumped
          before comparing, so the failing attempt that hits the limit
          already locks the code
- resend: at most 3 resends, and not within 30 seconds of the last send

Email delivery failure does not undo issuance: the code stays valid and
the student can still ask for a resend.
"""

import hmac
import logging
import math
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from placement_portal.core.config import Settings, get_settings
from placement_portal.core.errors import (
    Expired,
    InvalidCode,
    NoOtpIssued,
    PolicyNotAgreed,
    ResendLimitReached,
    TooManyAttempts,
    TooSoon,
)
from placement_portal.models.user import User, VerificationStatus
from placement_portal.services.mailer import MailDeliveryError, Mailer

logger = logging.getLogger(__name__)


def generate_otp_code() -> str:
    """Uniformly random code in 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


class OtpIssuer:
    def __init__(self, mailer: Mailer, settings: Optional[Settings] = None,
                 code_factory: Callable[[], str] = generate_otp_code):
        self.mailer = mailer
        self.settings = settings or get_settings()
        self.code_factory = code_factory

    @property
    def max_attempts(self) -> int:
        return self.settings.otp_max_attempts

    @property
    def max_resends(self) -> int:
        return self.settings.otp_max_resends

    def issue(self, user: User, now: datetime) -> VerificationStatus:
        """Generate and store a fresh code, then try to email it."""
        vs = user.verification_status
        vs.otp_code = self.code_factory()
        vs.otp_expires = now + timedelta(seconds=self.settings.otp_ttl_seconds)
        vs.otp_verified = False
        vs.otp_attempts = 0
        vs.last_otp_sent = now

        try:
            self.mailer.send_otp(
                user.email, vs.otp_code, user.name or user.profile.get("name"),
                ttl_minutes=max(1, self.settings.otp_ttl_seconds // 60),
            )
        except MailDeliveryError:
            # Code stays valid; the student can resend.
            logger.exception("Failed to send OTP email to user %s", user.id)
        else:
            logger.info("OTP issued for user %s", user.id)
        return vs

    def verify(self, user: User, submitted_code: str, now: datetime) -> None:
        vs = user.verification_status
        if not vs.otp_code:
            raise NoOtpIssued()

        if vs.otp_attempts >= self.max_attempts:
            raise TooManyAttempts()

        if vs.otp_expires is not None and now > vs.otp_expires:
            raise Expired()

        vs.otp_attempts += 1

        if not hmac.compare_digest(vs.otp_code, str(submitted_code).strip()):
            attempts_left = max(0, self.max_attempts - vs.otp_attempts)
            logger.warning("Invalid OTP for user %s, %d attempts left", user.id, attempts_left)
            raise InvalidCode(attempts_left)

        vs.otp_verified = True
        vs.verified_at = now
        vs.otp_code = None
        vs.otp_expires = None
        vs.otp_attempts = 0
        logger.info("OTP verified for user %s", user.id)

    def resend(self, user: User, now: datetime) -> int:
        """Re-issue a code. Returns how many resends remain."""
        if not user.placement_policy_consent.has_agreed:
            raise PolicyNotAgreed("Please complete placement consent first")

        vs = user.verification_status
        if vs.otp_resend_count >= self.max_resends:
            raise ResendLimitReached()

        if vs.last_otp_sent is not None:
            elapsed = (now - vs.last_otp_sent).total_seconds()
            cooldown = self.settings.otp_resend_cooldown_seconds
            if elapsed < cooldown:
                raise TooSoon(math.ceil(cooldown - elapsed))

        self.issue(user, now)
        vs.otp_resend_count += 1
        return self.max_resends - vs.otp_resend_count
