"""
Consent Service - wires the consent gate and OTP issuer to storage.

Each operation reloads the user under a per-user lock, so a resend racing
a verify for the same account cannot interleave.
"""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional

from placement_portal.core.clock import utcnow
from placement_portal.core.config import get_settings
from placement_portal.core.errors import InvalidCode, UserNotFound
from placement_portal.core.locks import KeyedLock
from placement_portal.models.user import User
from placement_portal.services import consent_gate
from placement_portal.services.mailer import get_mailer
from placement_portal.services.mongo_service import get_user_repository
from placement_portal.services.otp_service import OtpIssuer

logger = logging.getLogger(__name__)


class ConsentService:
    def __init__(self, users, issuer: OtpIssuer, locks: Optional[KeyedLock] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.users = users
        self.issuer = issuer
        self.locks = locks or KeyedLock()
        self.clock = clock

    def _load(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def record_consent(self, user_id: str, has_agreed: bool, signature: Optional[str],
                       ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> User:
        """Store signed consent and send the first verification OTP."""
        with self.locks.hold(user_id):
            user = self._load(user_id)
            now = self.clock()
            consent_gate.record_consent(user, has_agreed, signature, now, ip_address, user_agent)
            self.issuer.issue(user, now)
            self.users.save(user)
            return user

    def verify_otp(self, user_id: str, otp_code: str) -> User:
        with self.locks.hold(user_id):
            user = self._load(user_id)
            try:
                self.issuer.verify(user, otp_code, self.clock())
            except InvalidCode:
                # the bumped attempt counter must be stored
                self.users.save(user)
                raise
            self.users.save(user)
            return user

    def resend_otp(self, user_id: str) -> int:
        with self.locks.hold(user_id):
            user = self._load(user_id)
            remaining = self.issuer.resend(user, self.clock())
            self.users.save(user)
            return remaining

    def status(self, user_id: str) -> dict:
        return consent_gate.status(self._load(user_id))


def mask_email(email: str) -> str:
    """'john.doe@x.com' -> 'jo***@x.com'"""
    local, sep, domain = email.partition("@")
    if not sep:
        return email
    return f"{local[:2]}***@{domain}"


@lru_cache()
def get_consent_service() -> ConsentService:
    """Get the consent service. Cached so every request shares the same user locks."""
    return ConsentService(get_user_repository(), OtpIssuer(get_mailer(), get_settings()))
