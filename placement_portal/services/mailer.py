"""
Mailer - outbound email over SMTP.

When SMTP is not configured the message is logged instead of sent, so
local development works without credentials. Delivery errors propagate as
MailDeliveryError; callers decide whether a failed send is fatal.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from placement_portal.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    pass


class Mailer:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def send(self, to_address: str, subject: str, body: str) -> None:
        s = self.settings
        if not s.smtp_enabled:
            logger.info("SMTP not configured, email to %s not sent (subject: %s)", to_address, subject)
            return

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f"{s.smtp_from_name} <{s.smtp_from}>"
        msg["To"] = to_address
        msg.set_content(body)

        try:
            if s.smtp_port == 465:
                with smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds) as server:
                    server.login(s.smtp_username, s.smtp_password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds) as server:
                    if s.smtp_use_tls:
                        server.starttls()
                    server.login(s.smtp_username, s.smtp_password)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"Failed to send email to {to_address}: {e}") from e

        logger.info("Email sent to %s (subject: %s)", to_address, subject)

    def send_otp(self, to_address: str, otp_code: str, name: Optional[str] = None,
                 ttl_minutes: int = 2) -> None:
        greeting = f"Hello {name}," if name else "Hello,"
        body = (
            f"{greeting}\n\n"
            f"Your placement consent verification code is: {otp_code}\n\n"
            f"This code expires in {ttl_minutes} minutes. "
            "If you did not request it, you can ignore this email.\n\n"
            "- Placement Cell"
        )
        self.send(to_address, "Placement Consent Verification - OTP", body)


_mailer: Optional[Mailer] = None


def get_mailer() -> Mailer:
    """Get or create the process-wide mailer (singleton pattern)"""
    global _mailer
    if _mailer is None:
        _mailer = Mailer()
    return _mailer
