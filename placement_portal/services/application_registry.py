"""
Application Registry - the only place applications are created.

Checks, in order:
1. drive not finalized, and active
2. effective deadline not passed
3. student has not applied already
4. consent gate (profile, policy, OTP) - independent of the drive
5. eligibility rule
"""

import logging
from datetime import datetime, time, timedelta
from typing import Optional

from placement_portal.core.errors import (
    AlreadyApplied,
    AlreadyFinalized,
    DeadlinePassed,
    NotActive,
    NotEligible,
)
from placement_portal.models.drive import Application, ApplicationStatus, JobDrive
from placement_portal.models.user import User
from placement_portal.services import consent_gate, eligibility
from placement_portal.services.profile_normalizer import build_student_snapshot, normalize_profile

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59)


def _parse_time_of_day(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    return None


def default_deadline(drive_date: datetime, lead_hours: int = 24) -> datetime:
    """Deadline used when a drive is created without one."""
    return drive_date - timedelta(hours=lead_hours)


def effective_deadline(drive: JobDrive) -> datetime:
    """
    Last moment applications are accepted.

    The deadline field wins over the drive date. The drive's time of day,
    when set, applies to that day; otherwise the whole day counts.
    """
    base = drive.deadline or drive.date
    cutoff = _parse_time_of_day(drive.time) or END_OF_DAY
    return datetime.combine(base.date(), cutoff)


def apply(drive: JobDrive, user: User, now: datetime,
          upgrade_ctc: float = eligibility.DEFAULT_UPGRADE_CTC) -> Application:
    """Validate and append an application for `user`. Mutates `drive`."""
    if drive.placement_finalized:
        raise AlreadyFinalized()

    if not drive.is_active:
        raise NotActive()

    if now > effective_deadline(drive):
        raise DeadlinePassed()

    if drive.find_application(user.id) is not None:
        raise AlreadyApplied()

    consent_gate.check(user)

    reason = eligibility.first_failure(
        drive.eligibility, normalize_profile(user.profile), drive, upgrade_ctc
    )
    if reason:
        logger.warning("User %s not eligible for drive %s: %s", user.id, drive.id, reason)
        raise NotEligible(reason=reason)

    application = Application(
        student_id=user.id,
        applied_at=now,
        status=ApplicationStatus.applied,
        student=build_student_snapshot(user.email, user.profile, fallback_name=user.name),
    )
    drive.applications.append(application)
    logger.info("User %s applied to drive %s", user.id, drive.id)
    return application
