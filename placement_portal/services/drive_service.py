"""
Drive Service - the single mutation entry point for job drives.

Every change to a drive runs as:

    lock(drive id) -> load -> authorize -> pure mutation -> save

The per-drive lock serializes requests inside this process and the
repository's version check rejects a save that lost a race with another
process, so complete-round -> select -> finalize sequences are
linearizable per drive.

The pure mutations live in application_registry, selection_rounds and
placement_finalizer; this module only wires them to storage.
"""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple

from placement_portal.core.clock import utcnow
from placement_portal.core.config import Settings, get_settings
from placement_portal.core.errors import AlreadyFinalized, DriveNotFound, Forbidden
from placement_portal.core.locks import KeyedLock
from placement_portal.models.drive import (
    Application,
    JobDrive,
    PlacedStudent,
    SelectionRound,
)
from placement_portal.models.user import OFFICER_ROLES, POSTER_ROLES, User
from placement_portal.services import (
    application_registry,
    eligibility,
    placement_finalizer,
    selection_rounds,
)
from placement_portal.services.mongo_service import get_drive_repository
from placement_portal.services.profile_normalizer import (
    normalize_department,
    normalize_drive_payload,
    normalize_profile,
)

logger = logging.getLogger(__name__)

# Fields a poster may amend before finalization
AMENDABLE_FIELDS = {
    "company_name", "role", "job_type", "description", "requirements", "skills",
    "location", "locations", "drive_mode", "venue", "bond", "ctc",
    "date", "time", "deadline", "eligibility", "unplaced_only", "is_active",
}

# Pipeline state is never taken from a request body
PIPELINE_FIELDS = {
    "_id", "id", "applications", "placed_students", "stage", "version",
    "created_by", "created_by_department", "created_at", "updated_at",
}


def ensure_can_manage(user: User, drive: JobDrive) -> None:
    """
    Posters manage drives of their own department; placement officers
    manage every drive.
    """
    if user.role not in POSTER_ROLES:
        raise Forbidden("Only Placement Officers and Representatives can perform this action")
    if user.role in OFFICER_ROLES:
        return
    if drive.created_by == user.id:
        return
    user_department = normalize_department(user.profile.get("department"))
    if not user_department or user_department != normalize_department(drive.created_by_department):
        raise Forbidden("You can only manage drives posted for your department")


def _initial_rounds(payload: Dict[str, Any]) -> List[dict]:
    """Rounds given at creation: names (legacy `rounds`) or round objects."""
    rounds = payload.pop("selection_rounds", None)
    legacy = payload.pop("rounds", None)
    if not rounds and legacy:
        rounds = [{"name": name} for name in legacy if str(name).strip()]
    result = []
    for item in rounds or []:
        if isinstance(item, str):
            item = {"name": item}
        result.append({"name": item["name"], "details": item.get("details"), "date": item.get("date")})
    return result


class DriveService:
    def __init__(self, drives, settings: Optional[Settings] = None,
                 locks: Optional[KeyedLock] = None, clock: Callable[[], datetime] = utcnow):
        self.drives = drives
        self.settings = settings or get_settings()
        self.locks = locks or KeyedLock()
        self.clock = clock

    # ============================================================
    # LOOKUPS
    # ============================================================

    def get_drive(self, drive_id: str) -> JobDrive:
        drive = self.drives.get(drive_id)
        if drive is None:
            raise DriveNotFound()
        return drive

    def list_drives(self, user: User) -> List[JobDrive]:
        """Candidates only see active drives."""
        if user.is_candidate:
            return self.drives.find({"is_active": True})
        return self.drives.find()

    def eligible_drives(self, user: User) -> List[JobDrive]:
        """Active drives still taking applications that the user qualifies for."""
        profile = normalize_profile(user.profile)
        now = self.clock()
        return [
            drive for drive in self.drives.find({"is_active": True})
            if not drive.placement_finalized
            and now <= application_registry.effective_deadline(drive)
            and eligibility.evaluate(drive.eligibility, profile, drive,
                                     self.settings.upgrade_ctc_threshold)
        ]

    def stats(self, user: User) -> Dict[str, int]:
        """Dashboard counters. Candidates get their own view, posters the global one."""
        drives = self.drives.find()
        if user.is_candidate:
            eligible_ids = {drive.id for drive in self.eligible_drives(user)}
            applied_ids = {drive.id for drive in drives if drive.find_application(user.id)}
            return {
                "total_drives": len(eligible_ids),
                "applied_drives": len(applied_ids),
                "available_drives": len(eligible_ids - applied_ids),
                "all_drives": len(drives),
            }

        now = self.clock()
        upcoming = sum(
            1 for drive in drives
            if drive.is_active and not drive.placement_finalized and drive.date >= now
        )
        return {
            "total_drives": upcoming,
            "upcoming_drives": upcoming,
            "applications_received": sum(len(drive.applications) for drive in drives),
            "all_drives": len(drives),
        }

    def preview_eligibility(self, drive_id: str, user: User) -> eligibility.EligibilityReport:
        drive = self.get_drive(drive_id)
        return eligibility.explain(drive.eligibility, normalize_profile(user.profile), drive,
                                   self.settings.upgrade_ctc_threshold)

    def applicants(self, drive_id: str) -> List[Application]:
        """Every application, whether or not the drive has rounds yet."""
        return list(self.get_drive(drive_id).applications)

    def candidate_pool(self, drive_id: str, round_index: int) -> List[Application]:
        return selection_rounds.candidate_pool(self.get_drive(drive_id), round_index)

    # ============================================================
    # MUTATIONS
    # ============================================================

    def _mutate(self, drive_id: str, mutation: Callable[[JobDrive], Any],
                actor: Optional[User] = None) -> Tuple[JobDrive, Any]:
        with self.locks.hold(drive_id):
            drive = self.get_drive(drive_id)
            if actor is not None:
                ensure_can_manage(actor, drive)
            result = mutation(drive)
            self.drives.save(drive)
            return drive, result

    def create_drive(self, payload: Dict[str, Any], creator: User) -> JobDrive:
        if creator.role not in POSTER_ROLES:
            raise Forbidden("Only Placement Officers and Representatives can create job drives")

        data = normalize_drive_payload(payload)
        rounds = _initial_rounds(data)
        for key in PIPELINE_FIELDS:
            data.pop(key, None)

        drive = JobDrive.model_validate({
            **data,
            "selection_rounds": rounds,
            "created_by": creator.id,
            "created_by_department": creator.profile.get("department"),
        })
        if drive.deadline is None:
            drive.deadline = application_registry.default_deadline(
                drive.date, self.settings.default_deadline_lead_hours)

        self.drives.insert(drive)
        logger.info("Drive %s created by %s for %s", drive.id, creator.id, drive.company_name)
        return drive

    def update_drive(self, drive_id: str, payload: Dict[str, Any], editor: User) -> JobDrive:
        """Amend descriptive fields and eligibility of a drive that is not finalized."""
        changes = {
            key: value for key, value in normalize_drive_payload(payload).items()
            if key in AMENDABLE_FIELDS
        }

        def amend(drive: JobDrive) -> JobDrive:
            if drive.placement_finalized:
                raise AlreadyFinalized()
            amended = JobDrive.model_validate({**drive.model_dump(by_alias=True), **changes})
            for key in changes:
                setattr(drive, key, getattr(amended, key))
            return drive

        drive, _ = self._mutate(drive_id, amend, actor=editor)
        logger.info("Drive %s amended by %s: %s", drive_id, editor.id, sorted(changes))
        return drive

    def delete_drive(self, drive_id: str, editor: User) -> None:
        """Remove a drive that has not been finalized."""
        with self.locks.hold(drive_id):
            drive = self.get_drive(drive_id)
            ensure_can_manage(editor, drive)
            if drive.placement_finalized:
                raise AlreadyFinalized()
            self.drives.delete(drive)
        logger.info("Drive %s deleted by %s", drive_id, editor.id)

    def apply(self, drive_id: str, student: User) -> Application:
        now = self.clock()
        _, application = self._mutate(
            drive_id,
            lambda drive: application_registry.apply(
                drive, student, now, self.settings.upgrade_ctc_threshold),
        )
        return application

    def add_round(self, drive_id: str, editor: User, name: str, details: Optional[str] = None,
                  date: Optional[datetime] = None) -> SelectionRound:
        _, selection_round = self._mutate(
            drive_id, lambda drive: selection_rounds.add_round(drive, name, details, date), actor=editor)
        return selection_round

    def complete_round(self, drive_id: str, round_index: int, editor: User) -> SelectionRound:
        _, selection_round = self._mutate(
            drive_id, lambda drive: selection_rounds.complete_round(drive, round_index), actor=editor)
        return selection_round

    def select_students(self, drive_id: str, round_index: int, student_ids: List[str],
                        editor: User) -> SelectionRound:
        _, selection_round = self._mutate(
            drive_id,
            lambda drive: selection_rounds.select_students(drive, round_index, student_ids),
            actor=editor,
        )
        return selection_round

    def finalize(self, drive_id: str, editor: User) -> List[PlacedStudent]:
        now = self.clock()
        _, placed = self._mutate(
            drive_id, lambda drive: placement_finalizer.finalize(drive, now, editor.id), actor=editor)
        return placed


@lru_cache()
def get_drive_service() -> DriveService:
    """Get the drive service. Cached so every request shares the same drive locks."""
    return DriveService(get_drive_repository(), get_settings())
