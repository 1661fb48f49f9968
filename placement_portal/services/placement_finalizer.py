"""
Placement Finalizer

Turns the last round's selection into the drive's placed-student list.
This is a one-time administrative attestation: once the drive's stage is
`finalized` there is no way back, and every later pipeline mutation fails
with AlreadyFinalized.
"""

import logging
from datetime import datetime
from typing import List, Optional

from placement_portal.core.errors import AlreadyFinalized, NoFinalSelection, NoRounds
from placement_portal.models.drive import (
    ApplicationStatus,
    DriveStage,
    JobDrive,
    PlacedStudent,
)

logger = logging.getLogger(__name__)


def finalize(drive: JobDrive, now: datetime, finalized_by: Optional[str] = None) -> List[PlacedStudent]:
    if drive.placement_finalized:
        raise AlreadyFinalized()

    if not drive.selection_rounds:
        raise NoRounds()

    final_round = drive.selection_rounds[-1]
    if not final_round.selected_students:
        raise NoFinalSelection()

    placed = []
    for student_id in final_round.selected_students:
        application = drive.find_application(student_id)
        if application is None:
            logger.warning("Drive %s: selected student %s has no application, skipped",
                           drive.id, student_id)
            continue
        snapshot = application.student
        placed.append(PlacedStudent(
            student_id=student_id,
            name=snapshot.name,
            roll_number=snapshot.roll_number,
            department=snapshot.department,
            email=snapshot.email,
            mobile_number=snapshot.phone,
            added_by=finalized_by,
            added_at=now,
        ))

    if not placed:
        raise NoFinalSelection()

    placed_ids = {p.student_id for p in placed}
    for application in drive.applications:
        application.status = (
            ApplicationStatus.selected if application.student_id in placed_ids
            else ApplicationStatus.rejected
        )

    drive.placed_students = placed
    drive.stage = DriveStage.finalized
    logger.info("Drive %s: placement finalized with %d students", drive.id, len(placed))
    return placed
