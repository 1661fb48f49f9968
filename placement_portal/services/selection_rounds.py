"""
Selection Round State Machine

A drive's rounds are an ordered list. Round 0 draws its candidates from
every applicant; round N draws only from the students selected in round
N-1. Selections replace (never extend) a round's list and must come from
that round's candidate pool, so a pool can only narrow round over round.
Re-selecting an earlier round prunes later selections to their new pools.

Round status is one way: pending -> completed.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from placement_portal.core.errors import (
    AlreadyFinalized,
    InvalidRound,
    NotASubsetOfPool,
    PreviousRoundEmpty,
)
from placement_portal.models.drive import (
    Application,
    ApplicationStatus,
    JobDrive,
    RoundStatus,
    SelectionRound,
)

logger = logging.getLogger(__name__)


def _ensure_open(drive: JobDrive) -> None:
    if drive.placement_finalized:
        raise AlreadyFinalized()


def get_round(drive: JobDrive, round_index: int) -> SelectionRound:
    if round_index < 0 or round_index >= len(drive.selection_rounds):
        raise InvalidRound(round_index)
    return drive.selection_rounds[round_index]


def add_round(drive: JobDrive, name: str, details: Optional[str] = None,
              date: Optional[datetime] = None) -> SelectionRound:
    """Append a pending round at the end of the sequence."""
    _ensure_open(drive)
    selection_round = SelectionRound(name=name, details=details, date=date)
    drive.selection_rounds.append(selection_round)
    logger.info("Drive %s: added round %d (%s)", drive.id, len(drive.selection_rounds) - 1, name)
    return selection_round


def complete_round(drive: JobDrive, round_index: int) -> SelectionRound:
    _ensure_open(drive)
    selection_round = get_round(drive, round_index)
    if selection_round.status != RoundStatus.completed:
        selection_round.status = RoundStatus.completed
        logger.info("Drive %s: round %d completed", drive.id, round_index)
    return selection_round


def candidate_pool(drive: JobDrive, round_index: int) -> List[Application]:
    """Applications eligible to be selected in `round_index`."""
    get_round(drive, round_index)
    if round_index == 0:
        return list(drive.applications)

    previous = set(drive.selection_rounds[round_index - 1].selected_students)
    if not previous:
        raise PreviousRoundEmpty()
    return [app for app in drive.applications if app.student_id in previous]


def select_students(drive: JobDrive, round_index: int, student_ids: Iterable[str]) -> SelectionRound:
    """Replace the round's selection with `student_ids` (a subset of its pool)."""
    _ensure_open(drive)
    selection_round = get_round(drive, round_index)

    # de-duplicate, keep caller order
    selected = list(dict.fromkeys(str(sid) for sid in student_ids))

    pool_ids = {app.student_id for app in candidate_pool(drive, round_index)}
    outside = set(selected) - pool_ids
    if outside:
        logger.warning("Drive %s: round %d selection outside pool: %s",
                       drive.id, round_index, sorted(outside))
        raise NotASubsetOfPool(outside)

    selection_round.selected_students = selected
    _prune_later_rounds(drive, round_index)
    _mark_shortlisted(drive, selected)
    logger.info("Drive %s: round %d selected %d students", drive.id, round_index, len(selected))
    return selection_round


def _prune_later_rounds(drive: JobDrive, round_index: int) -> None:
    """Drop later-round selections that fell out of their (narrowed) pool."""
    previous = set(drive.selection_rounds[round_index].selected_students)
    for later_index in range(round_index + 1, len(drive.selection_rounds)):
        later = drive.selection_rounds[later_index]
        kept = [sid for sid in later.selected_students if sid in previous]
        if len(kept) != len(later.selected_students):
            logger.info("Drive %s: round %d selection pruned to %d students",
                        drive.id, later_index, len(kept))
            later.selected_students = kept
        previous = set(kept)


def _mark_shortlisted(drive: JobDrive, student_ids: List[str]) -> None:
    wanted = set(student_ids)
    for app in drive.applications:
        if app.student_id in wanted and app.status == ApplicationStatus.applied:
            app.status = ApplicationStatus.shortlisted
