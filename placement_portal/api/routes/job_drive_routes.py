"""
Job Drive Routes

POST  /job-drives                                     - Create drive (PO / PR)
GET   /job-drives                                     - List drives (students see active only)
GET   /job-drives/student-drives                      - Open drives the caller is eligible for
GET   /job-drives/stats                               - Dashboard counters
GET   /job-drives/{drive_id}                          - Drive details
PUT   /job-drives/{drive_id}                          - Amend drive before finalization
DELETE /job-drives/{drive_id}                         - Delete drive before finalization
GET   /job-drives/{drive_id}/eligibility              - Eligibility preview for the caller
POST  /job-drives/{drive_id}/apply                    - Apply (student / PR)
GET   /job-drives/{drive_id}/students                 - Applicant list
POST  /job-drives/{drive_id}/rounds                   - Append a selection round
GET   /job-drives/{drive_id}/rounds/{idx}/candidates  - Candidate pool of a round
PATCH /job-drives/{drive_id}/rounds/{idx}/status      - Mark round completed
POST  /job-drives/{drive_id}/rounds/{idx}/select-students
POST  /job-drives/{drive_id}/finalize-placement

Handlers are plain `def` so FastAPI runs them in its threadpool; the drive
service serializes mutations of one drive with a per-drive lock.
"""

import logging

from fastapi import APIRouter, Depends

from placement_portal.core.auth import get_current_candidate, get_current_poster, get_current_user
from placement_portal.models.user import User
from placement_portal.schemas.schemas import (
    ApplicantListResponse, ApplicantResponse, ApplyResponse, DriveCreate, DriveListResponse,
    DriveResponse, DriveStatsResponse, DriveUpdate, EligibilityResponse, FinalizeResponse,
    MessageResponse, RoundCreate, RoundResponse, RoundStatusUpdate, SelectStudentsRequest,
)
from placement_portal.services.drive_service import DriveService, get_drive_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/job-drives", tags=["Job Drives"])


# ============================================================
# DRIVES
# ============================================================

@router.post("", response_model=DriveResponse, status_code=201)
def create_drive(
    payload: DriveCreate,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    """Create a job drive. Legacy field names are accepted."""
    drive = service.create_drive(payload.model_dump(exclude_unset=True), user)
    return DriveResponse.from_drive(drive)


@router.get("", response_model=DriveListResponse)
def list_drives(
    user: User = Depends(get_current_user),
    service: DriveService = Depends(get_drive_service),
):
    drives = service.list_drives(user)
    return DriveListResponse(
        drives=[DriveResponse.from_drive(d, user.id) for d in drives], count=len(drives)
    )


@router.get("/student-drives", response_model=DriveListResponse)
def list_eligible_drives(
    user: User = Depends(get_current_candidate),
    service: DriveService = Depends(get_drive_service),
):
    """Active drives the calling student currently qualifies for."""
    drives = service.eligible_drives(user)
    return DriveListResponse(
        drives=[DriveResponse.from_drive(d, user.id) for d in drives], count=len(drives)
    )


@router.get("/stats", response_model=DriveStatsResponse)
def drive_stats(
    user: User = Depends(get_current_user),
    service: DriveService = Depends(get_drive_service),
):
    return DriveStatsResponse(**service.stats(user))


@router.get("/{drive_id}", response_model=DriveResponse)
def get_drive(
    drive_id: str,
    user: User = Depends(get_current_user),
    service: DriveService = Depends(get_drive_service),
):
    return DriveResponse.from_drive(service.get_drive(drive_id), user.id)


@router.put("/{drive_id}", response_model=DriveResponse)
def update_drive(
    drive_id: str,
    payload: DriveUpdate,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    """Amend descriptive fields or eligibility. Rejected once placement is finalized."""
    drive = service.update_drive(drive_id, payload.model_dump(exclude_unset=True), user)
    return DriveResponse.from_drive(drive)


@router.delete("/{drive_id}", response_model=MessageResponse)
def delete_drive(
    drive_id: str,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    service.delete_drive(drive_id, user)
    return MessageResponse(message="Job drive deleted successfully")


@router.get("/{drive_id}/eligibility", response_model=EligibilityResponse)
def preview_eligibility(
    drive_id: str,
    user: User = Depends(get_current_candidate),
    service: DriveService = Depends(get_drive_service),
):
    report = service.preview_eligibility(drive_id, user)
    return EligibilityResponse(
        drive_id=drive_id,
        eligible=report.eligible,
        meets_cgpa=report.meets_cgpa,
        meets_department=report.meets_department,
        meets_backlogs=report.meets_backlogs,
        meets_batch=report.meets_batch,
        meets_placement_status=report.meets_placement_status,
        reasons=report.reasons,
    )


# ============================================================
# APPLICATIONS
# ============================================================

@router.post("/{drive_id}/apply", response_model=ApplyResponse)
def apply_to_drive(
    drive_id: str,
    user: User = Depends(get_current_candidate),
    service: DriveService = Depends(get_drive_service),
):
    application = service.apply(drive_id, user)
    return ApplyResponse(message="Application submitted successfully", application=application)


@router.get("/{drive_id}/students", response_model=ApplicantListResponse)
def list_applicants(
    drive_id: str,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    students = [
        ApplicantResponse.from_application(app)
        for app in service.applicants(drive_id)
    ]
    return ApplicantListResponse(students=students, count=len(students))


# ============================================================
# SELECTION ROUNDS
# ============================================================

@router.post("/{drive_id}/rounds", response_model=RoundResponse, status_code=201)
def add_round(
    drive_id: str,
    payload: RoundCreate,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    selection_round = service.add_round(drive_id, user, payload.name, payload.details, payload.date)
    index = len(service.get_drive(drive_id).selection_rounds) - 1
    return RoundResponse(message="Round added", round_index=index, round=selection_round)


@router.get("/{drive_id}/rounds/{round_index}/candidates", response_model=ApplicantListResponse)
def round_candidates(
    drive_id: str,
    round_index: int,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    """Round 0 draws from all applicants, later rounds from the previous round's selection."""
    students = [
        ApplicantResponse.from_application(app)
        for app in service.candidate_pool(drive_id, round_index)
    ]
    return ApplicantListResponse(students=students, count=len(students))


@router.patch("/{drive_id}/rounds/{round_index}/status", response_model=RoundResponse)
def complete_round(
    drive_id: str,
    round_index: int,
    payload: RoundStatusUpdate = RoundStatusUpdate(),
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    selection_round = service.complete_round(drive_id, round_index, user)
    return RoundResponse(
        message="Round marked as completed", round_index=round_index, round=selection_round
    )


@router.post("/{drive_id}/rounds/{round_index}/select-students", response_model=RoundResponse)
def select_students(
    drive_id: str,
    round_index: int,
    payload: SelectStudentsRequest,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    selection_round = service.select_students(drive_id, round_index, payload.student_ids, user)
    return RoundResponse(
        message=f"{len(selection_round.selected_students)} students selected",
        round_index=round_index,
        round=selection_round,
    )


@router.post("/{drive_id}/finalize-placement", response_model=FinalizeResponse)
def finalize_placement(
    drive_id: str,
    user: User = Depends(get_current_poster),
    service: DriveService = Depends(get_drive_service),
):
    """Publish the last round's selection as the placed list. Irreversible."""
    placed = service.finalize(drive_id, user)
    logger.info("Drive %s finalized by %s with %d placed", drive_id, user.id, len(placed))
    return FinalizeResponse(
        message="Placement finalized successfully", placed_students=placed, count=len(placed)
    )
