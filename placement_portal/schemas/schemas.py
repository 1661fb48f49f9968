"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Stored documents live in `placement_portal.models`; these are the API
contract (what the client sends/receives).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any, Dict
from datetime import datetime

from placement_portal.models.drive import (
    Application, EligibilityRule, JobDrive, PlacedStudent, SelectionRound
)


# ============================================================
# JOB DRIVE SCHEMAS
# ============================================================

class RoundCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    details: Optional[str] = None
    date: Optional[datetime] = None


class DriveCreate(BaseModel):
    """
    Drive payload. Legacy keys (`companyName`, `type`, `eligibility.cgpa`,
    `eligibility.departments`, ...) are accepted and normalized.
    """
    model_config = ConfigDict(extra="allow")

    company_name: Optional[str] = None
    role: str = ""
    description: str = ""
    ctc: Optional[float] = Field(None, ge=0)
    date: Optional[datetime] = None
    time: Optional[str] = Field(None, pattern=r"^\d{1,2}:\d{2}(:\d{2})?$")
    deadline: Optional[datetime] = None
    eligibility: Dict[str, Any] = {}
    unplaced_only: Optional[bool] = None
    is_active: Optional[bool] = None
    rounds: List[str] = []
    selection_rounds: List[RoundCreate] = []


class DriveUpdate(BaseModel):
    """Partial update; only the fields sent are amended."""
    model_config = ConfigDict(extra="allow")

    company_name: Optional[str] = None
    role: Optional[str] = None
    description: Optional[str] = None
    ctc: Optional[float] = Field(None, ge=0)
    date: Optional[datetime] = None
    time: Optional[str] = Field(None, pattern=r"^\d{1,2}:\d{2}(:\d{2})?$")
    deadline: Optional[datetime] = None
    eligibility: Optional[Dict[str, Any]] = None
    unplaced_only: Optional[bool] = None
    is_active: Optional[bool] = None


class DriveResponse(BaseModel):
    id: str
    company_name: str
    role: str
    job_type: str
    description: str
    location: str
    locations: List[str] = []
    skills: List[str] = []
    ctc: Optional[float] = None
    date: datetime
    time: Optional[str] = None
    deadline: Optional[datetime] = None
    is_active: bool
    eligibility: EligibilityRule
    unplaced_only: bool
    selection_rounds: List[SelectionRound] = []
    placed_students: List[PlacedStudent] = []
    placement_finalized: bool
    applications_count: int
    has_applied: bool = False
    created_by: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_drive(cls, drive: JobDrive, viewer_id: Optional[str] = None) -> "DriveResponse":
        return cls(
            id=drive.id, company_name=drive.company_name, role=drive.role,
            job_type=drive.job_type, description=drive.description,
            location=drive.location or ", ".join(drive.locations) or "Not specified",
            locations=drive.locations, skills=drive.skills, ctc=drive.ctc,
            date=drive.date, time=drive.time, deadline=drive.deadline,
            is_active=drive.is_active, eligibility=drive.eligibility,
            unplaced_only=drive.unplaced_only, selection_rounds=drive.selection_rounds,
            placed_students=drive.placed_students,
            placement_finalized=drive.placement_finalized,
            applications_count=len(drive.applications),
            has_applied=viewer_id is not None and drive.find_application(viewer_id) is not None,
            created_by=drive.created_by, created_at=drive.created_at,
        )


class DriveListResponse(BaseModel):
    drives: List[DriveResponse]
    count: int


class DriveStatsResponse(BaseModel):
    """Dashboard counters; candidate and poster views fill different fields."""
    total_drives: int
    all_drives: int
    applied_drives: Optional[int] = None
    available_drives: Optional[int] = None
    upcoming_drives: Optional[int] = None
    applications_received: Optional[int] = None


class MessageResponse(BaseModel):
    message: str


class EligibilityResponse(BaseModel):
    drive_id: str
    eligible: bool
    meets_cgpa: bool
    meets_department: bool
    meets_backlogs: bool
    meets_batch: bool
    meets_placement_status: bool
    reasons: List[str] = []


# ============================================================
# APPLICATION / ROUND SCHEMAS
# ============================================================

class ApplyResponse(BaseModel):
    message: str
    application: Application


class ApplicantResponse(BaseModel):
    student_id: str
    name: str
    email: str
    roll_number: str
    department: str
    phone: Optional[str] = None
    status: str
    applied_at: datetime

    @classmethod
    def from_application(cls, app: Application) -> "ApplicantResponse":
        return cls(
            student_id=app.student_id, name=app.student.name, email=app.student.email,
            roll_number=app.student.roll_number, department=app.student.department,
            phone=app.student.phone, status=app.status, applied_at=app.applied_at,
        )


class ApplicantListResponse(BaseModel):
    students: List[ApplicantResponse]
    count: int


class RoundStatusUpdate(BaseModel):
    status: str = Field("completed", pattern="^completed$")


class SelectStudentsRequest(BaseModel):
    student_ids: List[str]


class RoundResponse(BaseModel):
    message: str
    round_index: int
    round: SelectionRound


class FinalizeResponse(BaseModel):
    message: str
    placed_students: List[PlacedStudent]
    count: int


# ============================================================
# CONSENT / OTP SCHEMAS
# ============================================================

class PolicyResponse(BaseModel):
    title: str
    content: str
    last_updated: datetime


class ConsentResponse(BaseModel):
    message: str
    needs_otp_verification: bool = True
    email: str


class VerifyOtpRequest(BaseModel):
    otp_code: str = Field(..., min_length=1, max_length=12)


class VerifyOtpResponse(BaseModel):
    message: str
    verified: bool


class ResendOtpResponse(BaseModel):
    message: str
    email: str
    remaining_resends: int


class ConsentStatusResponse(BaseModel):
    profile_complete: bool
    consent_given: bool
    consent_date: Optional[datetime] = None
    otp_verified: bool
    can_access_dashboard: bool

