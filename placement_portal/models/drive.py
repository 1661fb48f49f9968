"""
Job drive document model.

One MongoDB document per drive. Applications, selection rounds and the
placed-student list are embedded arrays, so the whole drive is loaded,
mutated and saved as a single aggregate.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from placement_portal.core.clock import to_naive_utc, utcnow


class RoundStatus(str, Enum):
    pending = "pending"
    completed = "completed"


class DriveStage(str, Enum):
    """open -> finalized, one way. A finalized drive is immutable."""
    open = "open"
    finalized = "finalized"


class ApplicationStatus(str, Enum):
    applied = "applied"
    shortlisted = "shortlisted"
    rejected = "rejected"
    selected = "selected"


class DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, validate_assignment=True)


class EligibilityRule(DocumentModel):
    """Each criterion left empty means 'no restriction'."""
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    max_backlogs: Optional[int] = Field(None, ge=0)
    allowed_departments: List[str] = []
    allowed_batches: List[str] = []


class StudentSnapshot(DocumentModel):
    """Student details copied onto the application when it is created."""
    name: str = "N/A"
    roll_number: str = "N/A"
    department: str = "N/A"
    email: str = ""
    phone: Optional[str] = None


class Application(DocumentModel):
    student_id: str
    applied_at: datetime
    status: ApplicationStatus = ApplicationStatus.applied
    student: StudentSnapshot = Field(default_factory=StudentSnapshot)


class SelectionRound(DocumentModel):
    name: str
    details: Optional[str] = None
    date: Optional[datetime] = None
    status: RoundStatus = RoundStatus.pending
    selected_students: List[str] = []


class PlacedStudent(DocumentModel):
    student_id: str
    name: str
    roll_number: str
    department: Optional[str] = None
    email: str
    mobile_number: Optional[str] = None
    added_by: Optional[str] = None
    added_at: datetime


class JobDrive(DocumentModel):
    id: Optional[str] = Field(None, alias="_id")

    # Company / role
    company_name: str
    role: str = ""
    job_type: str = "full-time"
    description: str = ""
    requirements: str = ""
    skills: List[str] = []
    location: str = ""
    locations: List[str] = []
    drive_mode: str = "on-campus"
    venue: Optional[str] = None
    bond: str = ""
    ctc: Optional[float] = Field(None, ge=0)  # LPA

    # Schedule
    date: datetime
    time: Optional[str] = None  # "HH:MM", applies to the deadline day
    deadline: Optional[datetime] = None

    # Eligibility
    eligibility: EligibilityRule = Field(default_factory=EligibilityRule)
    unplaced_only: bool = False

    # Pipeline state
    is_active: bool = True
    applications: List[Application] = []
    selection_rounds: List[SelectionRound] = []
    placed_students: List[PlacedStudent] = []
    stage: DriveStage = DriveStage.open

    # System
    created_by: Optional[str] = None
    created_by_department: Optional[str] = None
    version: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("date", "deadline", "created_at", "updated_at")
    @classmethod
    def _naive_utc(cls, value):
        return to_naive_utc(value)

    @property
    def placement_finalized(self) -> bool:
        return self.stage == DriveStage.finalized

    def applicant_ids(self) -> List[str]:
        return [app.student_id for app in self.applications]

    def find_application(self, student_id: str) -> Optional[Application]:
        for app in self.applications:
            if app.student_id == student_id:
                return app
        return None
