"""
Models module - Pydantic models for the stored documents.

These models are used for:
- Validating documents loaded from MongoDB
- Building documents before they are saved
- The aggregate passed between the pipeline services
"""

from placement_portal.models.drive import (
    Application,
    ApplicationStatus,
    DriveStage,
    EligibilityRule,
    JobDrive,
    PlacedStudent,
    RoundStatus,
    SelectionRound,
    StudentSnapshot,
)
from placement_portal.models.user import (
    CANDIDATE_ROLES,
    OFFICER_ROLES,
    POSTER_ROLES,
    ConsentRecord,
    User,
    VerificationStatus,
)

__all__ = [
    "Application",
    "ApplicationStatus",
    "DriveStage",
    "EligibilityRule",
    "JobDrive",
    "PlacedStudent",
    "RoundStatus",
    "SelectionRound",
    "StudentSnapshot",
    "CANDIDATE_ROLES",
    "OFFICER_ROLES",
    "POSTER_ROLES",
    "ConsentRecord",
    "User",
    "VerificationStatus",
]
