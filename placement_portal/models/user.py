"""
User document model.

The profile is kept as the raw stored mapping: it is written by the
profile-update collaborators in several historical shapes, and only
`services.profile_normalizer` interprets it.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Roles that take part in placements as candidates
CANDIDATE_ROLES = {"student", "placement_representative"}
# Roles allowed to post and manage drives
POSTER_ROLES = {"po", "placementofficer", "placement_officer", "placement_representative"}
# Placement officers manage every department's drives
OFFICER_ROLES = {"po", "placementofficer", "placement_officer"}


class ConsentRecord(BaseModel):
    has_agreed: bool = False
    agreed_at: Optional[datetime] = None
    signature: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class VerificationStatus(BaseModel):
    otp_code: Optional[str] = None
    otp_expires: Optional[datetime] = None
    otp_verified: bool = False
    otp_attempts: int = 0
    otp_resend_count: int = 0
    last_otp_sent: Optional[datetime] = None
    verified_at: Optional[datetime] = None


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    email: str
    role: str
    name: Optional[str] = None
    is_active: bool = True
    profile: Dict[str, Any] = {}
    placement_policy_consent: ConsentRecord = Field(default_factory=ConsentRecord)
    verification_status: VerificationStatus = Field(default_factory=VerificationStatus)
    version: int = 0

    @property
    def is_candidate(self) -> bool:
        return self.role in CANDIDATE_ROLES
