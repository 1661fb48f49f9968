"""
Pytest configuration and shared fixtures.

Repositories are replaced by in-memory versions with the same
get/find/insert/save contract (including the version compare-and-swap),
so services run exactly as in production without a MongoDB server.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId

from placement_portal.core.config import Settings
from placement_portal.core.errors import ConcurrentModification
from placement_portal.models.drive import JobDrive
from placement_portal.models.user import ConsentRecord, User, VerificationStatus
from placement_portal.services.consent_service import ConsentService
from placement_portal.services.drive_service import DriveService
from placement_portal.services.mailer import MailDeliveryError
from placement_portal.services.otp_service import OtpIssuer

NOW = datetime(2025, 1, 10, 9, 0, 0)
OTP_CODE = "123456"


# ============================================================
# IN-MEMORY STORE
# ============================================================

class InMemoryDriveRepository:
    def __init__(self):
        self.docs: Dict[str, JobDrive] = {}

    def get(self, drive_id: str) -> Optional[JobDrive]:
        drive = self.docs.get(drive_id)
        return drive.model_copy(deep=True) if drive else None

    def find(self, query: Optional[dict] = None) -> List[JobDrive]:
        query = query or {}
        drives = [
            d.model_copy(deep=True) for d in self.docs.values()
            if all(getattr(d, key) == value for key, value in query.items())
        ]
        return sorted(drives, key=lambda d: d.created_at, reverse=True)

    def insert(self, drive: JobDrive) -> JobDrive:
        if drive.id is None:
            drive.id = str(ObjectId())
        self.docs[drive.id] = drive.model_copy(deep=True)
        return drive

    def save(self, drive: JobDrive) -> JobDrive:
        stored = self.docs.get(drive.id)
        if stored is None or stored.version != drive.version:
            raise ConcurrentModification()
        drive.version += 1
        self.docs[drive.id] = drive.model_copy(deep=True)
        return drive

    def delete(self, drive: JobDrive) -> None:
        stored = self.docs.get(drive.id)
        if stored is None or stored.version != drive.version:
            raise ConcurrentModification()
        del self.docs[drive.id]


class InMemoryUserRepository:
    def __init__(self):
        self.docs: Dict[str, User] = {}

    def add(self, user: User) -> User:
        self.docs[user.id] = user.model_copy(deep=True)
        return user

    def get(self, user_id: str) -> Optional[User]:
        user = self.docs.get(user_id)
        return user.model_copy(deep=True) if user else None

    def save(self, user: User) -> User:
        stored = self.docs.get(user.id)
        if stored is None or stored.version != user.version:
            raise ConcurrentModification()
        user.version += 1
        self.docs[user.id] = user.model_copy(deep=True)
        return user


class RecordingMailer:
    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    def send_otp(self, to_address, otp_code, name=None, ttl_minutes=2):
        self.sent.append({"to": to_address, "code": otp_code, "name": name})


class FailingMailer:
    def send_otp(self, to_address, otp_code, name=None, ttl_minutes=2):
        raise MailDeliveryError("SMTP unreachable")


# ============================================================
# SAMPLE DATA
# ============================================================

def make_profile(**overrides) -> Dict[str, Any]:
    profile = {
        "name": "Asha Kumar",
        "roll_number": "21CS001",
        "department": "CSE",
        "batch": "2025",
        "cgpa": 8.2,
        "current_backlogs": 0,
        "is_placed": False,
        "phone_number": "9876543210",
        "is_profile_complete": True,
    }
    profile.update(overrides)
    return profile


def make_student(user_id: str = "s1", role: str = "student", verified: bool = True,
                 **profile_overrides) -> User:
    """A student who has completed the consent flow unless `verified` is False."""
    return User(
        _id=user_id,
        email=f"{user_id}@college.edu",
        role=role,
        name=f"Student {user_id}",
        profile=make_profile(name=f"Student {user_id}", roll_number=f"21CS{user_id}",
                             **profile_overrides),
        placement_policy_consent=ConsentRecord(
            has_agreed=verified, agreed_at=NOW - timedelta(days=1) if verified else None,
            signature="signature.png" if verified else None,
        ),
        verification_status=VerificationStatus(otp_verified=verified),
    )


def make_officer(user_id: str = "po1", role: str = "placement_officer",
                 department: str = "CSE") -> User:
    return User(_id=user_id, email=f"{user_id}@college.edu", role=role,
                name="Placement Officer", profile={"department": department})


def make_drive(**overrides) -> JobDrive:
    data = {
        "_id": "drive-1",
        "company_name": "Acme Systems",
        "role": "Software Engineer",
        "ctc": 8.0,
        "date": NOW + timedelta(days=10),
        "deadline": NOW + timedelta(days=9),
        "eligibility": {"min_cgpa": 7.0, "allowed_departments": ["CSE", "ECE"]},
        "created_by": "po1",
        "created_by_department": "CSE",
        "created_at": NOW - timedelta(days=1),
    }
    data.update(overrides)
    return JobDrive.model_validate(data)


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, smtp_host="")


@pytest.fixture
def drive_repo() -> InMemoryDriveRepository:
    return InMemoryDriveRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def issuer(mailer, settings) -> OtpIssuer:
    return OtpIssuer(mailer, settings, code_factory=lambda: OTP_CODE)


@pytest.fixture
def clock():
    """Mutable clock: tests move time with `clock.now = ...`."""
    class Clock:
        now = NOW

        def __call__(self):
            return self.now
    return Clock()


@pytest.fixture
def drive_service(drive_repo, settings, clock) -> DriveService:
    return DriveService(drive_repo, settings, clock=clock)


@pytest.fixture
def consent_service(user_repo, issuer, clock) -> ConsentService:
    return ConsentService(user_repo, issuer, clock=clock)


@pytest.fixture
def officer(user_repo) -> User:
    return user_repo.add(make_officer())


@pytest.fixture
def drive(drive_repo) -> JobDrive:
    return drive_repo.insert(make_drive())
