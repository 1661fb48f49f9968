"""
MongoDB Service - repositories for the document collections.

Collections in this database:
1. job_drives - one document per drive (applications, rounds and placed
                students embedded)
2. users      - accounts with profile, consent and OTP state embedded

Saves are compare-and-swap on a `version` counter: a save only lands if
the stored version is the one that was loaded, otherwise the request lost
a race and gets ConcurrentModification.
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.collection import Collection

from placement_portal.core.clock import utcnow
from placement_portal.core.errors import ConcurrentModification
from placement_portal.db.mongodb import COLLECTIONS, get_collection
from placement_portal.models.drive import JobDrive
from placement_portal.models.user import User
from placement_portal.services.profile_normalizer import normalize_drive_payload


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def to_object_id(value: str) -> Any:
    """ObjectId for hex ids; other ids (fixtures, imports) are used as-is."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return value


def _version_filter(doc_id: str, expected: int) -> Dict[str, Any]:
    query: Dict[str, Any] = {"_id": to_object_id(doc_id)}
    if expected == 0:
        # documents written before versioning have no counter
        query["$or"] = [{"version": 0}, {"version": {"$exists": False}}]
    else:
        query["version"] = expected
    return query


def _to_document(model) -> dict:
    return model.model_dump(by_alias=True, exclude={"id"})


# ============================================================
# JOB DRIVES COLLECTION
# ============================================================

class JobDriveRepository:
    """Loads and stores JobDrive aggregates."""

    def __init__(self, collection: Optional[Collection] = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["job_drives"])
        )

    @staticmethod
    def _load(doc: dict) -> JobDrive:
        return JobDrive.model_validate(normalize_drive_payload(serialize_doc(doc)))

    def get(self, drive_id: str) -> Optional[JobDrive]:
        doc = self.collection.find_one({"_id": to_object_id(drive_id)})
        return self._load(doc) if doc else None

    def find(self, query: Optional[dict] = None) -> List[JobDrive]:
        """Drives matching `query`, newest first."""
        cursor = self.collection.find(query or {}).sort("created_at", DESCENDING)
        return [self._load(doc) for doc in cursor]

    def insert(self, drive: JobDrive) -> JobDrive:
        result = self.collection.insert_one(_to_document(drive))
        drive.id = str(result.inserted_id)
        return drive

    def save(self, drive: JobDrive) -> JobDrive:
        expected = drive.version
        drive.updated_at = utcnow()
        doc = _to_document(drive)
        doc["version"] = expected + 1

        result = self.collection.replace_one(_version_filter(drive.id, expected), doc)
        if result.matched_count == 0:
            raise ConcurrentModification()
        drive.version = expected + 1
        return drive

    def delete(self, drive: JobDrive) -> None:
        """Delete the drive if it is still at the loaded version."""
        result = self.collection.delete_one(_version_filter(drive.id, drive.version))
        if result.deleted_count == 0:
            raise ConcurrentModification()


# ============================================================
# USERS COLLECTION
# ============================================================

class UserRepository:
    """Loads and stores users (profile, consent, OTP state)."""

    def __init__(self, collection: Optional[Collection] = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["users"])
        )

    def get(self, user_id: str) -> Optional[User]:
        doc = self.collection.find_one({"_id": to_object_id(user_id)})
        return User.model_validate(serialize_doc(doc)) if doc else None

    def save(self, user: User) -> User:
        expected = user.version
        doc = _to_document(user)
        doc["version"] = expected + 1

        result = self.collection.replace_one(_version_filter(user.id, expected), doc)
        if result.matched_count == 0:
            raise ConcurrentModification()
        user.version = expected + 1
        return user


@lru_cache()
def get_drive_repository() -> JobDriveRepository:
    """Get the job drive repository (one per process)."""
    return JobDriveRepository()


@lru_cache()
def get_user_repository() -> UserRepository:
    """Get the user repository (one per process)."""
    return UserRepository()
