"""
MongoDB Connection Utility

MongoDB stores:
- Job drives, each one document with its applications, selection rounds
  and placed students embedded
- Users, with the student profile, placement consent and OTP
  verification state embedded

WHY one document per drive?
- The pipeline (apply -> rounds -> finalize) always touches one drive
- A single-document write is atomic in MongoDB
- The `version` field turns every save into a compare-and-swap
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from placement_portal.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """
    Get a specific collection.
    Collections we use:
    - job_drives: drive aggregates
    - users: accounts with embedded profile / consent / verification
    """
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "job_drives": "job_drives",
    "users": "users",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    drives = db[COLLECTIONS["job_drives"]]
    # Student listing: active drives, newest first
    drives.create_index([("is_active", ASCENDING), ("created_at", DESCENDING)])
    # "Have I applied?" lookups
    drives.create_index("applications.student_id")
    drives.create_index("created_by")

    users = db[COLLECTIONS["users"]]
    users.create_index("email", unique=True)

    logger.info("MongoDB indexes created successfully")
