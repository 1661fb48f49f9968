"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Stored documents (job drives, users)
- Schemas: API contract (what client sends/receives)
"""

from placement_portal.schemas.schemas import (
    DriveCreate,
    DriveResponse,
    DriveUpdate,
    SelectStudentsRequest,
    VerifyOtpRequest,
)

__all__ = [
    "DriveCreate",
    "DriveResponse",
    "DriveUpdate",
    "SelectStudentsRequest",
    "VerifyOtpRequest",
]
