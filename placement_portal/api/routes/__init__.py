"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placement_portal.api.routes.job_drive_routes import router as job_drive_router
from placement_portal.api.routes.placement_consent_routes import router as placement_consent_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(job_drive_router)
api_router.include_router(placement_consent_router)
