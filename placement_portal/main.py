"""
Campus Placement Portal - Main Application

FastAPI backend with:
- MongoDB for job drives and users
- JWT authentication (tokens issued by the login service)
- SMTP for placement consent OTPs

Run: uvicorn placement_portal.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from placement_portal.api.routes import api_router
from placement_portal.core.config import get_settings
from placement_portal.core.errors import PlacementError
from placement_portal.core.logging_config import configure_logging
from placement_portal.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Campus Placement Portal",
    description="""
    Job drive pipeline and placement consent gate.

    ## Features
    - **Job Drives**: Post drives with eligibility rules, amend them until finalized
    - **Applications**: Eligibility, deadline and consent checked when a student applies
    - **Selection Rounds**: Each round narrows the previous round's selection
    - **Finalization**: The last round's selection becomes the placed list
    - **Placement Consent**: Signed policy agreement verified by an emailed OTP
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlacementError)
async def placement_error_handler(request: Request, exc: PlacementError):
    """Render domain errors as {detail, code, ...extra} with their HTTP status."""
    if exc.status_code >= 409:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(ValidationError)
async def document_validation_handler(request: Request, exc: ValidationError):
    """A normalized drive payload that still does not form a valid drive."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Invalid job drive data",
            "code": "validation_error",
            "errors": jsonable_encoder(exc.errors(include_url=False, include_context=False)),
        },
    )


# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Campus Placement Portal"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected",
    }
