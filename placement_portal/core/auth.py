"""
Authentication Utility - JWT verification and role dependencies.

Tokens are issued by the login service; here we only:
- Verify the bearer JWT and load the user it names
- Provide FastAPI dependencies for role-protected routes
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from placement_portal.core.config import get_settings
from placement_portal.models.user import CANDIDATE_ROLES, POSTER_ROLES, User
from placement_portal.services.mongo_service import UserRepository, get_user_repository

logger = logging.getLogger(__name__)

# Bearer token extractor
bearer_scheme = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token (same format the login service issues)."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """
    FastAPI dependency - Get current authenticated user.

    Plain `def` so the user lookup runs in the threadpool.

    Usage:
        @app.get("/protected")
        async def route(user: User = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = users.get(str(user_id))
    if not user:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return user


async def get_current_candidate(user: User = Depends(get_current_user)) -> User:
    """Dependency - Require student or placement representative role."""
    if user.role not in CANDIDATE_ROLES:
        raise HTTPException(status_code=403, detail="Access denied - Students and PRs only")
    return user


async def get_current_poster(user: User = Depends(get_current_user)) -> User:
    """Dependency - Require a role that can post and manage drives."""
    if user.role not in POSTER_ROLES:
        logger.warning("User %s (%s) denied drive management", user.id, user.role)
        raise HTTPException(
            status_code=403,
            detail="Access denied - Only Placement Officers and Representatives can perform this action",
        )
    return user
