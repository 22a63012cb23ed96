# ============================================================================
# FILE: bossofclean/api/dependencies.py
# Request dependencies: bearer token identity, cleaner profile, clock
# ============================================================================
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from uuid import UUID

from bossofclean.config.database import get_db
from bossofclean.config.settings import settings
from bossofclean.core.timezone import local_now
from bossofclean.models import Cleaner
from bossofclean.services.storage.schedule_store import ScheduleStore

# ============================================================================
# Security Schemes
# ============================================================================

jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token"
)


class CurrentUser(BaseModel):
    id: UUID
    role: str = "customer"


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary with claims (should include 'sub' with user_id)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


# ============================================================================
# Dependencies
# ============================================================================

def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security)
) -> CurrentUser:
    """Identity of the caller, taken from the 'sub' claim."""
    payload = verify_access_token(credentials.credentials)

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token subject is not a valid user id",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentUser(id=user_id, role=payload.get("role", "customer"))


def get_current_cleaner(
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
) -> Cleaner:
    """Cleaner profile owned by the caller."""
    cleaner = ScheduleStore(db).get_cleaner_by_user(current_user.id)
    if not cleaner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cleaner profile not found"
        )
    return cleaner


def get_now() -> datetime:
    """Current time in the service timezone; overridden in tests."""
    return local_now()
