"""Check-in tokens and access gates for admin and housekeeping routes."""

import logging
import secrets
import uuid
from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)
from jose import JWTError, jwt

from smart_checkin.config import settings
from smart_checkin.database import utcnow

logger = logging.getLogger(__name__)

CHECKIN_SCOPE = "checkin"

# Security schemes
admin_security = HTTPBasic(auto_error=False, realm="Smart Check-in Admin")
bearer_security = HTTPBearer(auto_error=False)


def create_checkin_token(
    reservation_id: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create the token that carries a biometric authentication to check-in.

    Args:
        reservation_id: Reservation resolved by the authentication ceremony
        expires_delta: Custom expiration time

    Returns:
        str: Encoded JWT token
    """
    now = utcnow()
    expire = now + (
        expires_delta or timedelta(minutes=settings.checkin_token_expire_minutes)
    )

    claims = {
        "sub": reservation_id,
        "scope": CHECKIN_SCOPE,
        "exp": expire,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }

    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def verify_checkin_token(token: Optional[str], reservation_id: str) -> bool:
    """
    Check that a token was issued for this reservation and has not expired.

    Args:
        token: JWT token string
        reservation_id: Reservation the guest is checking in to

    Returns:
        bool: True if the token proves a biometric authentication
    """
    if not token:
        return False

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm]
        )
    except JWTError as e:
        logger.info(f"Rejected check-in token: {e}")
        return False

    return (
        payload.get("scope") == CHECKIN_SCOPE
        and payload.get("sub") == reservation_id
    )


async def require_admin(
    credentials: Optional[HTTPBasicCredentials] = Depends(admin_security),
) -> str:
    """Gate admin routes behind HTTP Basic authentication."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": 'Basic realm="Smart Check-in Admin"'},
    )

    if credentials is None:
        raise unauthorized

    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    if not (username_ok and password_ok):
        logger.warning("Rejected admin credentials")
        raise unauthorized

    return credentials.username


async def require_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_security),
) -> None:
    """Gate housekeeping routes behind the cron bearer secret, when one is configured."""
    if not settings.cron_secret:
        return

    supplied = credentials.credentials if credentials else ""
    if not secrets.compare_digest(
        supplied.encode("utf-8"), settings.cron_secret.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
