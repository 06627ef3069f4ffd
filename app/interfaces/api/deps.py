"""FastAPI dependency — JWT auth and the admin gate."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.infrastructure.database import get_db
from app.application.services.admin_gate import enforce_admin_gate
from app.application.services.auth_service import decode_access_token
from app.core.exceptions import UnauthorizedException
from app.domain.models.user import User

# auto_error=False so unauthenticated callers reach the gate and get its redirect hint
security = HTTPBearer(auto_error=False)


def _user_from_token(db: Session, token: str) -> Optional[User]:
    payload = decode_access_token(token)
    if payload is None:
        return None

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None

    user = db.get(User, int(subject))
    if user is None or not user.is_active:
        return None
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """The signed-in user, or None for anonymous callers."""
    if credentials is None:
        return None
    return _user_from_token(db, credentials.credentials)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Extract and validate the current user from JWT token."""
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    user = _user_from_token(db, credentials.credentials)
    if user is None:
        raise UnauthorizedException("Invalid or expired token")
    return user


def require_admin(
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> User:
    """Run the admin gate for the caller."""
    return enforce_admin_gate(db, user)
