"""Admin authorization gate.

A caller is in one of three states: unauthenticated, authenticated without
admin rights, or admin. Admin is granted when the user's role is "admin" or
their email is one of the configured admin emails; the email path also
writes the role so later checks rely on the role alone.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

import structlog
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.domain.models.user import User

settings = get_settings()
logger = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"


class AdminAccess(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    NON_ADMIN = "authenticated-non-admin"
    ADMIN = "authenticated-admin"


@dataclass(frozen=True)
class GateDecision:
    state: AdminAccess
    promote: bool = False  # role must be written as a side effect


def evaluate_admin_access(user: Optional[User], admin_emails: Iterable[str]) -> GateDecision:
    if user is None or not user.is_active:
        return GateDecision(AdminAccess.UNAUTHENTICATED)

    if user.role == ADMIN_ROLE:
        return GateDecision(AdminAccess.ADMIN)

    allowed = {email.strip().lower() for email in admin_emails if email}
    if user.email and user.email.lower() in allowed:
        return GateDecision(AdminAccess.ADMIN, promote=True)

    return GateDecision(AdminAccess.NON_ADMIN)


def enforce_admin_gate(db: Session, user: Optional[User], admin_emails: Optional[Iterable[str]] = None) -> User:
    """Return the admin user or raise with a redirect hint for the client."""
    decision = evaluate_admin_access(user, settings.ADMIN_EMAILS if admin_emails is None else admin_emails)

    if decision.state is AdminAccess.UNAUTHENTICATED:
        raise UnauthorizedException(
            "Authentication Required",
            details={"redirect_to": "/auth", "description": "Please log in to access this page."},
        )

    if decision.state is AdminAccess.NON_ADMIN:
        logger.info("Admin access denied", user_id=user.id)
        raise ForbiddenException(
            "Access Denied",
            details={"redirect_to": "/", "description": "You don't have permission to access this page."},
        )

    if decision.promote:
        user.role = ADMIN_ROLE
        db.commit()
        db.refresh(user)
        logger.info("Admin role granted from configured email", user_id=user.id)

    return user
