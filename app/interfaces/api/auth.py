"""Auth API routes — register, login, session and password reset."""

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.infrastructure.database import get_db
from app.application.services.auth_service import (
    authenticate_user,
    confirm_password_reset,
    create_access_token,
    register_user,
    request_password_reset,
    update_user_metadata,
)
from app.core.exceptions import ExternalServiceException, UnauthorizedException
from app.domain.schemas.auth import (
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    TokenResponse,
    UserCreate,
    UserMetadataUpdate,
    UserRead,
)
from app.infrastructure.mail_api import MailClient
from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import get_mailer
from app.domain.models.user import User

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    if not user:
        raise UnauthorizedException("Invalid email or password")

    access_token = create_access_token(data={"sub": str(user.id), "role": user.role})

    return TokenResponse(
        access_token=access_token,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, db: Session = Depends(get_db)):
    user = register_user(
        db=db,
        name=body.name,
        email=body.email,
        password=body.password,
        phone=body.phone,
    )
    return UserRead.model_validate(user)


@router.get("/me", response_model=UserRead)
def get_me(user: User = Depends(get_current_user)):
    return UserRead.model_validate(user)


@router.patch("/me", response_model=UserRead)
def update_me(
    body: UserMetadataUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return UserRead.model_validate(update_user_metadata(db, user, name=body.name, phone=body.phone))


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
async def password_reset(
    body: PasswordResetRequest,
    db: Session = Depends(get_db),
    mailer: MailClient = Depends(get_mailer),
):
    # Same answer whether or not the account exists
    try:
        await request_password_reset(db, body.email, mailer)
    except ExternalServiceException as e:
        logger.error("Password reset mail failed", error=e.message)
    return {"message": "If the email is registered, a reset link has been sent."}


@router.post("/password-reset/confirm")
def password_reset_confirm(body: PasswordResetConfirm, db: Session = Depends(get_db)):
    confirm_password_reset(db, body.token, body.new_password)
    return {"message": "Password updated"}
