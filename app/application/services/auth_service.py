"""Auth service — JWT token management, password hashing and password reset."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.exceptions import BusinessRuleViolationException, ConflictException, ForbiddenException
from app.domain.models.password_reset import PasswordResetToken
from app.domain.models.user import User
from app.infrastructure.mail_api import MailClient
from app.application.services.settings_service import get_system_settings

settings = get_settings()
logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    if not user.is_active:
        return None
    user.last_sign_in_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(db: Session, name: str, email: str, password: str, role: str = "customer", phone: str = None) -> User:
    user = User(
        name=name.strip(),
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        phone=phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def register_user(db: Session, name: str, email: str, password: str, phone: Optional[str] = None) -> User:
    """Sign-up: honours the allow_registration setting and rejects known emails."""
    if not get_system_settings(db).allow_registration:
        raise ForbiddenException("New registrations are currently disabled")
    if get_user_by_email(db, email):
        raise ConflictException("Email already registered")

    user = create_user(db, name=name, email=email, password=password, phone=phone)
    logger.info("User registered", user_id=user.id)
    return user


def update_user_metadata(db: Session, user: User, name: Optional[str] = None, phone: Optional[str] = None) -> User:
    if name is not None:
        if not name.strip():
            raise BusinessRuleViolationException("Name cannot be empty")
        user.name = name.strip()
    if phone is not None:
        user.phone = phone.strip() or None
    db.commit()
    db.refresh(user)
    return user


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def create_password_reset_token(db: Session, user: User) -> str:
    """Issue a single-use token; only its hash is stored."""
    token = secrets.token_urlsafe(32)
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token_hash=_hash_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
    )
    db.commit()
    return token


async def request_password_reset(db: Session, email: str, mail_client: MailClient) -> bool:
    """Dispatch a reset mail if the account exists. Callers must not reveal the result."""
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        logger.info("Password reset requested for unknown account")
        return False

    token = create_password_reset_token(db, user)
    link = f"{settings.PASSWORD_RESET_URL}?token={token}"
    await mail_client.send(
        to_email=user.email,
        subject="Reset your password",
        body=(
            f"Hello {user.name},\n\n"
            f"Use the link below to choose a new password. It expires in "
            f"{settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes.\n\n{link}\n"
        ),
    )
    logger.info("Password reset issued", user_id=user.id)
    return True


def confirm_password_reset(db: Session, token: str, new_password: str) -> User:
    record = (
        db.query(PasswordResetToken)
        .filter(PasswordResetToken.token_hash == _hash_token(token))
        .first()
    )
    if record is None or record.used_at is not None:
        raise BusinessRuleViolationException("Invalid or already used reset token")

    expires_at = record.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < datetime.now(timezone.utc):
        raise BusinessRuleViolationException("Reset token has expired")

    user = db.get(User, record.user_id)
    if user is None:
        raise BusinessRuleViolationException("Invalid or already used reset token")

    user.password_hash = hash_password(new_password)
    record.used_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    logger.info("Password reset completed", user_id=user.id)
    return user
