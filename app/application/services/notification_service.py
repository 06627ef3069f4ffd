"""Notification service — in-app notices for provider lifecycle events."""

import structlog
from sqlalchemy.orm import Session

from app.core.exceptions import EntityNotFoundException
from app.domain.models.notification import Notification
from app.domain.models.service_provider import ProviderStatus
from app.domain.schemas.notification import NotificationList, NotificationRead

logger = structlog.get_logger(__name__)

STATUS_MESSAGES = {
    ProviderStatus.APPROVED.value: (
        "Application approved",
        "Your service provider profile is now live on the marketplace.",
        "success",
    ),
    ProviderStatus.REJECTED.value: (
        "Application rejected",
        "Your service provider application was not approved.",
        "warning",
    ),
    ProviderStatus.SUSPENDED.value: (
        "Profile suspended",
        "Your service provider profile has been suspended and is hidden from customers.",
        "warning",
    ),
}


def notify(db: Session, user_id: int, title: str, message: str, type: str = "info") -> Notification:
    notification = Notification(user_id=user_id, title=title, message=message, type=type)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def notify_application_received(db: Session, user_id: int) -> Notification:
    return notify(
        db,
        user_id,
        "Application received",
        "Your registration has been submitted and is pending admin approval.",
    )


def notify_status_change(db: Session, user_id: int, status: str) -> Notification:
    title, message, type_ = STATUS_MESSAGES.get(
        status, ("Status updated", f"Your provider status is now {status}.", "info")
    )
    return notify(db, user_id, title, message, type_)


def list_notifications(db: Session, user_id: int) -> NotificationList:
    rows = (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    return NotificationList(
        items=[NotificationRead.model_validate(n) for n in rows],
        unread=sum(1 for n in rows if not n.read),
    )


def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise EntityNotFoundException("Notification not found")
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
