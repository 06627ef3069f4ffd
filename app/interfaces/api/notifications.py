"""Notifications API routes — the caller's in-app notices."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.application.services import notification_service
from app.domain.models.user import User
from app.domain.schemas.notification import NotificationList, NotificationRead
from app.infrastructure.database import get_db
from app.interfaces.api.deps import get_current_user

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationList)
def list_notifications(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return notification_service.list_notifications(db, user.id)


@router.post("/read-all")
def mark_all_read(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"updated": notification_service.mark_all_read(db, user.id)}


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return NotificationRead.model_validate(notification_service.mark_read(db, user.id, notification_id))
