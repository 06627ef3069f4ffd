"""Pydantic schemas for in-app notifications."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class NotificationRead(BaseModel):
    id: int
    title: str
    message: str
    type: str
    read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NotificationList(BaseModel):
    items: list[NotificationRead]
    unread: int
