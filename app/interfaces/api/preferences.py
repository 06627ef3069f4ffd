"""Preferences API routes — per-user theme, font size, language and location."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.application.services.preferences_service import get_preferences, update_preferences
from app.domain.models.user import User
from app.domain.schemas.settings import PreferencesRead, PreferencesUpdate
from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import get_db

router = APIRouter(prefix="/api/preferences", tags=["Preferences"])


@router.get("", response_model=PreferencesRead)
def read_preferences(user: User = Depends(get_current_user)):
    return get_preferences(user)


@router.put("", response_model=PreferencesRead)
def save_preferences(
    body: PreferencesUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return update_preferences(db, user, body)
