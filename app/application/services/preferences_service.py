"""Per-user UI preferences stored on users.preferences."""

from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from app.domain.models.user import User
from app.domain.schemas.settings import Location, PreferencesRead, PreferencesUpdate

ROOT_FONT_SIZES = {"small": "14px", "medium": "16px", "large": "18px"}
DEFAULT_ROOT_FONT_SIZE = "16px"


def root_font_size(font_size: str) -> str:
    return ROOT_FONT_SIZES.get(font_size, DEFAULT_ROOT_FONT_SIZE)


def _stored(user: User) -> dict:
    return dict(user.preferences or {})


def get_preferences(user: User) -> PreferencesRead:
    data = _stored(user)
    dark_mode = bool(data.get("dark_mode", False))
    font_size = data.get("font_size") or "medium"
    location = data.get("last_location")
    return PreferencesRead(
        dark_mode=dark_mode,
        font_size=font_size,
        language=data.get("language") or "en",
        last_location=Location(**location) if location else None,
        has_geocoding_api_key=bool(data.get("geocoding_api_key")),
        theme="dark" if dark_mode else "light",
        root_font_size=root_font_size(font_size),
    )


def _save(db: Session, user: User, data: dict) -> None:
    user.preferences = data
    flag_modified(user, "preferences")
    db.commit()
    db.refresh(user)


def update_preferences(db: Session, user: User, body: PreferencesUpdate) -> PreferencesRead:
    data = _stored(user)
    changes = body.model_dump(exclude_unset=True, mode="json")
    if "geocoding_api_key" in changes:
        # An empty key clears the stored one
        changes["geocoding_api_key"] = (changes["geocoding_api_key"] or "").strip() or None
    data.update(changes)
    _save(db, user, data)
    return get_preferences(user)


def set_last_location(db: Session, user: User, location: Location) -> None:
    data = _stored(user)
    data["last_location"] = location.model_dump(mode="json")
    _save(db, user, data)


def get_geocoding_api_key(user: Optional[User]) -> Optional[str]:
    if user is None:
        return None
    return _stored(user).get("geocoding_api_key") or None
