"""Platform-wide settings stored in the system_settings table."""

import structlog
from sqlalchemy.orm import Session

from app.core.exceptions import ServiceUnavailableException
from app.domain.models.system_setting import SystemSetting
from app.domain.schemas.settings import SystemSettings, SystemSettingsUpdate

logger = structlog.get_logger(__name__)

APP_SETTINGS_KEY = "app_settings"


def get_system_settings(db: Session) -> SystemSettings:
    """Stored settings merged over the defaults."""
    row = db.query(SystemSetting).filter(SystemSetting.key == APP_SETTINGS_KEY).first()
    if row is None:
        return SystemSettings()
    return SystemSettings(**{**SystemSettings().model_dump(), **(row.value or {})})


def update_system_settings(db: Session, body: SystemSettingsUpdate) -> SystemSettings:
    """Upsert the app_settings row with the provided fields."""
    merged = get_system_settings(db).model_copy(update=body.model_dump(exclude_unset=True, exclude_none=True))

    row = db.query(SystemSetting).filter(SystemSetting.key == APP_SETTINGS_KEY).first()
    if row is None:
        row = SystemSetting(key=APP_SETTINGS_KEY, value=merged.model_dump())
        db.add(row)
    else:
        row.value = merged.model_dump()
    db.commit()

    logger.info("System settings saved", **merged.model_dump())
    return merged


def ensure_writable(db: Session) -> None:
    """Refuse marketplace writes while maintenance mode is on."""
    if get_system_settings(db).maintenance_mode:
        raise ServiceUnavailableException("The marketplace is under maintenance. Please try again later.")
