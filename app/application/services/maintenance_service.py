"""Admin database management — statistics, export, cleanup and user lookup."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytz
import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import get_settings
from app.domain.models.category import Category
from app.domain.models.review import Review
from app.domain.models.service_provider import ProviderStatus, ServiceProvider
from app.domain.models.user import User
from app.domain.schemas.provider import ProviderRead
from app.domain.schemas.settings import DatabaseStats
from app.infrastructure.realtime import ChangeFeed, DELETE, get_change_feed
from app.infrastructure.repositories.provider_repository import SQLAlchemyProviderRepository
from app.infrastructure.storage import ObjectStorage, StorageError, get_storage

settings = get_settings()
tz = pytz.timezone(settings.TIMEZONE)
logger = structlog.get_logger(__name__)

PROVIDERS_TABLE = "service_providers"


def get_database_stats(db: Session) -> DatabaseStats:
    providers = SQLAlchemyProviderRepository(db, ServiceProvider)
    return DatabaseStats(
        providers=providers.count(),
        categories=db.query(Category).count(),
        reviews=db.query(Review).count(),
        providers_by_status=providers.count_by_status(),
    )


def export_filename() -> str:
    return f"providers_export_{datetime.now(tz).strftime('%Y-%m-%d')}.json"


def export_providers(db: Session) -> list[dict]:
    providers = SQLAlchemyProviderRepository(db, ServiceProvider).list_by_status()
    return [ProviderRead.model_validate(p).model_dump(mode="json") for p in providers]


def cleanup_rejected_providers(
    db: Session,
    feed: Optional[ChangeFeed] = None,
    storage: Optional[ObjectStorage] = None,
    retention_days: Optional[int] = None,
) -> int:
    """Delete rejected providers older than the retention window.

    Each removed row is announced on the change feed as a DELETE and its
    profile image and ID proof are removed from storage.
    """
    feed = feed or get_change_feed()
    storage = storage or get_storage()
    days = settings.REJECTED_RETENTION_DAYS if retention_days is None else retention_days
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)

    repo = SQLAlchemyProviderRepository(db, ServiceProvider)
    expired = repo.list_by_status_before(ProviderStatus.REJECTED.value, cutoff)
    records = [ProviderRead.model_validate(p).model_dump(mode="json") for p in expired]

    for record in records:
        repo.delete(record["id"])
        feed.publish(PROVIDERS_TABLE, DELETE, record)
        for url in (record.get("profile_image_url"), record.get("id_proof_url")):
            try:
                storage.remove_url(url)
            except (StorageError, OSError) as e:
                logger.warning("Could not remove provider file", url=url, error=str(e))

    logger.info("Rejected providers cleaned up", deleted=len(records), retention_days=days)
    return len(records)


def search_users(db: Session, q: Optional[str] = None, limit: int = 100) -> list[User]:
    query = db.query(User)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(User.email.ilike(pattern), User.name.ilike(pattern)))
    return query.order_by(User.created_at.desc(), User.id.desc()).limit(limit).all()
