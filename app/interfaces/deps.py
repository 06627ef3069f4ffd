"""
API Dependencies.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.infrastructure.database import get_db
from app.domain.models.category import Category
from app.domain.models.review import Review
from app.domain.models.service_provider import ServiceProvider
from app.domain.repositories.category_repository import CategoryRepository
from app.domain.repositories.provider_repository import ProviderRepository
from app.domain.repositories.review_repository import ReviewRepository
from app.infrastructure.mail_api import MailClient, get_mail_client
from app.infrastructure.realtime import ChangeFeed, get_change_feed
from app.infrastructure.repositories.category_repository import SQLAlchemyCategoryRepository
from app.infrastructure.repositories.provider_repository import SQLAlchemyProviderRepository
from app.infrastructure.repositories.review_repository import SQLAlchemyReviewRepository
from app.infrastructure.storage import ObjectStorage, get_storage

__all__ = [
    "get_db",
    "get_provider_repository",
    "get_category_repository",
    "get_review_repository",
    "get_feed",
    "get_object_storage",
    "get_mailer",
]


def get_provider_repository(db: Session = Depends(get_db)) -> ProviderRepository:
    """Get provider repository instance."""
    return SQLAlchemyProviderRepository(db, ServiceProvider)


def get_category_repository(db: Session = Depends(get_db)) -> CategoryRepository:
    """Get category repository instance."""
    return SQLAlchemyCategoryRepository(db, Category)


def get_review_repository(db: Session = Depends(get_db)) -> ReviewRepository:
    """Get review repository instance."""
    return SQLAlchemyReviewRepository(db, Review)


def get_feed() -> ChangeFeed:
    return get_change_feed()


def get_object_storage() -> ObjectStorage:
    return get_storage()


def get_mailer() -> MailClient:
    return get_mail_client()
