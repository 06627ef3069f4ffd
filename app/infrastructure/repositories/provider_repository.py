"""
SQLAlchemy Implementation of Provider Repository.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func

from app.domain.models.service_provider import ServiceProvider, ProviderStatus
from app.domain.repositories.provider_repository import ProviderRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyProviderRepository(SQLAlchemyRepository[ServiceProvider], ProviderRepository):
    """Provider repository implementation using SQLAlchemy."""

    def get_by_user_id(self, user_id: int) -> Optional[ServiceProvider]:
        return (
            self.db.query(ServiceProvider)
            .filter(ServiceProvider.user_id == user_id)
            .order_by(ServiceProvider.id.asc())
            .first()
        )

    def list_by_status(self, status: Optional[str] = None) -> List[ServiceProvider]:
        query = self.db.query(ServiceProvider)
        if status:
            query = query.filter(ServiceProvider.status == status)
        return query.order_by(ServiceProvider.created_at.desc(), ServiceProvider.id.desc()).all()

    def list_approved(self, category_id: Optional[int] = None) -> List[ServiceProvider]:
        query = self.db.query(ServiceProvider).filter(
            ServiceProvider.status == ProviderStatus.APPROVED.value
        )
        if category_id is not None:
            query = query.filter(ServiceProvider.service_category == category_id)
        return query.order_by(ServiceProvider.created_at.desc(), ServiceProvider.id.desc()).all()

    def count_by_category(self, category_id: int) -> int:
        return (
            self.db.query(func.count(ServiceProvider.id))
            .filter(ServiceProvider.service_category == category_id)
            .scalar()
            or 0
        )

    def count_approved_by_category(self) -> Dict[int, int]:
        results = (
            self.db.query(ServiceProvider.service_category, func.count(ServiceProvider.id).label("count"))
            .filter(ServiceProvider.status == ProviderStatus.APPROVED.value)
            .group_by(ServiceProvider.service_category)
            .all()
        )
        return {r.service_category: r.count for r in results}

    def count_by_status(self) -> Dict[str, int]:
        results = (
            self.db.query(ServiceProvider.status, func.count(ServiceProvider.id).label("count"))
            .group_by(ServiceProvider.status)
            .all()
        )
        counts = {s.value: 0 for s in ProviderStatus}
        counts.update({r.status: r.count for r in results})
        return counts

    def list_by_status_before(self, status: str, cutoff: datetime) -> List[ServiceProvider]:
        return (
            self.db.query(ServiceProvider)
            .filter(ServiceProvider.status == status, ServiceProvider.created_at < cutoff)
            .order_by(ServiceProvider.id.asc())
            .all()
        )
