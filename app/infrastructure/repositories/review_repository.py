"""
SQLAlchemy Implementation of Review Repository.
"""

from typing import Dict, Iterable, List, Tuple

from sqlalchemy import func

from app.domain.models.review import Review
from app.domain.repositories.review_repository import ReviewRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyReviewRepository(SQLAlchemyRepository[Review], ReviewRepository):
    """Review repository implementation using SQLAlchemy."""

    def list_for_provider(self, provider_id: int) -> List[Review]:
        return (
            self.db.query(Review)
            .filter(Review.provider_id == provider_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    def summaries(self, provider_ids: Iterable[int]) -> Dict[int, Tuple[float, int]]:
        ids = list(provider_ids)
        if not ids:
            return {}
        results = (
            self.db.query(
                Review.provider_id,
                func.avg(Review.rating).label("average"),
                func.count(Review.id).label("count"),
            )
            .filter(Review.provider_id.in_(ids))
            .group_by(Review.provider_id)
            .all()
        )
        return {r.provider_id: (float(r.average), r.count) for r in results}

    def rating_breakdown(self, provider_id: int) -> Dict[int, int]:
        results = (
            self.db.query(Review.rating, func.count(Review.id).label("count"))
            .filter(Review.provider_id == provider_id)
            .group_by(Review.rating)
            .all()
        )
        breakdown = {star: 0 for star in range(1, 6)}
        breakdown.update({r.rating: r.count for r in results})
        return breakdown
