"""
SQLAlchemy Implementation of Category Repository.
"""

from typing import List, Optional

from app.domain.models.category import Category
from app.domain.repositories.category_repository import CategoryRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyCategoryRepository(SQLAlchemyRepository[Category], CategoryRepository):
    """Category repository implementation using SQLAlchemy."""

    def list_ordered(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.name.asc()).all()

    def get_by_slug(self, slug: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.slug == slug).first()
