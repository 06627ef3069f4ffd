"""
Category Repository Interface.
"""

from typing import List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.category import Category


class CategoryRepository(BaseRepository[Category]):
    """Interface for Category-specific operations."""

    def list_ordered(self) -> List[Category]:
        """List categories ordered by name."""
        ...

    def get_by_slug(self, slug: str) -> Optional[Category]:
        """Get a category by its slug."""
        ...
