"""
Review Repository Interface.
"""

from typing import Dict, Iterable, List, Tuple

from app.domain.repositories.base import BaseRepository
from app.domain.models.review import Review


class ReviewRepository(BaseRepository[Review]):
    """Interface for Review-specific operations."""

    def list_for_provider(self, provider_id: int) -> List[Review]:
        """List a provider's reviews, newest first."""
        ...

    def summaries(self, provider_ids: Iterable[int]) -> Dict[int, Tuple[float, int]]:
        """Average rating and review count per provider id."""
        ...

    def rating_breakdown(self, provider_id: int) -> Dict[int, int]:
        """Number of reviews per star value (1-5)."""
        ...
