"""
Provider Repository Interface.
Defines specific data access operations for service providers.
"""

from datetime import datetime
from typing import Dict, List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.service_provider import ServiceProvider


class ProviderRepository(BaseRepository[ServiceProvider]):
    """Interface for ServiceProvider-specific operations."""

    def get_by_user_id(self, user_id: int) -> Optional[ServiceProvider]:
        """Get the provider row registered by a user, if any."""
        ...

    def list_by_status(self, status: Optional[str] = None) -> List[ServiceProvider]:
        """List providers newest first, optionally narrowed to one status."""
        ...

    def list_approved(self, category_id: Optional[int] = None) -> List[ServiceProvider]:
        """List approved providers, optionally within a category."""
        ...

    def count_by_category(self, category_id: int) -> int:
        """Count providers (any status) referencing a category."""
        ...

    def count_approved_by_category(self) -> Dict[int, int]:
        """Count approved providers per category id."""
        ...

    def count_by_status(self) -> Dict[str, int]:
        """Count providers per status."""
        ...

    def list_by_status_before(self, status: str, cutoff: datetime) -> List[ServiceProvider]:
        """Providers with a status created before cutoff."""
        ...
