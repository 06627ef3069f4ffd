"""Geocoding service — key resolution and location lookups."""

from typing import Optional

from sqlalchemy.orm import Session

from app.application.services import preferences_service
from app.config import get_settings
from app.core.exceptions import BusinessRuleViolationException
from app.domain.models.user import User
from app.domain.schemas.geocoding import GeocodeResult
from app.domain.schemas.settings import Location
from app.infrastructure.geocoding_api import GeocodingClient

settings = get_settings()


def resolve_api_key(header_key: Optional[str], user: Optional[User]) -> str:
    """Header first, then the caller's stored key, then the server default."""
    key = (
        (header_key or "").strip()
        or preferences_service.get_geocoding_api_key(user)
        or settings.GEOCODING_API_KEY
    )
    if not key:
        raise BusinessRuleViolationException("Geocoding API key not configured")
    return key


async def forward(address: str, api_key: str) -> GeocodeResult:
    if not address or not address.strip():
        raise BusinessRuleViolationException("Address is required")
    return await GeocodingClient(api_key).forward(address.strip())


async def reverse(db: Session, user: Optional[User], lat: float, lng: float, api_key: str) -> GeocodeResult:
    result = await GeocodingClient(api_key).reverse(lat, lng)
    if user is not None:
        preferences_service.set_last_location(
            db, user, Location(lat=lat, lng=lng, label=result.formatted)
        )
    return result
