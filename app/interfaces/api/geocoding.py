"""Geocoding API routes — address search and reverse lookup."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from app.application.services import geocoding_service
from app.domain.models.user import User
from app.domain.schemas.geocoding import GeocodeResult
from app.interfaces.api.deps import get_optional_user
from app.interfaces.deps import get_db

router = APIRouter(prefix="/api/geocoding", tags=["Geocoding"])


@router.get("/forward", response_model=GeocodeResult)
async def forward_geocode(
    q: str = Query(..., min_length=1),
    x_geocoding_key: Optional[str] = Header(None),
    user: Optional[User] = Depends(get_optional_user),
):
    api_key = geocoding_service.resolve_api_key(x_geocoding_key, user)
    return await geocoding_service.forward(q, api_key)


@router.get("/reverse", response_model=GeocodeResult)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    x_geocoding_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    api_key = geocoding_service.resolve_api_key(x_geocoding_key, user)
    return await geocoding_service.reverse(db, user, lat, lng, api_key)
