"""Pydantic schemas for geocoding lookups."""

from typing import Optional

from pydantic import BaseModel


class GeocodeResult(BaseModel):
    lat: float
    lng: float
    formatted: Optional[str] = None
