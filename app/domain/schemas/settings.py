"""Pydantic schemas for platform settings and per-user preferences."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

FontSize = Literal["small", "medium", "large"]
Language = Literal["en", "hi", "mr", "bn", "ta", "te"]


class SystemSettings(BaseModel):
    site_name: str = "ServiceHub"
    maintenance_mode: bool = False
    allow_registration: bool = True
    max_file_size_mb: int = Field(10, ge=1, le=50)


class SystemSettingsUpdate(BaseModel):
    site_name: Optional[str] = None
    maintenance_mode: Optional[bool] = None
    allow_registration: Optional[bool] = None
    max_file_size_mb: Optional[int] = Field(None, ge=1, le=50)


class Location(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    label: Optional[str] = None


class PreferencesUpdate(BaseModel):
    dark_mode: Optional[bool] = None
    font_size: Optional[FontSize] = None
    language: Optional[Language] = None
    last_location: Optional[Location] = None
    geocoding_api_key: Optional[str] = None


class PreferencesRead(BaseModel):
    dark_mode: bool = False
    font_size: str = "medium"
    language: str = "en"
    last_location: Optional[Location] = None
    has_geocoding_api_key: bool = False
    # Document state derived from the preferences above
    theme: str = "light"
    root_font_size: str = "16px"


class DatabaseStats(BaseModel):
    providers: int
    categories: int
    reviews: int
    providers_by_status: dict[str, int]
