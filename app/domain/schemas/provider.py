"""Pydantic schemas for service providers and the registration wizard."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.domain.schemas.category import CategoryRead
from app.domain.schemas.review import ReviewRead, RatingSummary


class ProviderApplication(BaseModel):
    """Text fields collected across the three wizard steps."""
    name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    service_category: Optional[int] = None
    experience: str = ""
    price_range: str = ""
    about: str = ""


class StepValidation(BaseModel):
    step: int
    complete: bool
    missing: list[str]
    next_step: Optional[int] = None


class ProviderRead(BaseModel):
    id: int
    user_id: int
    name: str
    phone: str
    address: Optional[str] = None
    city: str
    service_category: int
    experience: str
    price_range: Optional[str] = None
    about: str
    profile_image_url: Optional[str] = None
    id_proof_url: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProviderListing(BaseModel):
    """Public card shown on category and search pages."""
    id: int
    name: str
    city: str
    experience: str
    price_range: Optional[str] = None
    profile_image_url: Optional[str] = None
    category: Optional[CategoryRead] = None
    rating: RatingSummary


class ProviderProfile(ProviderListing):
    phone: str
    address: Optional[str] = None
    about: str
    reviews: list[ReviewRead]


class ProviderAdminDetail(ProviderRead):
    category: Optional[CategoryRead] = None
    allowed_actions: list[str]


class ProviderProfileUpdate(BaseModel):
    name: str
    phone: str


class ProviderPartition(BaseModel):
    pending: list[ProviderRead]
    approved: list[ProviderRead]
    rejected: list[ProviderRead]
    suspended: list[ProviderRead]


class ProviderDashboard(BaseModel):
    profile: ProviderRead
    rating: RatingSummary
    reviews: list[ReviewRead]
    rating_breakdown: dict[int, int]


class CategoryPage(BaseModel):
    """A category with its approved providers."""
    category: CategoryRead
    providers: list[ProviderListing]
