"""Pydantic schemas for reviews."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating 1-5")
    comment: Optional[str] = None


class ReviewRead(BaseModel):
    id: int
    provider_id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RatingSummary(BaseModel):
    average: float = 0.0
    count: int = 0
