"""Service provider listing — maps to the 'service_providers' table."""

import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.infrastructure.database import Base


class ProviderStatus(str, enum.Enum):
    """Marketplace visibility of a provider listing."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class ServiceProvider(Base):
    __tablename__ = "service_providers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # One row per user is checked on registration, not enforced here
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Step 1: personal information
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=False)
    address = Column(String(500), nullable=True)
    city = Column(String(200), nullable=False, index=True)
    profile_image_url = Column(String(1000), nullable=True)

    # Step 2: service details
    service_category = Column(Integer, ForeignKey("service_categories.id"), nullable=False, index=True)
    experience = Column(String(20), nullable=False)  # <1, 1-3, 3-5, 5-10, 10+
    price_range = Column(String(100), nullable=True)
    about = Column(Text, nullable=False)

    # Step 3: verification
    id_proof_url = Column(String(1000), nullable=True)

    status = Column(String(20), nullable=False, default=ProviderStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", lazy="joined")
    category = relationship("Category", lazy="joined")

    def __repr__(self):
        return f"<ServiceProvider {self.name} - {self.status}>"
