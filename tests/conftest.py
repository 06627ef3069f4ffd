import os
import tempfile

STORAGE_DIR = tempfile.mkdtemp(prefix="servicehub-storage-")
ADMIN_EMAIL = "owner@servicehub.test"

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["STORAGE_DIR"] = STORAGE_DIR
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["ADMIN_EMAILS"] = f'["{ADMIN_EMAIL}"]'
os.environ["SECRET_KEY"] = "test-secret"
os.environ["MAIL_API_URL"] = ""
os.environ["GEOCODING_API_KEY"] = ""
os.environ["PUBLIC_BASE_URL"] = "http://testserver"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.application.services.auth_service import create_access_token, create_user
from app.domain.models.category import Category
from app.domain.models.service_provider import ProviderStatus, ServiceProvider
from app.infrastructure.database import Base, get_db

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user) -> dict:
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(db):
    return create_user(db, name="Asha Rao", email="asha@example.com", password="secret123", phone="9876500000")


@pytest.fixture
def other_customer(db):
    return create_user(db, name="Vikram Singh", email="vikram@example.com", password="secret123")


@pytest.fixture
def admin(db):
    return create_user(db, name="Admin", email="admin@example.com", password="secret123", role="admin")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def category(db):
    cat = Category(name="Home Cleaning", slug="home-cleaning")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture
def make_provider(db, category):
    def _make(user, status=ProviderStatus.APPROVED.value, **overrides):
        data = {
            "user_id": user.id,
            "name": user.name,
            "phone": "9876543210",
            "address": "12 MG Road",
            "city": "Pune",
            "service_category": category.id,
            "experience": "3-5",
            "price_range": "500-1000",
            "about": "Deep cleaning for homes and offices",
            "id_proof_url": "http://testserver/storage/provider-images/id_proofs/x.png",
            "status": status,
        }
        data.update(overrides)
        provider = ServiceProvider(**data)
        db.add(provider)
        db.commit()
        db.refresh(provider)
        return provider

    return _make


class RecordingFeed:
    """Collects published changes instead of delivering them."""

    def __init__(self):
        self.events = []

    def publish(self, table, event, record=None):
        self.events.append((table, event, record or {}))
        return 0


@pytest.fixture
def feed():
    return RecordingFeed()
