"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.infrastructure.database import engine, Base
from app.infrastructure.storage import get_storage
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import (
    AppError,
    global_exception_handler,
    not_found_handler,
    validation_exception_handler,
)

# Import all models so SQLAlchemy knows about them
from app.domain.models.user import User
from app.domain.models.category import Category
from app.domain.models.service_provider import ServiceProvider
from app.domain.models.review import Review
from app.domain.models.system_setting import SystemSetting
from app.domain.models.notification import Notification
from app.domain.models.password_reset import PasswordResetToken

# Import routers
from app.interfaces.api.auth import router as auth_router
from app.interfaces.api.providers import router as providers_router
from app.interfaces.api.categories import (
    router as categories_router,
    services_router,
    admin_router as admin_categories_router,
)
from app.interfaces.api.admin import router as admin_router
from app.interfaces.api.preferences import router as preferences_router
from app.interfaces.api.geocoding import router as geocoding_router
from app.interfaces.api.notifications import router as notifications_router
from app.interfaces.api.realtime import router as realtime_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    # Startup
    logger.info("Starting ServiceHub...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only — use Alembic in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    get_storage().ensure_buckets()

    if settings.SCHEDULER_ENABLED:
        from app.scheduler.jobs import start_scheduler
        start_scheduler()

    yield

    # Shutdown
    if settings.SCHEDULER_ENABLED:
        from app.scheduler.jobs import stop_scheduler
        stop_scheduler()
    logger.info("ServiceHub stopped")


app = FastAPI(
    title="ServiceHub — Local Services Marketplace",
    description="API Backend — service categories, provider profiles, reviews and admin approvals",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging)
setup_middleware(app)

# Global Exception Handling
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(404, not_found_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS is added last so it runs first on every request
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded images, read-only
app.mount("/storage", StaticFiles(directory=get_storage().root, check_dir=False), name="storage")

# Include routers
app.include_router(auth_router)
app.include_router(providers_router)
app.include_router(categories_router)
app.include_router(services_router)
app.include_router(admin_categories_router)
app.include_router(admin_router)
app.include_router(preferences_router)
app.include_router(geocoding_router)
app.include_router(notifications_router)
app.include_router(realtime_router)


@app.get("/")
def root():
    return {
        "name": "ServiceHub",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
