"""Admin API routes — gate check, provider approvals, database management, users and settings."""

import json
from datetime import datetime, timezone
from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.application.services import maintenance_service, provider_service
from app.application.services.admin_gate import AdminAccess
from app.application.services.auth_service import request_password_reset
from app.application.services.settings_service import get_system_settings, update_system_settings
from app.core.exceptions import EntityNotFoundException
from app.domain.models.user import User
from app.domain.repositories.provider_repository import ProviderRepository
from app.domain.schemas.auth import UserRead
from app.domain.schemas.provider import ProviderAdminDetail, ProviderPartition, ProviderRead
from app.domain.schemas.settings import DatabaseStats, SystemSettings, SystemSettingsUpdate
from app.infrastructure.mail_api import MailClient
from app.infrastructure.realtime import ChangeFeed
from app.infrastructure.storage import ObjectStorage
from app.interfaces.api.deps import require_admin
from app.interfaces.deps import get_db, get_feed, get_mailer, get_object_storage, get_provider_repository

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

ProviderAction = Literal["approve", "reject", "suspend"]


@router.get("/access")
def check_access(user: User = Depends(require_admin)):
    return {"state": AdminAccess.ADMIN.value, "user": UserRead.model_validate(user)}


@router.get("/stats", response_model=DatabaseStats)
def get_stats(db: Session = Depends(get_db)):
    return maintenance_service.get_database_stats(db)


# --- Providers ---

@router.get("/providers", response_model=Union[ProviderPartition, list[ProviderRead]])
def list_providers(
    status: Optional[str] = None,
    providers: ProviderRepository = Depends(get_provider_repository),
):
    if status:
        return provider_service.list_for_admin(providers, status)
    return provider_service.partition_by_status(providers)


@router.get("/providers/export")
def export_providers(db: Session = Depends(get_db)):
    payload = {
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "providers": maintenance_service.export_providers(db),
    }
    return Response(
        content=json.dumps(payload, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{maintenance_service.export_filename()}"'},
    )


@router.get("/providers/{provider_id}", response_model=ProviderAdminDetail)
def get_provider(
    provider_id: int,
    providers: ProviderRepository = Depends(get_provider_repository),
):
    return provider_service.get_admin_detail(providers, provider_id)


@router.post("/providers/{provider_id}/{action}", response_model=ProviderRead)
def apply_provider_action(
    provider_id: int,
    action: ProviderAction,
    db: Session = Depends(get_db),
    providers: ProviderRepository = Depends(get_provider_repository),
    feed: ChangeFeed = Depends(get_feed),
):
    provider = provider_service.apply_action(db, providers, feed, provider_id, action)
    return ProviderRead.model_validate(provider)


# --- Database management ---

@router.post("/cleanup")
def cleanup(
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_feed),
    storage: ObjectStorage = Depends(get_object_storage),
):
    deleted = maintenance_service.cleanup_rejected_providers(db, feed=feed, storage=storage)
    return {"deleted": deleted}


# --- Users ---

@router.get("/users", response_model=list[UserRead])
def list_users(q: Optional[str] = None, db: Session = Depends(get_db)):
    return [UserRead.model_validate(u) for u in maintenance_service.search_users(db, q)]


@router.post("/users/{user_id}/password-reset", status_code=202)
async def send_password_reset(
    user_id: int,
    db: Session = Depends(get_db),
    mailer: MailClient = Depends(get_mailer),
):
    user = db.get(User, user_id)
    if not user:
        raise EntityNotFoundException("User not found")
    await request_password_reset(db, user.email, mailer)
    return {"message": f"Password reset sent to {user.email}"}


# --- Settings ---

@router.get("/settings", response_model=SystemSettings)
def get_settings_route(db: Session = Depends(get_db)):
    return get_system_settings(db)


@router.put("/settings", response_model=SystemSettings)
def update_settings_route(body: SystemSettingsUpdate, db: Session = Depends(get_db)):
    return update_system_settings(db, body)
