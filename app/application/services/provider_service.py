"""Provider service — registration wizard, admin status workflow and marketplace listings."""

from typing import Optional

import structlog
from sqlalchemy.orm import Session

from app.application.services import notification_service, review_service
from app.application.services.settings_service import ensure_writable, get_system_settings
from app.core.exceptions import (
    AppError,
    BusinessRuleViolationException,
    ConflictException,
    EntityNotFoundException,
    ForbiddenException,
)
from app.domain.models.service_provider import ProviderStatus, ServiceProvider
from app.domain.models.user import User
from app.domain.repositories.category_repository import CategoryRepository
from app.domain.repositories.provider_repository import ProviderRepository
from app.domain.repositories.review_repository import ReviewRepository
from app.domain.schemas.category import CategoryRead
from app.domain.schemas.provider import (
    ProviderAdminDetail,
    ProviderApplication,
    ProviderDashboard,
    ProviderListing,
    ProviderPartition,
    ProviderProfile,
    ProviderProfileUpdate,
    ProviderRead,
    StepValidation,
)
from app.domain.schemas.review import ReviewRead
from app.infrastructure.realtime import ChangeFeed, INSERT, UPDATE
from app.infrastructure.storage import (
    PROFILES_BUCKET,
    PROVIDER_IMAGES_BUCKET,
    ImagePayload,
    ObjectStorage,
    StorageError,
    build_object_path,
    store_image,
    validate_image,
)

logger = structlog.get_logger(__name__)

TABLE = "service_providers"

EXPERIENCE_OPTIONS = ("<1", "1-3", "3-5", "5-10", "10+")

STEP_FIELDS = {
    1: ("name", "phone", "city"),
    2: ("service_category", "experience", "about"),
    3: ("id_proof",),
}
LAST_STEP = 3

# current status -> {action: new status}
ALLOWED_ACTIONS = {
    ProviderStatus.PENDING.value: {
        "approve": ProviderStatus.APPROVED.value,
        "reject": ProviderStatus.REJECTED.value,
    },
    ProviderStatus.APPROVED.value: {"suspend": ProviderStatus.SUSPENDED.value},
    ProviderStatus.REJECTED.value: {"approve": ProviderStatus.APPROVED.value},
    ProviderStatus.SUSPENDED.value: {"approve": ProviderStatus.APPROVED.value},
}

SORT_OPTIONS = ("newest", "rating", "name")


# --- Registration wizard ---

def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_step(step: int, data: ProviderApplication, has_id_proof: bool = False) -> list[str]:
    """Required fields of a step that are still empty."""
    if step not in STEP_FIELDS:
        raise EntityNotFoundException(f"Unknown registration step: {step}")

    values = data.model_dump()
    values["id_proof"] = True if has_id_proof else None
    return [field for field in STEP_FIELDS[step] if _is_blank(values.get(field))]


def check_step(step: int, data: ProviderApplication, has_id_proof: bool = False) -> StepValidation:
    missing = validate_step(step, data, has_id_proof)
    complete = not missing
    next_step = step + 1 if complete and step < LAST_STEP else None
    return StepValidation(step=step, complete=complete, missing=missing, next_step=next_step)


def _validate_application(data: ProviderApplication, has_id_proof: bool) -> None:
    missing = {}
    for step in STEP_FIELDS:
        fields = validate_step(step, data, has_id_proof)
        if fields:
            missing[step] = fields
    if missing:
        raise BusinessRuleViolationException(
            "Please fill in all required fields",
            details={"missing": {str(step): fields for step, fields in missing.items()}},
        )
    if data.experience.strip() not in EXPERIENCE_OPTIONS:
        raise BusinessRuleViolationException(
            "Invalid experience range",
            details={"allowed": list(EXPERIENCE_OPTIONS)},
        )


def _record(provider: ServiceProvider) -> dict:
    return ProviderRead.model_validate(provider).model_dump(mode="json")


def submit_application(
    db: Session,
    providers: ProviderRepository,
    categories: CategoryRepository,
    storage: ObjectStorage,
    feed: ChangeFeed,
    user: User,
    form: ProviderApplication,
    id_proof: Optional[ImagePayload],
    profile_image: Optional[ImagePayload] = None,
) -> ServiceProvider:
    """Create a pending provider row from a completed wizard."""
    ensure_writable(db)
    _validate_application(form, has_id_proof=id_proof is not None)

    if not categories.get_by_id(form.service_category):
        raise EntityNotFoundException("Service category not found")

    if providers.get_by_user_id(user.id):
        raise ConflictException("You have already registered as a service provider")

    max_mb = get_system_settings(db).max_file_size_mb
    if profile_image is not None:
        validate_image(profile_image.content_type, len(profile_image.content), max_mb)
    validate_image(id_proof.content_type, len(id_proof.content), max_mb)

    uploaded = []
    try:
        profile_image_url = None
        if profile_image is not None:
            path = build_object_path("profile_images", user.id, profile_image.filename)
            storage.upload(PROFILES_BUCKET, path, profile_image.content)
            uploaded.append((PROFILES_BUCKET, path))
            profile_image_url = storage.public_url(PROFILES_BUCKET, path)

        path = build_object_path("id_proofs", user.id, id_proof.filename)
        storage.upload(PROVIDER_IMAGES_BUCKET, path, id_proof.content)
        id_proof_url = storage.public_url(PROVIDER_IMAGES_BUCKET, path)
    except StorageError as e:
        logger.error("Provider upload failed", user_id=user.id, error=str(e))
        for bucket, stored_path in uploaded:
            storage.remove(bucket, stored_path)
        raise AppError("Failed to upload file") from e

    provider = providers.create(
        {
            "user_id": user.id,
            "name": form.name.strip(),
            "phone": form.phone.strip(),
            "address": form.address.strip() or None,
            "city": form.city.strip(),
            "profile_image_url": profile_image_url,
            "service_category": form.service_category,
            "experience": form.experience.strip(),
            "price_range": form.price_range.strip() or None,
            "about": form.about.strip(),
            "id_proof_url": id_proof_url,
            "status": ProviderStatus.PENDING.value,
        }
    )

    notification_service.notify_application_received(db, user.id)
    feed.publish(TABLE, INSERT, _record(provider))
    logger.info("Provider application submitted", provider_id=provider.id, user_id=user.id)
    return provider


# --- Admin workflow ---

def allowed_actions(status: str) -> list[str]:
    return list(ALLOWED_ACTIONS.get(status, {}))


def apply_action(db: Session, providers: ProviderRepository, feed: ChangeFeed,
                 provider_id: int, action: str) -> ServiceProvider:
    provider = providers.get_by_id(provider_id)
    if not provider:
        raise EntityNotFoundException("Service provider not found")

    new_status = ALLOWED_ACTIONS.get(provider.status, {}).get(action)
    if new_status is None:
        raise BusinessRuleViolationException(
            f"Cannot {action} a provider that is {provider.status}",
            details={"status": provider.status, "allowed_actions": allowed_actions(provider.status)},
        )

    old_status = provider.status
    provider = providers.update(provider, {"status": new_status})

    notification_service.notify_status_change(db, provider.user_id, new_status)
    feed.publish(TABLE, UPDATE, _record(provider))
    logger.info(
        "Provider status changed",
        provider_id=provider.id,
        action=action,
        old_status=old_status,
        new_status=new_status,
    )
    return provider


def partition_by_status(providers: ProviderRepository) -> ProviderPartition:
    groups = {status.value: [] for status in ProviderStatus}
    for provider in providers.list_by_status():
        groups.setdefault(provider.status, []).append(ProviderRead.model_validate(provider))
    return ProviderPartition(**groups)


def list_for_admin(providers: ProviderRepository, status: str) -> list[ProviderRead]:
    if status not in ALLOWED_ACTIONS:
        raise BusinessRuleViolationException(
            "Unknown provider status",
            details={"allowed": [s.value for s in ProviderStatus]},
        )
    return [ProviderRead.model_validate(p) for p in providers.list_by_status(status)]


def get_admin_detail(providers: ProviderRepository, provider_id: int) -> ProviderAdminDetail:
    provider = providers.get_by_id(provider_id)
    if not provider:
        raise EntityNotFoundException("Service provider not found")
    return ProviderAdminDetail(
        **ProviderRead.model_validate(provider).model_dump(),
        category=CategoryRead.model_validate(provider.category) if provider.category else None,
        allowed_actions=allowed_actions(provider.status),
    )


# --- Marketplace ---

def _listing(provider: ServiceProvider, summaries: dict) -> dict:
    return {
        "id": provider.id,
        "name": provider.name,
        "city": provider.city,
        "experience": provider.experience,
        "price_range": provider.price_range,
        "profile_image_url": provider.profile_image_url,
        "category": CategoryRead.model_validate(provider.category) if provider.category else None,
        "rating": summaries[provider.id],
    }


def search_approved(
    providers: ProviderRepository,
    reviews: ReviewRepository,
    category_id: Optional[int] = None,
    q: Optional[str] = None,
    city: Optional[str] = None,
    sort: str = "newest",
    limit: Optional[int] = None,
) -> list[ProviderListing]:
    if sort not in SORT_OPTIONS:
        raise BusinessRuleViolationException("Unknown sort order", details={"allowed": list(SORT_OPTIONS)})

    rows = providers.list_approved(category_id)

    if q and q.strip():
        needle = q.strip().lower()
        rows = [
            p for p in rows
            if needle in p.name.lower() or needle in p.city.lower() or needle in (p.about or "").lower()
        ]
    if city and city.strip():
        wanted = city.strip().lower()
        rows = [p for p in rows if wanted in p.city.lower()]

    summaries = review_service.summarize(reviews, [p.id for p in rows])

    if sort == "rating":
        rows.sort(key=lambda p: (summaries[p.id].average, summaries[p.id].count), reverse=True)
    elif sort == "name":
        rows.sort(key=lambda p: p.name.lower())

    if limit is not None:
        rows = rows[:limit]
    return [ProviderListing(**_listing(p, summaries)) for p in rows]


def get_public_profile(providers: ProviderRepository, reviews: ReviewRepository, provider_id: int) -> ProviderProfile:
    provider = review_service.get_approved_provider(providers, provider_id)
    summaries = review_service.summarize(reviews, [provider.id])
    return ProviderProfile(
        **_listing(provider, summaries),
        phone=provider.phone,
        address=provider.address,
        about=provider.about,
        reviews=[ReviewRead.model_validate(r) for r in reviews.list_for_provider(provider.id)],
    )


# --- Self-service ---

def get_own_provider(providers: ProviderRepository, user: User) -> ServiceProvider:
    provider = providers.get_by_user_id(user.id)
    if not provider:
        raise EntityNotFoundException("You have not registered as a service provider")
    return provider


def _dashboard(provider: ServiceProvider, reviews: ReviewRepository) -> ProviderDashboard:
    return ProviderDashboard(
        profile=ProviderRead.model_validate(provider),
        rating=review_service.summarize(reviews, [provider.id])[provider.id],
        reviews=[ReviewRead.model_validate(r) for r in reviews.list_for_provider(provider.id)],
        rating_breakdown=reviews.rating_breakdown(provider.id),
    )


def get_own_overview(providers: ProviderRepository, reviews: ReviewRepository, user: User) -> ProviderDashboard:
    return _dashboard(get_own_provider(providers, user), reviews)


def get_dashboard(providers: ProviderRepository, reviews: ReviewRepository, user: User) -> ProviderDashboard:
    provider = providers.get_by_user_id(user.id)
    if not provider or provider.status != ProviderStatus.APPROVED.value:
        raise ForbiddenException(
            "Not a Service Provider",
            details={"description": "You need to be an approved service provider to access this page."},
        )
    return _dashboard(provider, reviews)


def update_own_profile(db: Session, providers: ProviderRepository, feed: ChangeFeed,
                       user: User, body: ProviderProfileUpdate) -> ServiceProvider:
    ensure_writable(db)
    name, phone = body.name.strip(), body.phone.strip()
    if not name or not phone:
        raise BusinessRuleViolationException("Name and phone are required")

    provider = providers.update(get_own_provider(providers, user), {"name": name, "phone": phone})
    feed.publish(TABLE, UPDATE, _record(provider))
    logger.info("Provider profile updated", provider_id=provider.id)
    return provider


def update_own_photo(db: Session, providers: ProviderRepository, storage: ObjectStorage,
                     feed: ChangeFeed, user: User, image: ImagePayload) -> ServiceProvider:
    ensure_writable(db)
    provider = get_own_provider(providers, user)
    max_mb = get_system_settings(db).max_file_size_mb
    try:
        url = store_image(storage, PROFILES_BUCKET, "profile_images", user.id, image, max_mb)
    except StorageError as e:
        logger.error("Profile photo upload failed", user_id=user.id, error=str(e))
        raise AppError("Failed to upload file") from e

    provider = providers.update(provider, {"profile_image_url": url})
    feed.publish(TABLE, UPDATE, _record(provider))
    return provider
