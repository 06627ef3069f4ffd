"""Provider API routes — registration wizard, public profiles, reviews and self-service."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.application.services import provider_service, review_service
from app.application.services.settings_service import ensure_writable
from app.domain.models.user import User
from app.domain.repositories.category_repository import CategoryRepository
from app.domain.repositories.provider_repository import ProviderRepository
from app.domain.repositories.review_repository import ReviewRepository
from app.domain.schemas.provider import (
    ProviderApplication,
    ProviderDashboard,
    ProviderListing,
    ProviderProfile,
    ProviderProfileUpdate,
    ProviderRead,
    StepValidation,
)
from app.domain.schemas.review import ReviewCreate, ReviewRead
from app.infrastructure.realtime import ChangeFeed
from app.infrastructure.storage import ImagePayload, ObjectStorage
from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import (
    get_category_repository,
    get_db,
    get_feed,
    get_object_storage,
    get_provider_repository,
    get_review_repository,
)

router = APIRouter(prefix="/api/providers", tags=["Providers"])


async def _read_upload(file: Optional[UploadFile]) -> Optional[ImagePayload]:
    if file is None or not file.filename:
        return None
    return ImagePayload(filename=file.filename, content_type=file.content_type, content=await file.read())


# --- Registration wizard ---

@router.post("/application/steps/{step}", response_model=StepValidation)
async def validate_application_step(
    step: int,
    name: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    city: str = Form(""),
    service_category: Optional[int] = Form(None),
    experience: str = Form(""),
    price_range: str = Form(""),
    about: str = Form(""),
    id_proof: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
):
    form = ProviderApplication(
        name=name, phone=phone, address=address, city=city, service_category=service_category,
        experience=experience, price_range=price_range, about=about,
    )
    has_id_proof = id_proof is not None and bool(id_proof.filename)
    return provider_service.check_step(step, form, has_id_proof=has_id_proof)


@router.post("/application", response_model=ProviderRead, status_code=status.HTTP_201_CREATED)
async def submit_application(
    name: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    city: str = Form(""),
    service_category: Optional[int] = Form(None),
    experience: str = Form(""),
    price_range: str = Form(""),
    about: str = Form(""),
    profile_image: Optional[UploadFile] = File(None),
    id_proof: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    providers: ProviderRepository = Depends(get_provider_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    storage: ObjectStorage = Depends(get_object_storage),
    feed: ChangeFeed = Depends(get_feed),
    user: User = Depends(get_current_user),
):
    form = ProviderApplication(
        name=name, phone=phone, address=address, city=city, service_category=service_category,
        experience=experience, price_range=price_range, about=about,
    )
    provider = provider_service.submit_application(
        db, providers, categories, storage, feed, user, form,
        id_proof=await _read_upload(id_proof),
        profile_image=await _read_upload(profile_image),
    )
    return ProviderRead.model_validate(provider)


# --- Self-service (declared before /{provider_id}) ---

@router.get("/me", response_model=ProviderDashboard)
def get_my_provider(
    providers: ProviderRepository = Depends(get_provider_repository),
    reviews: ReviewRepository = Depends(get_review_repository),
    user: User = Depends(get_current_user),
):
    return provider_service.get_own_overview(providers, reviews, user)


@router.patch("/me", response_model=ProviderRead)
def update_my_provider(
    body: ProviderProfileUpdate,
    db: Session = Depends(get_db),
    providers: ProviderRepository = Depends(get_provider_repository),
    feed: ChangeFeed = Depends(get_feed),
    user: User = Depends(get_current_user),
):
    provider = provider_service.update_own_profile(db, providers, feed, user, body)
    return ProviderRead.model_validate(provider)


@router.post("/me/photo", response_model=ProviderRead)
async def upload_my_photo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    providers: ProviderRepository = Depends(get_provider_repository),
    storage: ObjectStorage = Depends(get_object_storage),
    feed: ChangeFeed = Depends(get_feed),
    user: User = Depends(get_current_user),
):
    image = ImagePayload(filename=file.filename, content_type=file.content_type, content=await file.read())
    provider = provider_service.update_own_photo(db, providers, storage, feed, user, image)
    return ProviderRead.model_validate(provider)


@router.get("/me/dashboard", response_model=ProviderDashboard)
def get_my_dashboard(
    providers: ProviderRepository = Depends(get_provider_repository),
    reviews: ReviewRepository = Depends(get_review_repository),
    user: User = Depends(get_current_user),
):
    return provider_service.get_dashboard(providers, reviews, user)


# --- Public ---

@router.get("", response_model=list[ProviderListing])
def list_providers(
    q: Optional[str] = None,
    city: Optional[str] = None,
    sort: str = "newest",
    limit: Optional[int] = Query(None, ge=1, le=100),
    providers: ProviderRepository = Depends(get_provider_repository),
    reviews: ReviewRepository = Depends(get_review_repository),
):
    return provider_service.search_approved(providers, reviews, q=q, city=city, sort=sort, limit=limit)


@router.get("/{provider_id}", response_model=ProviderProfile)
def get_provider(
    provider_id: int,
    providers: ProviderRepository = Depends(get_provider_repository),
    reviews: ReviewRepository = Depends(get_review_repository),
):
    return provider_service.get_public_profile(providers, reviews, provider_id)


@router.get("/{provider_id}/reviews", response_model=list[ReviewRead])
def list_provider_reviews(
    provider_id: int,
    providers: ProviderRepository = Depends(get_provider_repository),
    reviews: ReviewRepository = Depends(get_review_repository),
):
    return [ReviewRead.model_validate(r) for r in review_service.list_reviews(reviews, providers, provider_id)]


@router.post("/{provider_id}/reviews", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def create_provider_review(
    provider_id: int,
    body: ReviewCreate,
    db: Session = Depends(get_db),
    providers: ProviderRepository = Depends(get_provider_repository),
    reviews: ReviewRepository = Depends(get_review_repository),
    feed: ChangeFeed = Depends(get_feed),
    user: User = Depends(get_current_user),
):
    ensure_writable(db)
    review = review_service.submit_review(reviews, providers, feed, user, provider_id, body)
    return ReviewRead.model_validate(review)
