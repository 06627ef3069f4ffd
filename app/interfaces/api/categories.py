"""Category API routes — public list, marketplace browsing and the admin category manager."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from app.application.services import category_service, provider_service
from app.domain.repositories.category_repository import CategoryRepository
from app.domain.repositories.provider_repository import ProviderRepository
from app.domain.repositories.review_repository import ReviewRepository
from app.domain.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate, CategoryWithCount
from app.domain.schemas.provider import CategoryPage
from app.infrastructure.realtime import ChangeFeed
from app.interfaces.api.deps import require_admin
from app.interfaces.deps import get_category_repository, get_feed, get_provider_repository, get_review_repository

router = APIRouter(prefix="/api/categories", tags=["Categories"])
services_router = APIRouter(prefix="/api/services", tags=["Services"])
admin_router = APIRouter(
    prefix="/api/admin/categories",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=list[CategoryRead])
def list_categories(categories: CategoryRepository = Depends(get_category_repository)):
    return [CategoryRead.model_validate(c) for c in categories.list_ordered()]


@services_router.get("", response_model=list[CategoryWithCount])
def list_services(
    categories: CategoryRepository = Depends(get_category_repository),
    providers: ProviderRepository = Depends(get_provider_repository),
):
    return category_service.list_with_counts(categories, providers)


@services_router.get("/{slug}", response_model=CategoryPage)
def get_service_category(
    slug: str,
    q: Optional[str] = None,
    city: Optional[str] = None,
    sort: str = "newest",
    categories: CategoryRepository = Depends(get_category_repository),
    providers: ProviderRepository = Depends(get_provider_repository),
    reviews: ReviewRepository = Depends(get_review_repository),
):
    category = category_service.get_by_slug(categories, slug)
    listings = provider_service.search_approved(
        providers, reviews, category_id=category.id, q=q, city=city, sort=sort
    )
    return CategoryPage(category=CategoryRead.model_validate(category), providers=listings)


@admin_router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def add_category(
    body: CategoryCreate,
    categories: CategoryRepository = Depends(get_category_repository),
    feed: ChangeFeed = Depends(get_feed),
):
    return CategoryRead.model_validate(category_service.add_category(categories, feed, body.name))


@admin_router.put("/{category_id}", response_model=CategoryRead)
def rename_category(
    category_id: int,
    body: CategoryUpdate,
    categories: CategoryRepository = Depends(get_category_repository),
    feed: ChangeFeed = Depends(get_feed),
):
    return CategoryRead.model_validate(category_service.rename_category(categories, feed, category_id, body.name))


@admin_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    categories: CategoryRepository = Depends(get_category_repository),
    providers: ProviderRepository = Depends(get_provider_repository),
    feed: ChangeFeed = Depends(get_feed),
):
    category_service.delete_category(categories, providers, feed, category_id)
