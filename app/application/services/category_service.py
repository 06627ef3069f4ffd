"""Category manager — add, rename and delete service categories."""

import re

import structlog

from app.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from app.domain.models.category import Category
from app.domain.repositories.category_repository import CategoryRepository
from app.domain.repositories.provider_repository import ProviderRepository
from app.domain.schemas.category import CategoryRead, CategoryWithCount
from app.infrastructure.realtime import ChangeFeed, DELETE, INSERT, UPDATE

logger = structlog.get_logger(__name__)

TABLE = "service_categories"


def slugify(name: str) -> str:
    """'Home Cleaning ' -> 'home-cleaning'."""
    return re.sub(r"\s+", "-", name.strip().lower())


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise BusinessRuleViolationException("Category name cannot be empty")
    return cleaned


def _record(category: Category) -> dict:
    return CategoryRead.model_validate(category).model_dump(mode="json")


def list_with_counts(categories: CategoryRepository, providers: ProviderRepository) -> list[CategoryWithCount]:
    counts = providers.count_approved_by_category()
    return [
        CategoryWithCount(**CategoryRead.model_validate(c).model_dump(), provider_count=counts.get(c.id, 0))
        for c in categories.list_ordered()
    ]


def get_by_slug(categories: CategoryRepository, slug: str) -> Category:
    category = categories.get_by_slug(slug)
    if not category:
        raise EntityNotFoundException("Category not found")
    return category


def add_category(categories: CategoryRepository, feed: ChangeFeed, name: str) -> Category:
    cleaned = _clean_name(name)
    category = categories.create({"name": cleaned, "slug": slugify(cleaned)})
    feed.publish(TABLE, INSERT, _record(category))
    logger.info("Category added", category_id=category.id, slug=category.slug)
    return category


def rename_category(categories: CategoryRepository, feed: ChangeFeed, category_id: int, name: str) -> Category:
    cleaned = _clean_name(name)
    category = categories.get_by_id(category_id)
    if not category:
        raise EntityNotFoundException("Category not found")

    category = categories.update(category, {"name": cleaned, "slug": slugify(cleaned)})
    feed.publish(TABLE, UPDATE, _record(category))
    logger.info("Category renamed", category_id=category.id, slug=category.slug)
    return category


def delete_category(categories: CategoryRepository, providers: ProviderRepository,
                    feed: ChangeFeed, category_id: int) -> None:
    category = categories.get_by_id(category_id)
    if not category:
        raise EntityNotFoundException("Category not found")

    in_use = providers.count_by_category(category_id)
    if in_use:
        raise BusinessRuleViolationException(
            "Cannot delete a category that has service providers",
            details={"provider_count": in_use},
        )

    record = _record(category)
    categories.delete(category_id)
    feed.publish(TABLE, DELETE, record)
    logger.info("Category deleted", category_id=category_id)
