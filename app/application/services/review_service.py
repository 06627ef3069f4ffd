"""Review service — customer ratings and rating summaries."""

from typing import Iterable

import structlog

from app.core.exceptions import EntityNotFoundException
from app.domain.models.review import Review
from app.domain.models.service_provider import ProviderStatus
from app.domain.models.user import User
from app.domain.repositories.provider_repository import ProviderRepository
from app.domain.repositories.review_repository import ReviewRepository
from app.domain.schemas.review import RatingSummary, ReviewCreate, ReviewRead
from app.infrastructure.realtime import ChangeFeed, INSERT

logger = structlog.get_logger(__name__)

TABLE = "reviews"


def summarize(reviews: ReviewRepository, provider_ids: Iterable[int]) -> dict[int, RatingSummary]:
    """Average (one decimal) and count per provider; providers without reviews get zeros."""
    ids = list(provider_ids)
    raw = reviews.summaries(ids)
    result = {}
    for provider_id in ids:
        average, count = raw.get(provider_id, (0.0, 0))
        result[provider_id] = RatingSummary(average=round(average, 1), count=count)
    return result


def get_approved_provider(providers: ProviderRepository, provider_id: int):
    provider = providers.get_by_id(provider_id)
    if not provider or provider.status != ProviderStatus.APPROVED.value:
        raise EntityNotFoundException("Service provider not found")
    return provider


def list_reviews(reviews: ReviewRepository, providers: ProviderRepository, provider_id: int) -> list[Review]:
    get_approved_provider(providers, provider_id)
    return reviews.list_for_provider(provider_id)


def submit_review(reviews: ReviewRepository, providers: ProviderRepository, feed: ChangeFeed,
                  user: User, provider_id: int, body: ReviewCreate) -> Review:
    get_approved_provider(providers, provider_id)

    comment = (body.comment or "").strip() or None
    review = reviews.create(
        {"provider_id": provider_id, "user_id": user.id, "rating": body.rating, "comment": comment}
    )
    feed.publish(TABLE, INSERT, ReviewRead.model_validate(review).model_dump(mode="json"))
    logger.info("Review submitted", provider_id=provider_id, rating=body.rating)
    return review
