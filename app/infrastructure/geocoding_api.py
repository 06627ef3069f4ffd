"""Geocoding HTTP client (OpenCage-compatible JSON API).

Retries transient failures with a short linear backoff; 4xx answers other
than 429 are not retried.
"""

import asyncio
from typing import Optional

import httpx
import structlog
from pydantic import ValidationError

from app.config import get_settings
from app.core.exceptions import ExternalServiceException, EntityNotFoundException
from app.domain.schemas.geocoding import GeocodeResult

settings = get_settings()
logger = structlog.get_logger(__name__)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class GeocodingClient:
    """Forward and reverse geocoding keyed by a caller-supplied API key."""

    def __init__(self, api_key: str, base_url: Optional[str] = None, timeout: float = 10):
        self.api_key = api_key
        self.base_url = base_url or settings.GEOCODING_API_URL
        self.timeout = timeout
        self.max_retries = 3
        self.retry_delay = 0.5  # seconds

    async def _query(self, q: str) -> GeocodeResult:
        params = {"q": q, "key": self.api_key, "limit": 1, "no_annotations": 1}

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.base_url, params=params)
                    response.raise_for_status()
                    data = response.json()
                return self._first_result(q, data)
            except ValueError as e:
                logger.warning("Geocoding API returned a non-JSON body", error=str(e))
                raise ExternalServiceException(
                    "Invalid geocoding response",
                    details={"error": str(e)},
                ) from e
            except httpx.HTTPStatusError as e:
                last_error = e
                logger.warning(
                    "Geocoding API error",
                    attempt=attempt,
                    status_code=e.response.status_code,
                    body=e.response.text[:200],
                )
                if e.response.status_code not in RETRYABLE_STATUS:
                    break
            except httpx.RequestError as e:
                last_error = e
                logger.warning("Geocoding API connection error", attempt=attempt, error=str(e))

            if attempt < self.max_retries:
                await asyncio.sleep(self.retry_delay * attempt)

        raise ExternalServiceException(
            "Geocoding service unavailable",
            details={"error": str(last_error)},
        )

    @staticmethod
    def _first_result(q: str, data: dict) -> GeocodeResult:
        try:
            results = data.get("results") or []
            if not results:
                raise EntityNotFoundException("No geocoding results", details={"query": q})
            best = results[0]
            geometry = best.get("geometry") or {}
            return GeocodeResult(lat=geometry["lat"], lng=geometry["lng"], formatted=best.get("formatted"))
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            logger.warning("Geocoding API returned an unexpected shape", query=q, error=str(e))
            raise ExternalServiceException(
                "Invalid geocoding response",
                details={"error": str(e)},
            ) from e

    async def forward(self, address: str) -> GeocodeResult:
        return await self._query(address)

    async def reverse(self, lat: float, lng: float) -> GeocodeResult:
        return await self._query(f"{lat},{lng}")
