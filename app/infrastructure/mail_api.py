"""Transactional mail over an HTTP API."""

from typing import Optional

import httpx
import structlog

from app.config import get_settings
from app.core.exceptions import ExternalServiceException

settings = get_settings()
logger = structlog.get_logger(__name__)


class MailClient:
    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None, timeout: float = 10):
        self.api_url = api_url if api_url is not None else settings.MAIL_API_URL
        self.api_key = api_key if api_key is not None else settings.MAIL_API_KEY
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_url)

    async def send(self, to_email: str, subject: str, body: str) -> bool:
        """Send a plain-text mail. Returns False when no mail API is configured."""
        if not self.enabled:
            logger.warning("Mail API not configured, message not sent", to=to_email, subject=subject)
            return False

        payload = {"to": to_email, "subject": subject, "text": body}
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Mail dispatch failed", to=to_email, error=str(e))
            raise ExternalServiceException("Failed to send email", details={"error": str(e)}) from e

        logger.info("Mail sent", to=to_email, subject=subject)
        return True


def get_mail_client() -> MailClient:
    return MailClient()
