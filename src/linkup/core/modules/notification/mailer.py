"""Email delivery through a transactional email HTTP API."""

from typing import Protocol

import httpx
import structlog

from linkup.config import Config
from linkup.core.modules.notification.models import EmailMessage
from linkup.errors import EmailDeliveryError

logger = structlog.get_logger(__name__)


class Mailer(Protocol):
    async def send(self, message: EmailMessage) -> None: ...

    async def close(self) -> None: ...


class HttpMailer:
    """Posts messages to a Brevo-compatible `/smtp/email` endpoint."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._client = httpx.AsyncClient(timeout=config.email_timeout_seconds)

    async def send(self, message: EmailMessage) -> None:
        """Deliver one message.

        Raises:
            EmailDeliveryError: On missing API key, transport failure, or a non-2xx response
        """
        if not self._config.email_api_key:
            raise EmailDeliveryError("email_api_key is not configured")

        payload = {
            "sender": {"name": self._config.email_from_name, "email": self._config.email_from},
            "to": [{"email": message.recipient}],
            "subject": message.subject,
            "htmlContent": message.html,
            "textContent": message.text,
        }
        try:
            response = await self._client.post(
                self._config.email_api_url,
                headers={"api-key": self._config.email_api_key},
                json=payload,
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email API request failed: {e}") from e

        if response.status_code >= 400:
            raise EmailDeliveryError(f"Email API error {response.status_code}: {response.text}")
        logger.debug("email_sent", recipient=message.recipient, subject=message.subject)

    async def close(self) -> None:
        await self._client.aclose()
