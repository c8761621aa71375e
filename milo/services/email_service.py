"""Transactional e-mail delivery through the Resend HTTP API."""

from __future__ import annotations

from functools import lru_cache
from typing import Protocol

import httpx
from loguru import logger

from ..config.email_config import EmailConfig, get_email_config
from ..models.digest import EmailMessage
from ..utils import api_client
from ..utils.error_handler import DeliveryError


class EmailSender(Protocol):
    """Anything that can deliver an :class:`EmailMessage`."""

    async def send(self, message: EmailMessage) -> str:
        ...


class ResendEmailSender:
    """Send e-mail with Resend and return the accepted message id.

    A transport can be supplied for tests; by default httpx opens a real
    connection per send.
    """

    def __init__(
        self,
        email_config: EmailConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.email_config = email_config or get_email_config()
        self._transport = transport

    async def send(self, message: EmailMessage) -> str:
        """Deliver ``message``.

        Raises
        ------
        DeliveryError
            If no API key is configured, the request fails in transit, or
            Resend answers with a non-2xx status.
        """
        if not self.email_config.resend_api_key:
            raise DeliveryError("RESEND_API_KEY is not configured")

        payload = {
            "from": message.sender,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        headers = {"Authorization": f"Bearer {self.email_config.resend_api_key}"}
        try:
            response = await api_client.post(
                self.email_config.resend_api_url,
                json=payload,
                headers=headers,
                timeout=self.email_config.email_timeout,
                transport=self._transport,
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Resend request failed: {exc}") from exc

        if response.is_error:
            raise DeliveryError(f"Resend error {response.status_code}: {_error_detail(response)}")

        try:
            body = response.json()
        except ValueError:
            body = None
        message_id = str(body.get("id", "")) if isinstance(body, dict) else ""
        logger.info("E-mail accepted by Resend: {} -> {}", message_id or "<no id>", ", ".join(message.to))
        return message_id


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


@lru_cache()
def get_email_sender() -> ResendEmailSender:
    """Dependency provider returning a singleton sender."""
    return ResendEmailSender()
