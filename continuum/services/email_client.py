"""Resend client for transactional email."""

import logging
import re
from collections.abc import Mapping
from typing import Any

import httpx

from continuum.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z0-9_]+)\s*\}\}")


class EmailError(Exception):
    """Error from the Resend API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def replace_variables(template: str, data: Mapping[str, Any]) -> str:
    """Substitute ``{{key}}`` placeholders.

    Keys whose value is ``None`` and placeholders without a key are left as is.

    Args:
        template: Text containing placeholders
        data: Values by placeholder name

    Returns:
        The substituted text
    """

    def _sub(match: re.Match[str]) -> str:
        value = data.get(match.group(1))
        if value is None:
            return match.group(0)
        return str(value)

    return _PLACEHOLDER.sub(_sub, template)


def extract_variables(template: str) -> list[str]:
    """Placeholder names in first-seen order."""
    seen: list[str] = []
    for name in _PLACEHOLDER.findall(template):
        if name not in seen:
            seen.append(name)
    return seen


class ResendClient:
    """Client for the Resend email API."""

    BASE_URL = "https://api.resend.com"

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize Resend client.

        Args:
            settings: Application settings. If None, loads from environment.
        """
        self.settings = settings or get_settings()
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                headers={
                    "Authorization": f"Bearer {self.settings.resend_api_key}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        to: str | list[str],
        subject: str,
        html: str,
        reply_to: str | None = None,
        from_address: str | None = None,
    ) -> str | None:
        """Send one email.

        Args:
            to: Recipient address or addresses
            subject: Subject line
            html: HTML body
            reply_to: Optional Reply-To address
            from_address: Sender, defaults to the configured sender

        Returns:
            The Resend message id, when reported

        Raises:
            EmailError: If the API rejects the message or cannot be reached
        """
        payload: dict[str, Any] = {
            "from": from_address or self.settings.email_from,
            "to": to if isinstance(to, list) else [to],
            "subject": subject,
            "html": html,
        }
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            response = await self.client.post("/emails", json=payload)
        except httpx.HTTPError as e:
            raise EmailError(f"Resend request failed: {e}") from e

        if response.status_code >= 400:
            raise EmailError(
                f"Resend API error: {response.text}",
                status_code=response.status_code,
            )

        message_id = response.json().get("id")
        logger.info("Email sent", extra={"message_id": message_id, "subject": subject})
        return message_id
