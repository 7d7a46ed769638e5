"""
Resend email API client.

Implements the one primitive the email queue needs:
- send_batch(emails) -> list[message_id]

Endpoint per Resend API docs (https://resend.com/docs/api-reference):
- POST /emails/batch - send up to 100 emails in one request

All sends are guarded by EMAIL_SENDING_ENABLED. When disabled (the default
in tests and local development), send_batch raises EmailSendingDisabledError
before any network call is made.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import requests
from django.conf import settings

logger = logging.getLogger("agencybrain.email")


class ResendError(Exception):
    """Raised when the Resend API returns an error response."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body[:500] if body else None
        super().__init__(message)


class EmailSendingDisabledError(ResendError):
    """Raised when a send is attempted with EMAIL_SENDING_ENABLED=false."""

    def __init__(self, message: str = "Email sending is disabled (EMAIL_SENDING_ENABLED=false)"):
        super().__init__(message)


@dataclass
class OutgoingEmail:
    """One message in a batch send."""

    to: str
    subject: str
    html: str
    from_address: str | None = None

    def to_payload(self, default_from: str) -> dict[str, Any]:
        return {
            "from": self.from_address or default_from,
            "to": [self.to],
            "subject": self.subject,
            "html": self.html,
        }


def require_email_enabled() -> None:
    """Fail fast if outbound email is switched off."""
    if not getattr(settings, "EMAIL_SENDING_ENABLED", False):
        raise EmailSendingDisabledError()


class ResendClient:
    """
    HTTP client for the Resend API.

    Authentication via Bearer API key.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.resend.com",
        from_address: str = "",
        timeout: float = 30.0,
    ):
        if not api_key:
            raise ValueError("Resend API key is required")
        self.base_url = base_url.rstrip("/")
        self.from_address = from_address
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def send_batch(self, emails: list[OutgoingEmail]) -> list[str | None]:
        """
        Send a batch of emails.

        Returns:
            Resend message ids, positionally aligned with `emails`.
            Missing ids come back as None.

        Raises:
            EmailSendingDisabledError: If EMAIL_SENDING_ENABLED=false
            ResendError: If the request fails or the API returns an error
        """
        require_email_enabled()

        if not emails:
            return []

        url = f"{self.base_url}/emails/batch"
        payload = [email.to_payload(self.from_address) for email in emails]

        call_start_ms = time.monotonic() * 1000
        logger.info("RESEND_CALL_START count=%d", len(payload))

        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            duration_ms = int(time.monotonic() * 1000 - call_start_ms)
            logger.error(
                "RESEND_CALL_END status=TIMEOUT duration_ms=%d error=%s",
                duration_ms,
                str(e),
            )
            raise ResendError("Connection to Resend API timed out") from e
        except requests.RequestException as e:
            duration_ms = int(time.monotonic() * 1000 - call_start_ms)
            logger.error(
                "RESEND_CALL_END status=ERROR duration_ms=%d error=%s",
                duration_ms,
                str(e),
            )
            raise ResendError(f"Request failed: {e}") from e

        duration_ms = int(time.monotonic() * 1000 - call_start_ms)

        if not response.ok:
            logger.error(
                "RESEND_CALL_END status=HTTP_ERROR duration_ms=%d http_status=%d error=%s",
                duration_ms,
                response.status_code,
                response.text[:200],
            )
            raise ResendError(
                f"Resend API error ({response.status_code})",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json().get("data") or []
        except ValueError as e:
            raise ResendError(
                "Resend API returned invalid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e

        logger.info(
            "RESEND_CALL_END status=OK duration_ms=%d sent=%d",
            duration_ms,
            len(data),
        )

        ids: list[str | None] = []
        for index in range(len(emails)):
            item = data[index] if index < len(data) else None
            ids.append(item.get("id") if isinstance(item, dict) else None)
        return ids


def get_client() -> ResendClient:
    """Build a client from Django settings."""
    return ResendClient(
        api_key=getattr(settings, "RESEND_API_KEY", ""),
        base_url=getattr(settings, "RESEND_BASE_URL", "https://api.resend.com"),
        from_address=getattr(settings, "EMAIL_FROM_ADDRESS", ""),
    )
