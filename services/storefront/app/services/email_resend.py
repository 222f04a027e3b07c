from __future__ import annotations

import httpx

from services.storefront.app.config import Settings
from services.storefront.app.services.email_base import EmailMessage, EmailSendError

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailSender:
    """Transactional email through the Resend REST API."""

    provider = "RESEND"

    def __init__(self, api_key: str, timeout: float = 10.0) -> None:
        self._api_key = api_key
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> ResendEmailSender:
        # A missing key surfaces at send time so it never blocks checkout.
        return cls(settings.resend_api_key.strip(), timeout=settings.http_timeout_seconds)

    def send(self, message: EmailMessage) -> str:
        if not self._api_key:
            raise EmailSendError("RESEND_API_KEY is not configured")

        body: dict[str, object] = {
            "from": message.sender,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        if message.cc:
            body["cc"] = message.cc

        try:
            resp = httpx.post(
                RESEND_API_URL,
                json=body,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EmailSendError(
                f"Resend rejected email: HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise EmailSendError(f"Resend request failed: {e}") from e

        return str(resp.json().get("id") or "")
