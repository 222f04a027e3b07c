from __future__ import annotations

from services.storefront.app.config import Settings
from services.storefront.app.services.email_base import EmailSender
from services.storefront.app.services.email_log import log_email_sender


def get_email_sender(settings: Settings) -> EmailSender:
    mode = settings.email_provider.strip().lower()

    if mode == "log":
        return log_email_sender

    if mode == "resend":
        from services.storefront.app.services.email_resend import ResendEmailSender

        return ResendEmailSender.from_settings(settings)

    raise ValueError(f"Unknown EMAIL_PROVIDER={mode!r}. Expected log or resend.")
