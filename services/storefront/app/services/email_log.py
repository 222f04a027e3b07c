from __future__ import annotations

import logging
import threading
from uuid import uuid4

from services.storefront.app.services.email_base import EmailMessage

logger = logging.getLogger(__name__)


class LogEmailSender:
    """Writes outgoing mail to the log and keeps it in an outbox. For tests and local dev."""

    provider = "LOG"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.outbox: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> str:
        message_id = f"log_{uuid4().hex[:12]}"
        with self._lock:
            self.outbox.append(message)
        logger.info(
            "Email %s to=%s cc=%s subject=%r", message_id, message.to, message.cc, message.subject
        )
        return message_id

    def reset(self) -> None:
        with self._lock:
            self.outbox.clear()


log_email_sender = LogEmailSender()
