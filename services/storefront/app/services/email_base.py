from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class EmailSendError(Exception):
    """Base class for email delivery errors."""


@dataclass(frozen=True, slots=True)
class EmailMessage:
    sender: str
    to: list[str]
    subject: str
    html: str
    cc: list[str] = field(default_factory=list)


class EmailSender(Protocol):
    provider: str

    def send(self, message: EmailMessage) -> str: ...
