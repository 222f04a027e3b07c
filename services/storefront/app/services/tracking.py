from __future__ import annotations

import secrets
import string
import time
from collections.abc import Callable
from datetime import datetime, timedelta

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


class TrackingNumberGenerator:
    """Customer-facing order identifiers: ``<prefix><8 digits><4 alphanumeric>``.

    The digits are the tail of the epoch milliseconds; the suffix comes from ``secrets``.
    """

    def __init__(self, prefix: str = "TRK", clock: Callable[[], float] = time.time) -> None:
        self._prefix = prefix
        self._clock = clock

    def generate(self) -> str:
        millis = str(int(self._clock() * 1000))[-8:].rjust(8, "0")
        suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(4))
        return f"{self._prefix}{millis}{suffix}"


def estimate_delivery(created_at: datetime, days: int) -> datetime:
    return created_at + timedelta(days=days)
