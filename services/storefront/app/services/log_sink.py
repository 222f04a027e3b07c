from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Protocol
from uuid import uuid4

from services.storefront.app.db.models import LogEntry
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class LogSink(Protocol):
    def record(self, kind: str, message: str, context: dict[str, Any] | None = None) -> None: ...


class DbLogSink:
    """Append-only diagnostics in the ``log_entries`` table.

    Best-effort: a failure to write is reported to the console logger and never raised.
    Uses its own session so a broken request session cannot block the write.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def record(self, kind: str, message: str, context: dict[str, Any] | None = None) -> None:
        db: Session | None = None
        try:
            payload = json.loads(json.dumps(context or {}, default=str))
            db = self._session_factory()
            db.add(LogEntry(id=uuid4().hex, kind=kind, message=message, context_json=payload))
            db.commit()
        except Exception:
            logger.exception("Failed to write log entry kind=%s message=%r", kind, message)
        finally:
            if db is not None:
                db.close()
