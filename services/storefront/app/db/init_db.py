from __future__ import annotations

from services.storefront.app.config import get_settings
from services.storefront.app.db.database import get_engine
from services.storefront.app.db.models import Base


def init_db() -> None:
    if not get_settings().db_auto_create:
        return

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
