from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from services.storefront.app.db.database import db_session
from services.storefront.app.services.catalog_store import CatalogStore
from services.storefront.app.services.store import OrderStore
from sqlalchemy.orm import Session


def get_db() -> Generator[Session, None, None]:
    """One session per request, closed once the response is sent."""

    db = db_session()
    try:
        yield db
    finally:
        db.close()


def get_order_store(db: Session = Depends(get_db)) -> OrderStore:
    return OrderStore(db)


def get_catalog_store(db: Session = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db)
