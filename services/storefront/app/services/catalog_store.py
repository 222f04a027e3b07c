from __future__ import annotations

from uuid import uuid4

from services.storefront.app.db.models import Brand, Category, Product, Review
from services.storefront.app.models.catalog import ProductIn
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


class CatalogStoreError(Exception):
    """A write against the catalog tables failed."""


class CatalogStore:
    """Product and review writes for the admin console and signed-in shoppers."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_product(self, product_id: str) -> Product | None:
        return self._db.get(Product, product_id)

    def missing_references(self, data: ProductIn) -> list[str]:
        missing = []
        if data.category_id and self._db.get(Category, data.category_id) is None:
            missing.append(f"category {data.category_id}")
        if data.brand_id and self._db.get(Brand, data.brand_id) is None:
            missing.append(f"brand {data.brand_id}")
        return missing

    def create_product(self, data: ProductIn) -> Product:
        product = Product(id=uuid4().hex, **data.model_dump())
        self._commit(product)
        return product

    def update_product(self, product: Product, data: ProductIn) -> Product:
        for field, value in data.model_dump().items():
            setattr(product, field, value)
        self._commit(product)
        return product

    def delete_product(self, product: Product) -> None:
        # Reviews reference the product; order items keep their own price copy.
        try:
            self._db.execute(delete(Review).where(Review.product_id == product.id))
            self._db.delete(product)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise CatalogStoreError(str(e)) from e

    def add_review(self, product_id: str, user_id: str, rating: int, comment: str) -> Review:
        review = Review(
            id=uuid4().hex,
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            comment=comment,
        )
        self._commit(review)
        return review

    def _commit(self, *rows: object) -> None:
        try:
            self._db.add_all(rows)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise CatalogStoreError(str(e)) from e
