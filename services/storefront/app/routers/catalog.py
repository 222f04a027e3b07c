from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from services.storefront.app.db.deps import get_catalog_store, get_db
from services.storefront.app.db.models import Brand, Category, Product, Review
from services.storefront.app.models.catalog import (
    BrandOut,
    CategoryOut,
    ProductOut,
    ProductReviewsOut,
    ReviewCreate,
    ReviewOut,
)
from services.storefront.app.security import require_user
from services.storefront.app.services.auth_base import Principal
from services.storefront.app.services.catalog_store import CatalogStore, CatalogStoreError
from services.storefront.app.services.catalog_views import to_product_view, to_review_view
from sqlalchemy import select
from sqlalchemy.orm import Session

router = APIRouter(prefix="/v1")


@router.get("/categories", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)) -> list[CategoryOut]:
    rows = db.scalars(select(Category).order_by(Category.created_at.asc())).all()
    return [CategoryOut(id=c.id, name=c.name, slug=c.slug) for c in rows]


@router.get("/brands", response_model=list[BrandOut])
def list_brands(db: Session = Depends(get_db)) -> list[BrandOut]:
    rows = db.scalars(select(Brand).order_by(Brand.name.asc())).all()
    return [BrandOut(id=b.id, name=b.name) for b in rows]


@router.get("/products", response_model=list[ProductOut])
def list_products(
    category: str | None = None,
    in_stock: bool | None = None,
    db: Session = Depends(get_db),
) -> list[ProductOut]:
    query = select(Product).order_by(Product.created_at.desc())

    if category:
        found = db.scalars(select(Category).where(Category.slug == category)).first()
        if found is None:
            return []
        query = query.where(Product.category_id == found.id)

    if in_stock is not None:
        query = query.where(Product.out_of_stock == (not in_stock))

    return [to_product_view(p) for p in db.scalars(query).all()]


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)) -> ProductOut:
    product = db.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_view(product)


@router.get("/products/{product_id}/reviews", response_model=ProductReviewsOut)
def get_product_reviews(product_id: str, db: Session = Depends(get_db)) -> ProductReviewsOut:
    if db.get(Product, product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")

    rows = db.scalars(
        select(Review).where(Review.product_id == product_id).order_by(Review.created_at.desc())
    ).all()

    average = round(sum(r.rating for r in rows) / len(rows), 1) if rows else None

    return ProductReviewsOut(
        product_id=product_id,
        average_rating=average,
        reviews=[to_review_view(r) for r in rows],
    )


@router.post("/products/{product_id}/reviews", response_model=ReviewOut, status_code=201)
def submit_review(
    product_id: str,
    payload: ReviewCreate,
    store: CatalogStore = Depends(get_catalog_store),
    user: Principal = Depends(require_user),
) -> ReviewOut:
    if store.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        review = store.add_review(product_id, user.user_id, payload.rating, payload.comment.strip())
    except CatalogStoreError as e:
        raise HTTPException(status_code=500, detail="Failed to submit review") from e

    return to_review_view(review)
