from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class CategoryOut(BaseModel):
    id: str
    name: str
    slug: str


class BrandOut(BaseModel):
    id: str
    name: str


class ProductOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: Decimal
    image_url: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    brand_id: str | None = None
    stock_quantity: int
    out_of_stock: bool
    created_at: str


class ReviewOut(BaseModel):
    id: str
    product_id: str
    user_id: str
    rating: int
    comment: str
    created_at: str


class ProductReviewsOut(BaseModel):
    product_id: str
    average_rating: float | None = None
    reviews: list[ReviewOut] = Field(default_factory=list)


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class ProductIn(BaseModel):
    # image_url is a plain link; uploading the image is the client's concern.
    name: str = Field(..., min_length=1)
    description: str | None = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    image_url: str | None = None
    category_id: str | None = None
    brand_id: str | None = None
    stock_quantity: int = Field(default=0, ge=0)
    out_of_stock: bool = False
