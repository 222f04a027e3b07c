from __future__ import annotations

from services.storefront.app.db.models import Product, Review
from services.storefront.app.models.catalog import ProductOut, ReviewOut


def to_product_view(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        image_url=product.image_url,
        category_id=product.category_id,
        category_name=product.category.name if product.category else None,
        brand_id=product.brand_id,
        stock_quantity=product.stock_quantity,
        out_of_stock=product.out_of_stock,
        created_at=product.created_at.isoformat(),
    )


def to_review_view(review: Review) -> ReviewOut:
    return ReviewOut(
        id=review.id,
        product_id=review.product_id,
        user_id=review.user_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at.isoformat(),
    )
