from __future__ import annotations

import argparse
from decimal import Decimal

from services.storefront.app.db.database import db_session
from services.storefront.app.db.init_db import init_db
from services.storefront.app.db.models import Brand, Category, Product

CATEGORIES = (
    ("cat-hoodies", "Hoodies", "hoodies"),
    ("cat-tees", "T-Shirts", "t-shirts"),
    ("cat-accessories", "Accessories", "accessories"),
)

BRANDS = (
    ("brand-north", "Northbound"),
    ("brand-atlas", "Atlas Supply"),
)

PRODUCTS = (
    ("prod-hoodie-grey", "Grey Heavyweight Hoodie", "49.99", "cat-hoodies", "brand-north", 25),
    ("prod-tee-white", "White Organic Tee", "18.50", "cat-tees", "brand-atlas", 100),
    ("prod-tee-black", "Black Organic Tee", "18.50", "cat-tees", "brand-atlas", 0),
    ("prod-cap", "Canvas Cap", "15.00", "cat-accessories", "brand-north", 40),
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a demo storefront catalog")
    parser.add_argument("--image-base-url", default="")
    args = parser.parse_args()

    init_db()

    db = db_session()
    try:
        for cid, name, slug in CATEGORIES:
            if db.get(Category, cid) is None:
                db.add(Category(id=cid, name=name, slug=slug))

        for bid, name in BRANDS:
            if db.get(Brand, bid) is None:
                db.add(Brand(id=bid, name=name))

        for pid, name, price, cid, bid, stock in PRODUCTS:
            if db.get(Product, pid) is not None:
                continue
            db.add(
                Product(
                    id=pid,
                    name=name,
                    price=Decimal(price),
                    image_url=f"{args.image_base_url.rstrip('/')}/{pid}.jpg" if args.image_base_url else None,
                    category_id=cid,
                    brand_id=bid,
                    stock_quantity=stock,
                    out_of_stock=stock == 0,
                )
            )

        db.commit()
        print(f"Seeded {len(PRODUCTS)} products")
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
