"""
Catalog Service — product reads and first-run seeding.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import and_, func, select

from stockroom.models import CodeUnit, Product

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTS = [
    # slug, title, category, unit price, image key
    ("psn", "PSN STOCK", "Gaming", Decimal("1.00"), "psn"),
    ("epic", "EPIC STOCK", "Gaming", Decimal("1.00"), "epic"),
    ("fullaccess", "FULL ACCESS", "FULL ACCESS", Decimal("1.00"), "full"),
]


@dataclass
class ProductListing:
    product: Product
    stock: int

    def to_dict(self):
        return {**self.product.to_dict(), "stock": self.stock}


def find_by_slug(session, slug):
    return session.execute(
        select(Product).where(Product.slug == slug)
    ).scalar_one_or_none()


def find_active_by_slug(session, slug):
    return session.execute(
        select(Product).where(Product.slug == slug, Product.active.is_(True))
    ).scalar_one_or_none()


def list_active(session):
    """Active products, newest first, with the unsold count joined in at read time."""
    stock = func.count(CodeUnit.id)
    rows = session.execute(
        select(Product, stock)
        .outerjoin(CodeUnit, and_(CodeUnit.product_id == Product.id, CodeUnit.sold.is_(False)))
        .where(Product.active.is_(True))
        .group_by(Product.id)
        .order_by(Product.id.desc())
    ).all()
    return [ProductListing(product=p, stock=count) for p, count in rows]


def seed_default_products(session):
    if session.execute(select(func.count(Product.id))).scalar_one():
        return 0
    for slug, title, category, price, image_key in DEFAULT_PRODUCTS:
        session.add(Product(slug=slug, title=title, category=category,
                            unit_price=price, image_key=image_key))
    session.flush()
    logger.info("seeded %d default products", len(DEFAULT_PRODUCTS))
    return len(DEFAULT_PRODUCTS)
