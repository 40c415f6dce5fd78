import os
import tempfile
import unittest
from decimal import Decimal

from sqlalchemy import func, select

from stockroom.app import create_app
from stockroom.extensions import db
from stockroom.models import CodeUnit, Order, OrderCode, Product
from stockroom.services.allocation import Allocator, OrderedSelection

ADMIN_PASSWORD = "secret"


class StockroomTestCase(unittest.TestCase):
    """Fresh app + SQLite file per test; the app context stays pushed."""

    config = {}

    def setUp(self):
        fd, self.db_path = tempfile.mkstemp(suffix=".sqlite")
        os.close(fd)
        overrides = {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{self.db_path}",
            "SEED_PRODUCTS": False,
            "ADMIN_PASSWORD": ADMIN_PASSWORD,
            "STORE_RETRY_BACKOFF": 0.01,
            "LOG_LEVEL": "WARNING",
        }
        overrides.update(self.config)
        self.app = create_app(overrides, allocator=Allocator(OrderedSelection()))
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.storefront = self.app.extensions["storefront"]
        self.lifecycle = self.storefront.orders

    def tearDown(self):
        db.session.remove()
        db.engine.dispose()
        self.ctx.pop()
        os.remove(self.db_path)

    # --- fixtures -------------------------------------------------------
    def add_product(self, slug="epic", price="1.00", codes=(), active=True):
        product = Product(
            slug=slug,
            title=f"{slug.upper()} STOCK",
            category="Gaming",
            unit_price=Decimal(price),
            active=active,
        )
        db.session.add(product)
        db.session.flush()
        db.session.add_all(CodeUnit(product_id=product.id, code=c) for c in codes)
        db.session.commit()
        return product.id

    def place_order(self, slug="epic", qty=1, pay_method="BTC", txid="tx-1", contact=None):
        return self.storefront.create_order(slug, qty, pay_method, txid, contact)["order_id"]

    # --- fresh reads ----------------------------------------------------
    def order_row(self, order_id):
        db.session.expire_all()
        return db.session.execute(
            select(Order).where(Order.order_id == order_id)
        ).unique().scalar_one()

    def bound_codes(self, order_id):
        return db.session.execute(
            select(OrderCode.code).where(OrderCode.order_id == order_id).order_by(OrderCode.id)
        ).scalars().all()

    def consumed_codes(self, order_id):
        return db.session.execute(
            select(CodeUnit.code).where(CodeUnit.order_id == order_id, CodeUnit.sold.is_(True))
        ).scalars().all()

    def unsold_count(self, product_id):
        return db.session.execute(
            select(func.count(CodeUnit.id)).where(
                CodeUnit.product_id == product_id, CodeUnit.sold.is_(False)
            )
        ).scalar_one()
