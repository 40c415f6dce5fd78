"""
Order Model
Status: PENDING | APPROVED | REJECTED
"""

from datetime import datetime, timezone
from stockroom.extensions import db


class OrderStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    ALL = (PENDING, APPROVED, REJECTED)


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    order_id = db.Column(db.String(64), unique=True, nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    total = db.Column(db.Numeric(10, 2), nullable=False)
    pay_method = db.Column(db.String(32), nullable=False)
    txid = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(*OrderStatus.ALL, name="order_status"),
        nullable=False,
        default=OrderStatus.PENDING
    )
    contact = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    product = db.relationship("Product", lazy="joined", innerjoin=True)

    __table_args__ = (
        db.CheckConstraint("qty > 0", name="ck_orders_qty_positive"),
    )

    def to_dict(self):
        product = self.product
        return {
            "order_id":         self.order_id,
            "status":           self.status,
            "qty":              self.qty,
            "total":            float(self.total),
            "pay_method":       self.pay_method,
            "txid":             self.txid,
            "contact":          self.contact,
            "created_at":       self.created_at.isoformat(),
            "approved_at":      self.approved_at.isoformat() if self.approved_at else None,
            "product_slug":     product.slug if product else None,
            "product_title":    product.title if product else None,
            "product_category": product.category if product else None,
            "unit_price":       float(product.unit_price) if product else None,
        }


class OrderCode(db.Model):
    """Append-only record of a code handed to an order at approval."""
    __tablename__ = "order_codes"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    order_id = db.Column(db.String(64), db.ForeignKey("orders.order_id"), nullable=False, index=True)
    code = db.Column(db.Text, nullable=False)
