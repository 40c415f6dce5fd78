"""
Code Unit — one single-use code belonging to a product.
sold / sold_at / order_id flip together, once, and are never reset.
"""

from stockroom.extensions import db


class CodeUnit(db.Model):
    __tablename__ = "code_units"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    code = db.Column(db.Text, nullable=False)
    sold = db.Column(db.Boolean, nullable=False, default=False)
    sold_at = db.Column(db.DateTime(timezone=True), nullable=True)
    order_id = db.Column(db.String(64), nullable=True)

    __table_args__ = (
        db.Index("ix_code_units_product_sold", "product_id", "sold"),
        db.Index("ix_code_units_order_id", "order_id"),
    )

    def __repr__(self):
        return f"<CodeUnit id={self.id} product_id={self.product_id} sold={self.sold}>"
