from datetime import datetime, timezone
from stockroom.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    slug = db.Column(db.String(64), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False, default=1)
    image_key = db.Column(db.String(64), nullable=False, default="default")
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        db.CheckConstraint("unit_price >= 0", name="ck_products_unit_price"),
    )

    def to_dict(self):
        return {
            "id":         self.id,
            "slug":       self.slug,
            "title":      self.title,
            "category":   self.category,
            "unit_price": float(self.unit_price),
            "image_key":  self.image_key,
            "active":     self.active,
        }
