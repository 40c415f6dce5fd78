"""
Storefront — the operations the request layer calls into.
Results are plain dicts ready for jsonify.
"""

import logging

from stockroom.errors import NotFoundError, ValidationError
from stockroom.services import catalog_service, inventory_service, order_service
from stockroom.services.lifecycle import OrderLifecycle

logger = logging.getLogger(__name__)


class Storefront:
    def __init__(self, store, lifecycle=None):
        self.store = store
        self.orders = lifecycle or OrderLifecycle(store)

    def create_order(self, product_slug, qty, pay_method, txid, contact=None):
        order = self.orders.create_order(product_slug, qty, pay_method, txid, contact)
        return {"order_id": order.order_id}

    def approve_order(self, order_id):
        result = self.orders.approve_order(order_id)
        return {"codes": result.codes, "remaining": result.remaining, "already": result.already}

    def reject_order(self, order_id):
        self.orders.reject_order(order_id)
        return {}

    def get_order(self, order_id):
        view = self.orders.get_order(order_id)
        return {"order": view.order.to_dict(), "codes": view.codes, "remaining": view.remaining}

    def add_stock(self, product_slug, codes):
        if not isinstance(product_slug, str) or not product_slug.strip():
            raise ValidationError("Missing field: product_slug")
        return self.store.run(self._add_stock, product_slug, list(codes))

    def _add_stock(self, session, product_slug, codes):
        product = catalog_service.find_by_slug(session, product_slug)
        if not product:
            raise NotFoundError("Product not found", product_slug=product_slug)
        added = inventory_service.bulk_insert(session, product, codes)
        return {"added": added, "stock": inventory_service.available_count(session, product.id)}

    def list_active_products(self):
        return [listing.to_dict() for listing in catalog_service.list_active(self.store.session)]

    def list_recent_orders(self, limit=200):
        return [o.to_dict() for o in order_service.list_recent_orders(self.store.session, limit)]
