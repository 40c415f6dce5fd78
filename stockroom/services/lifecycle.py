"""
Order Lifecycle — create / approve / reject / get.

    PENDING -> APPROVED   approve_order (allocation engine)
    PENDING -> REJECTED   reject_order
APPROVED and REJECTED are terminal. Every state change runs as one unit of
work through the injected store; nothing is cached between calls.
"""

import logging
from dataclasses import dataclass
from typing import List

from stockroom.errors import (
    InsufficientStockFailure,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from stockroom.models import Order, OrderStatus
from stockroom.services import catalog_service, inventory_service, order_service
from stockroom.services.allocation import Allocator

logger = logging.getLogger(__name__)


@dataclass
class ApprovalResult:
    order_id: str
    codes: List[str]
    remaining: int
    already: bool = False


@dataclass
class OrderView:
    order: Order
    codes: List[str]
    remaining: int


class OrderLifecycle:
    def __init__(self, store, allocator=None, pay_methods=None, max_qty=999,
                 check_stock_on_create=True, order_id_prefix="LS"):
        self.store = store
        self.allocator = allocator or Allocator()
        self.pay_methods = set(pay_methods) if pay_methods is not None else None
        self.max_qty = max_qty
        self.check_stock_on_create = check_stock_on_create
        self.order_id_prefix = order_id_prefix

    # --- create -----------------------------------------------------------
    def _parse_qty(self, qty):
        if isinstance(qty, bool):
            raise ValidationError("qty must be an integer")
        try:
            value = int(qty)
        except (TypeError, ValueError):
            raise ValidationError("qty must be an integer") from None
        if isinstance(qty, float) and qty != value:
            raise ValidationError("qty must be an integer")
        if value < 1 or value > self.max_qty:
            raise ValidationError(f"qty must be between 1 and {self.max_qty}")
        return value

    def create_order(self, product_slug, qty, pay_method, txid, contact=None) -> Order:
        missing = [name for name, value in (
            ("product_slug", product_slug),
            ("qty", qty),
            ("pay_method", pay_method),
            ("txid", txid),
        ) if value is None or (isinstance(value, str) and not value.strip())]
        if missing:
            raise ValidationError(f"Missing fields: {', '.join(missing)}")

        if not isinstance(product_slug, str):
            raise ValidationError("product_slug must be a string")
        qty = self._parse_qty(qty)
        if not isinstance(pay_method, str) or (
                self.pay_methods is not None and pay_method not in self.pay_methods):
            raise ValidationError("Invalid pay method")
        if contact is not None and not isinstance(contact, str):
            raise ValidationError("contact must be a string")

        return self.store.run(self._create, product_slug, qty, pay_method, str(txid).strip(), contact)

    def _create(self, session, product_slug, qty, pay_method, txid, contact):
        product = catalog_service.find_active_by_slug(session, product_slug)
        if not product:
            raise NotFoundError("Product not found", product_slug=product_slug)

        if self.check_stock_on_create:
            # Advisory only; approval re-checks inside its own unit of work.
            available = inventory_service.available_count(session, product.id)
            if available <= 0:
                raise ValidationError("Out of stock", available=0)
            if qty > available:
                raise ValidationError(f"Not enough stock. Available: {available}", available=available)

        order = order_service.create_order(session, product, qty, pay_method, txid,
                                           contact=contact, prefix=self.order_id_prefix)
        logger.info("[order=%s] created product=%s qty=%d total=%s pay_method=%s",
                    order.order_id, product.slug, qty, order.total, pay_method)
        return order

    # --- approve ----------------------------------------------------------
    def approve_order(self, order_id) -> ApprovalResult:
        try:
            allocation, product_id = self.store.run(self._approve, order_id)
        except InsufficientStockFailure as e:
            logger.info("[order=%s] approval refused: %s", order_id, e.message)
            raise

        remaining = inventory_service.available_count(self.store.session, product_id)
        return ApprovalResult(
            order_id=order_id,
            codes=list(allocation.codes),
            remaining=remaining,
            already=allocation.already,
        )

    def _approve(self, session, order_id):
        order = order_service.get_order_by_id(session, order_id, for_update=True)
        if not order:
            raise NotFoundError("Order not found", order_id=order_id)
        if order.status == OrderStatus.REJECTED:
            raise InvalidTransitionError(order_id, order.status, OrderStatus.APPROVED)
        return self.allocator.allocate(session, order), order.product_id

    # --- reject -----------------------------------------------------------
    def reject_order(self, order_id) -> Order:
        return self.store.run(self._reject, order_id)

    def _reject(self, session, order_id):
        order = order_service.get_order_by_id(session, order_id, for_update=True)
        if not order:
            raise NotFoundError("Order not found", order_id=order_id)
        if order.status == OrderStatus.REJECTED:
            return order
        if order.status == OrderStatus.APPROVED:
            raise InvalidTransitionError(order_id, order.status, OrderStatus.REJECTED)

        order_service.set_status(session, order, OrderStatus.REJECTED)
        logger.info("[order=%s] rejected", order_id)
        return order

    # --- read -------------------------------------------------------------
    def get_order(self, order_id) -> OrderView:
        session = self.store.session
        order = order_service.get_order_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found", order_id=order_id)
        return OrderView(
            order=order,
            codes=order_service.get_order_codes(session, order_id),
            remaining=inventory_service.available_count(session, order.product_id),
        )
