"""
Order Service — the order ledger.
Creates orders, reads them back, and performs the raw status mutation used
by the allocation engine and lifecycle controller inside a unit of work.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, update
from sqlalchemy.orm.attributes import set_committed_value

from stockroom.errors import InvalidTransitionError, StoreConflictError
from stockroom.models import Order, OrderCode, OrderStatus

CENTS = Decimal("0.01")

VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.APPROVED, OrderStatus.REJECTED},
    OrderStatus.APPROVED: set(),
    OrderStatus.REJECTED: set(),
}


def generate_order_id(prefix="LS", now=None):
    now = now or datetime.now(timezone.utc)
    return f"{prefix}-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


def compute_total(unit_price, qty):
    return (Decimal(unit_price) * qty).quantize(CENTS, rounding=ROUND_HALF_UP)


def create_order(session, product, qty, pay_method, txid, contact=None, prefix="LS"):
    """Total is fixed here from the current price and never recomputed."""
    order = Order(
        order_id=generate_order_id(prefix),
        product_id=product.id,
        qty=qty,
        total=compute_total(product.unit_price, qty),
        pay_method=pay_method,
        txid=txid,
        contact=contact or None,
        status=OrderStatus.PENDING,
    )
    session.add(order)
    session.flush()
    return order


def get_order_by_id(session, order_id, for_update=False):
    stmt = select(Order).where(Order.order_id == order_id)
    if for_update:
        stmt = stmt.with_for_update(of=Order).execution_options(populate_existing=True)
    return session.execute(stmt).unique().scalar_one_or_none()


def get_order_codes(session, order_id):
    return session.execute(
        select(OrderCode.code).where(OrderCode.order_id == order_id).order_by(OrderCode.id)
    ).scalars().all()


def list_recent_orders(session, limit=200):
    return session.execute(
        select(Order).order_by(Order.id.desc()).limit(limit)
    ).unique().scalars().all()


def set_status(session, order, new_status, approved_at=None):
    """
    PENDING -> APPROVED: only from the allocation engine
    PENDING -> REJECTED: lifecycle controller
    The update is conditional on the status we loaded; if another unit of
    work moved the order first, nothing is written and the caller retries.
    """
    current = order.status
    if new_status not in VALID_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(order.order_id, current, new_status)

    values = {"status": new_status}
    if new_status == OrderStatus.APPROVED:
        values["approved_at"] = approved_at or datetime.now(timezone.utc)

    result = session.execute(
        update(Order)
        .where(Order.order_id == order.order_id, Order.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise StoreConflictError(f"Order {order.order_id} changed concurrently")

    for key, value in values.items():
        set_committed_value(order, key, value)
    return order
