"""
Allocation Engine — binds unsold codes to an order at approval time.

allocate() runs inside the caller's unit of work:
    1. replay: an APPROVED order returns its existing bindings, no writes
    2. re-read the unsold pool for the product (row-locked where supported)
    3. pick exactly qty distinct units via the selection strategy
    4. consume them with one conditional UPDATE (... AND sold = false)
    5. append one order_codes row per unit, in selection order
    6. PENDING -> APPROVED
A short pool raises InsufficientStockFailure; a lost race on step 4 or 6
raises StoreConflictError. Either way the unit of work rolls back whole.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Sequence

from sqlalchemy import update

from stockroom.errors import AllocationError, InsufficientStockFailure, StoreConflictError
from stockroom.models import CodeUnit, OrderCode, OrderStatus
from stockroom.services import inventory_service, order_service

logger = logging.getLogger(__name__)


class RandomSelection:
    """Uniform-random choice among unsold units."""

    def __init__(self, rng=None):
        self._rng = rng or random.SystemRandom()

    def select(self, pool: Sequence[CodeUnit], n: int) -> List[CodeUnit]:
        return self._rng.sample(list(pool), n)


class OrderedSelection:
    """Oldest units first. Deterministic; handy in tests."""

    def select(self, pool: Sequence[CodeUnit], n: int) -> List[CodeUnit]:
        return sorted(pool, key=lambda unit: unit.id)[:n]


@dataclass
class Allocation:
    order_id: str
    codes: List[str] = field(default_factory=list)
    already: bool = False


class Allocator:
    def __init__(self, selection=None):
        self.selection = selection or RandomSelection()

    def allocate(self, session, order) -> Allocation:
        if order.status == OrderStatus.APPROVED:
            codes = order_service.get_order_codes(session, order.order_id)
            logger.info("[order=%s] already approved, replaying %d codes", order.order_id, len(codes))
            return Allocation(order_id=order.order_id, codes=codes, already=True)

        pool = inventory_service.unsold_pool(session, order.product_id)
        if len(pool) < order.qty:
            raise InsufficientStockFailure(order.order_id, order.qty, len(pool))

        picked = self.selection.select(pool, order.qty)
        ids = [unit.id for unit in picked]
        if len(set(ids)) != order.qty:
            raise AllocationError(f"selection returned {len(set(ids))} distinct units, expected {order.qty}")

        now = datetime.now(timezone.utc)
        result = session.execute(
            update(CodeUnit)
            .where(CodeUnit.id.in_(ids), CodeUnit.sold.is_(False))
            .values(sold=True, sold_at=now, order_id=order.order_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != len(ids):
            raise StoreConflictError(
                f"[order={order.order_id}] {len(ids) - result.rowcount} selected codes were sold concurrently"
            )

        session.add_all(OrderCode(order_id=order.order_id, code=unit.code) for unit in picked)
        session.flush()

        order_service.set_status(session, order, OrderStatus.APPROVED, approved_at=now)
        logger.info("[order=%s] allocated %d codes from product_id=%s",
                    order.order_id, len(picked), order.product_id)
        return Allocation(order_id=order.order_id, codes=[unit.code for unit in picked])
