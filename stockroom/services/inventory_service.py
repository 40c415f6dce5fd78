"""
Inventory Service — code units per product.
available_count is advisory; unsold_pool is the authoritative read and must
only be called inside the allocation unit of work.
"""

import logging
import re

from sqlalchemy import func, select

from stockroom.errors import ValidationError
from stockroom.models import CodeUnit

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")


def parse_codes(text):
    """Bulk-upload text: one code per line, blanks ignored."""
    return [line.strip() for line in _LINE_SPLIT.split(text or "") if line.strip()]


def available_count(session, product_id):
    return session.execute(
        select(func.count(CodeUnit.id)).where(
            CodeUnit.product_id == product_id,
            CodeUnit.sold.is_(False),
        )
    ).scalar_one()


def unsold_pool(session, product_id):
    return session.execute(
        select(CodeUnit)
        .where(CodeUnit.product_id == product_id, CodeUnit.sold.is_(False))
        .order_by(CodeUnit.id)
        .with_for_update()
    ).scalars().all()


def bulk_insert(session, product, codes):
    """
    Append unsold code units. Duplicates of existing codes are accepted.
    Returns the number of codes added.
    """
    cleaned = [c.strip() for c in codes if c and c.strip()]
    if not cleaned:
        raise ValidationError("No codes")

    session.add_all(CodeUnit(product_id=product.id, code=c) for c in cleaned)
    session.flush()
    logger.info("added %d codes to product=%s", len(cleaned), product.slug)
    return len(cleaned)
