"""Persistence integration for imported transactions.

Functions here write pipeline output to the shared database owned by
``libs/db``. Identity (a UUID per row) and timestamps are assigned here, never
by the import pipeline. There is no deduplication or concurrency contract:
the last write wins.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from db.models.finance import Transaction
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import Category, ClassifiedTransaction, PaymentMethod, TransactionType

_logger = get_logger("finance_tracker.persistence")


# NUMERIC(18, 2) on the transactions table.
_MAX_STORED_AMOUNT = Decimal("1e16")


def _to_decimal_2(value: Decimal) -> Decimal:
    if not value.is_finite() or abs(value) >= _MAX_STORED_AMOUNT:
        raise ValueError(f"amount does not fit NUMERIC(18, 2): {value}")
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def bulk_insert_transactions(session: Session, records: Iterable[ClassifiedTransaction]) -> int:
    """Insert ``records`` with fresh ids and return how many rows were added.

    The caller owns the transaction boundary (see ``db.client.session_scope``).
    """

    rows = [
        Transaction(
            id=str(uuid.uuid4()),
            description=r.description,
            amount=_to_decimal_2(r.amount),
            date=r.date,
            category=r.category.value,
            type=r.type.value,
            payment_method=r.payment_method.value,
        )
        for r in records
    ]
    session.add_all(rows)
    session.flush()
    _logger.info("persistence:bulk_insert rows=%d", len(rows))
    return len(rows)


def load_transactions(session: Session, *, month: str | None = None) -> list[ClassifiedTransaction]:
    """Return stored transactions ordered by date, optionally for one ``YYYY-MM``."""

    stmt = select(Transaction).order_by(Transaction.date, Transaction.created_at)
    if month:
        stmt = stmt.where(Transaction.date.startswith(month))
    return [
        ClassifiedTransaction(
            date=row.date,
            description=row.description,
            amount=Decimal(row.amount),
            category=Category(row.category),
            type=TransactionType(row.type),
            payment_method=PaymentMethod(row.payment_method),
        )
        for row in session.scalars(stmt)
    ]


__all__ = ["bulk_insert_transactions", "load_transactions"]
