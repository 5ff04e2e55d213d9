from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------
# Core: transactions
# ---------------------------


class Transaction(Base):
    """A stored transaction.

    Rows come from manual entry, goal deposits and bulk statement imports.
    ``amount`` is always non-negative; direction lives in ``type``. Enum-like
    columns hold the user-facing labels (``"Saída"``, ``"Cartão de Débito"``).
    """

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    # ISO date text (YYYY-MM-DD)
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    payment_method: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),)


__all__ = [
    "Base",
    "Transaction",
]
