"""Data models for the statement import pipeline.

Records are frozen value objects with no identity: identifiers and timestamps
are assigned by the persistence layer when the records are stored. Enum values
are the user-facing labels the application persists and displays.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import NamedTuple

# ---------------------------------------------------------------------------
# Closed vocabularies
# ---------------------------------------------------------------------------


class Category(StrEnum):
    HOUSING = "Habitação"
    FOOD = "Alimentação"
    TRANSPORT = "Transporte"
    HEALTH = "Saúde"
    LEISURE = "Lazer"
    OTHER = "Outros"


class TransactionType(StrEnum):
    INCOME = "Entrada"
    EXPENSE = "Saída"
    # Only produced by the in-app deposit-to-goal ("caixinha") flow.
    INVESTMENT = "Investimento"


class PaymentMethod(StrEnum):
    PIX = "Pix"
    CASH = "Dinheiro"
    MEAL_VOUCHER = "Vale-Refeição"
    CREDIT_CARD = "Cartão de Crédito"
    DEBIT_CARD = "Cartão de Débito"
    OTHER = "Outro"


# ---------------------------------------------------------------------------
# Pipeline records
# ---------------------------------------------------------------------------


class ColumnIndices(NamedTuple):
    """Zero-based positions of the date, description and amount columns."""

    date: int
    description: int
    amount: int


@dataclass(frozen=True, slots=True)
class RawStatementRow:
    """One data line as extracted from the file, before normalization.

    ``date`` keeps the source's textual form and ``amount`` its original sign.
    """

    date: str
    description: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    """A row that survived date and amount normalization.

    ``date`` is always ``YYYY-MM-DD``. ``amount`` is the absolute value of
    ``raw_amount``; the sign only survives in ``raw_amount``.
    """

    date: str
    description: str
    amount: Decimal
    raw_amount: Decimal


class Classification(NamedTuple):
    category: Category
    type: TransactionType
    payment_method: PaymentMethod


@dataclass(frozen=True, slots=True)
class ClassifiedTransaction:
    """Final pipeline output, ready for bulk insertion.

    ``amount`` is non-negative; direction is carried by ``type``.
    """

    date: str
    description: str
    amount: Decimal
    category: Category
    type: TransactionType
    payment_method: PaymentMethod

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-friendly mapping using the persisted field names."""

        return {
            "date": self.date,
            "description": self.description,
            "amount": f"{self.amount:.2f}",
            "category": self.category.value,
            "type": self.type.value,
            "paymentMethod": self.payment_method.value,
        }


@dataclass(frozen=True, slots=True)
class CleanedDescription:
    """A cleaned display title alongside the untouched original."""

    text: str
    original: str

    @property
    def was_modified(self) -> bool:
        return self.text != self.original


__all__ = [
    "Category",
    "TransactionType",
    "PaymentMethod",
    "ColumnIndices",
    "RawStatementRow",
    "ParsedTransaction",
    "Classification",
    "ClassifiedTransaction",
    "CleanedDescription",
]
