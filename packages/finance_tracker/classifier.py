"""Rule-based classification of imported statement rows.

Three independent decisions are made per row:

- ``type`` from the sign of the raw amount (negative -> expense).
- ``category`` from the cleaned title, using :data:`CATEGORY_RULES`.
- ``payment_method`` from the raw (uncleaned) description, which still
  carries the boilerplate naming the method ("Compra no débito", "pelo Pix"),
  using :data:`PAYMENT_METHOD_RULES`.

Both rule tables are evaluated top to bottom and the first match wins; there
is no scoring. Keywords are written against folded text (see
:func:`finance_tracker.descriptions.fold_text`), so ``"Farmácia"`` and
``"FARMACIA"`` match the same rule. Very short keywords are anchored on word
boundaries to keep them from matching inside unrelated names.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from decimal import Decimal
from typing import NamedTuple

from .descriptions import fold_text
from .models import Category, Classification, PaymentMethod, TransactionType


def _keywords(words: Sequence[str]) -> re.Pattern[str]:
    return re.compile("|".join(f"(?:{w})" for w in words))


class CategoryRule(NamedTuple):
    """One keyword group mapped to a category.

    ``redirects`` are checked only after ``pattern`` matched; the first
    redirect that also matches replaces ``category``.
    """

    name: str
    pattern: re.Pattern[str]
    category: Category
    redirects: tuple[tuple[re.Pattern[str], Category], ...] = ()


class PaymentMethodRule(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    method: PaymentMethod


# fmt: off
FOOD_KEYWORDS: tuple[str, ...] = (
    "ifood", "uber eats", "rappi", r"z\.? ?delivery", "restaurante", "burger",
    "mcdonald", "subway", "pizza", "sushi", r"pao.de.acucar", "carrefour",
    r"\bextra\b", "assai", "atacad", "mercado", "padaria", "coffee", "cafe",
    "starbucks", "outback", "madero", "madeiro",
)

TRANSPORT_KEYWORDS: tuple[str, ...] = (
    "uber", r"\b99\b", "99 ?app", "taxi", "posto", "gasolina", "ipiranga",
    r"\bshell\b", "petrobras", "estacionamento", "parking", "sem parar",
    "veloe", "pedagio", "buser", "clickbus", "passagem",
)

HEALTH_KEYWORDS: tuple[str, ...] = (
    "droga", "farmacia", "pague menos", r"\braia\b", "ultrafarma", "panvel",
    "hospital", "clinica", "laboratorio", "medico", "dentista", "exame",
    "consulta", "psicolog", "terapia",
)

HOUSING_KEYWORDS: tuple[str, ...] = (
    r"\bluz\b", "energia", r"\bagua\b", "saneamento", "condominio", "aluguel",
    "internet", r"\bvivo\b", r"\bclaro\b", r"\btim\b", r"\boi\b", r"\bnet\b",
    r"\bsky\b", "netflix", "amazon prime", "disney", "spotify", "youtube",
    "apple", "google", r"\baws\b", "azure",
)

# Streaming and game platforms share the utilities group but are leisure.
ENTERTAINMENT_KEYWORDS: tuple[str, ...] = (
    "netflix", "amazon prime", "disney", "spotify", "youtube", "apple",
    "steam", "playstation", "xbox", "nintendo", "game",
)

LEISURE_KEYWORDS: tuple[str, ...] = (
    "cinema", "movie", "teatro", r"\bshow", "ingresso", "eventim", "ticket",
    "sympla", "smart ?fit", r"\bgym\b", "academia",
)
# fmt: on


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("food", _keywords(FOOD_KEYWORDS), Category.FOOD),
    CategoryRule("transport", _keywords(TRANSPORT_KEYWORDS), Category.TRANSPORT),
    CategoryRule("health", _keywords(HEALTH_KEYWORDS), Category.HEALTH),
    CategoryRule(
        "housing",
        _keywords(HOUSING_KEYWORDS),
        Category.HOUSING,
        redirects=((_keywords(ENTERTAINMENT_KEYWORDS), Category.LEISURE),),
    ),
    CategoryRule("leisure", _keywords(LEISURE_KEYWORDS), Category.LEISURE),
)

DEFAULT_CATEGORY = Category.OTHER


PAYMENT_METHOD_RULES: tuple[PaymentMethodRule, ...] = (
    PaymentMethodRule("pix", re.compile("pix"), PaymentMethod.PIX),
    PaymentMethodRule("debit", re.compile("debito"), PaymentMethod.DEBIT_CARD),
    PaymentMethodRule("credit", re.compile("credito"), PaymentMethod.CREDIT_CARD),
    PaymentMethodRule("redemption", re.compile("rdb|resgate"), PaymentMethod.OTHER),
)

# Statement rows with no hint are assumed to be card purchases.
DEFAULT_PAYMENT_METHOD = PaymentMethod.CREDIT_CARD


def match_category_rule(description: str) -> CategoryRule | None:
    """Return the first rule whose keyword group matches ``description``."""

    folded = fold_text(description)
    for rule in CATEGORY_RULES:
        if rule.pattern.search(folded):
            return rule
    return None


def classify_category(description: str) -> Category:
    """Return the category for a cleaned description (``OTHER`` if no rule fires)."""

    rule = match_category_rule(description)
    if rule is None:
        return DEFAULT_CATEGORY
    folded = fold_text(description)
    for pattern, category in rule.redirects:
        if pattern.search(folded):
            return category
    return rule.category


def infer_payment_method(raw_description: str) -> PaymentMethod:
    folded = fold_text(raw_description)
    for rule in PAYMENT_METHOD_RULES:
        if rule.pattern.search(folded):
            return rule.method
    return DEFAULT_PAYMENT_METHOD


def infer_type(raw_amount: Decimal) -> TransactionType:
    """Negative amounts are expenses; zero and positive amounts are income.

    Investments are never inferred from a statement.
    """

    return TransactionType.EXPENSE if raw_amount < 0 else TransactionType.INCOME


def classify(description: str, raw_description: str, raw_amount: Decimal) -> Classification:
    """Classify one row from its cleaned title, raw description and signed amount."""

    return Classification(
        category=classify_category(description),
        type=infer_type(raw_amount),
        payment_method=infer_payment_method(raw_description),
    )


__all__ = [
    "CategoryRule",
    "PaymentMethodRule",
    "CATEGORY_RULES",
    "PAYMENT_METHOD_RULES",
    "DEFAULT_CATEGORY",
    "DEFAULT_PAYMENT_METHOD",
    "match_category_rule",
    "classify_category",
    "infer_payment_method",
    "infer_type",
    "classify",
]
