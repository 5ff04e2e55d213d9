"""Aggregate views over classified transactions.

These are presentation helpers applied downstream of the import pipeline;
the pipeline itself never groups or deduplicates records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from .descriptions import clean_description
from .models import Category, ClassifiedTransaction, TransactionType


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_income: Decimal
    total_expense: Decimal
    total_invested: Decimal
    balance: Decimal


@dataclass(frozen=True, slots=True)
class RankedExpense:
    """Expenses sharing a cleaned title, summed."""

    name: str
    amount: Decimal
    count: int
    category: Category


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    category: Category
    amount: Decimal


@dataclass(frozen=True, slots=True)
class MonthlyTotals:
    """Income and outflow for one ``YYYY-MM`` month."""

    month: str
    income: Decimal
    expense: Decimal


def summarize(records: Iterable[ClassifiedTransaction]) -> DashboardStats:
    """Total income, expense and invested amounts.

    Money moved into a savings goal leaves the available balance, so
    ``balance = income - expense - invested``.
    """

    income = expense = invested = Decimal("0")
    for r in records:
        if r.type is TransactionType.INCOME:
            income += r.amount
        elif r.type is TransactionType.INVESTMENT:
            invested += r.amount
        else:
            expense += r.amount
    return DashboardStats(
        total_income=income,
        total_expense=expense,
        total_invested=invested,
        balance=income - expense - invested,
    )


def rank_expenses(
    records: Iterable[ClassifiedTransaction], *, month: str | None = None
) -> list[RankedExpense]:
    """Group expenses by cleaned title and order them by total, largest first.

    ``month`` (``YYYY-MM``) restricts the ranking to records dated in that
    month. A group takes the category of its first record. Ties keep the
    order in which groups first appeared.
    """

    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    categories: dict[str, Category] = {}
    for r in records:
        if r.type is not TransactionType.EXPENSE:
            continue
        if month and not r.date.startswith(month):
            continue
        name = clean_description(r.description)
        if name not in totals:
            totals[name] = Decimal("0")
            counts[name] = 0
            categories[name] = r.category
        totals[name] += r.amount
        counts[name] += 1

    ranked = [
        RankedExpense(name=n, amount=totals[n], count=counts[n], category=categories[n])
        for n in totals
    ]
    ranked.sort(key=lambda e: e.amount, reverse=True)
    return ranked


def expenses_by_category(
    records: Iterable[ClassifiedTransaction], *, month: str | None = None
) -> list[CategoryTotal]:
    """Sum EXPENSE amounts per category, largest first.

    Money set aside (INVESTMENT) is not spending and is left out. Ties keep
    first-seen order.
    """

    totals: dict[Category, Decimal] = {}
    for r in records:
        if r.type is not TransactionType.EXPENSE:
            continue
        if month and not r.date.startswith(month):
            continue
        totals[r.category] = totals.get(r.category, Decimal("0")) + r.amount

    out = [CategoryTotal(category=c, amount=a) for c, a in totals.items()]
    out.sort(key=lambda t: t.amount, reverse=True)
    return out


def monthly_trend(
    records: Iterable[ClassifiedTransaction], *, months: int = 6
) -> list[MonthlyTotals]:
    """Per-month income and outflow for the latest ``months`` months with data.

    Anything that is not INCOME counts as outflow, including INVESTMENT.
    Months are returned oldest first; months without records are absent.
    """

    if months <= 0:
        return []

    income: dict[str, Decimal] = {}
    expense: dict[str, Decimal] = {}
    for r in records:
        key = r.date[:7]
        income.setdefault(key, Decimal("0"))
        expense.setdefault(key, Decimal("0"))
        if r.type is TransactionType.INCOME:
            income[key] += r.amount
        else:
            expense[key] += r.amount

    keys = sorted(income)[-months:]
    return [MonthlyTotals(month=k, income=income[k], expense=expense[k]) for k in keys]


__all__ = [
    "DashboardStats",
    "RankedExpense",
    "CategoryTotal",
    "MonthlyTotals",
    "summarize",
    "rank_expenses",
    "expenses_by_category",
    "monthly_trend",
]
