from __future__ import annotations

from decimal import Decimal

from finance_tracker import (
    Category,
    ClassifiedTransaction,
    CategoryTotal,
    DashboardStats,
    MonthlyTotals,
    PaymentMethod,
    TransactionType,
    expenses_by_category,
    monthly_trend,
    rank_expenses,
    summarize,
)


def _tx(
    description: str,
    amount: str,
    type_: TransactionType = TransactionType.EXPENSE,
    *,
    date: str = "2024-03-01",
    category: Category = Category.OTHER,
) -> ClassifiedTransaction:
    return ClassifiedTransaction(
        date=date,
        description=description,
        amount=Decimal(amount),
        category=category,
        type=type_,
        payment_method=PaymentMethod.PIX,
    )


def test_summarize_totals_and_balance():
    stats = summarize(
        [
            _tx("Salário", "5000.00", TransactionType.INCOME),
            _tx("Aluguel", "1500.00"),
            _tx("Padaria", "20.50"),
            _tx("Caixinha", "300.00", TransactionType.INVESTMENT),
        ]
    )
    assert stats == DashboardStats(
        total_income=Decimal("5000.00"),
        total_expense=Decimal("1520.50"),
        total_invested=Decimal("300.00"),
        balance=Decimal("3179.50"),
    )


def test_summarize_empty():
    stats = summarize([])
    assert stats.balance == Decimal("0")


def test_rank_expenses_groups_by_cleaned_title():
    ranked = rank_expenses(
        [
            _tx("Padaria Real", "10.00", category=Category.FOOD),
            _tx("Aluguel", "1500.00", category=Category.HOUSING),
            _tx("Compra no débito - Padaria Real", "15.00"),
            _tx("Salário", "5000.00", TransactionType.INCOME),
        ]
    )
    assert [(e.name, e.amount, e.count, e.category) for e in ranked] == [
        ("Aluguel", Decimal("1500.00"), 1, Category.HOUSING),
        ("Padaria Real", Decimal("25.00"), 2, Category.FOOD),
    ]


def test_rank_expenses_month_filter_and_stable_ties():
    ranked = rank_expenses(
        [
            _tx("Uber", "30.00", date="2024-02-28"),
            _tx("Cinema", "30.00", date="2024-03-02"),
            _tx("Padaria", "30.00", date="2024-03-05"),
        ],
        month="2024-03",
    )
    assert [e.name for e in ranked] == ["Cinema", "Padaria"]


def test_expenses_by_category_skips_income_and_investment():
    totals = expenses_by_category(
        [
            _tx("Padaria", "20.00", category=Category.FOOD),
            _tx("Aluguel", "1500.00", category=Category.HOUSING),
            _tx("Mercado", "80.00", category=Category.FOOD),
            _tx("Caixinha", "300.00", TransactionType.INVESTMENT),
            _tx("Salário", "5000.00", TransactionType.INCOME),
        ]
    )
    assert totals == [
        CategoryTotal(category=Category.HOUSING, amount=Decimal("1500.00")),
        CategoryTotal(category=Category.FOOD, amount=Decimal("100.00")),
    ]


def test_expenses_by_category_month_filter():
    totals = expenses_by_category(
        [
            _tx("Uber", "30.00", date="2024-02-28", category=Category.TRANSPORT),
            _tx("Cinema", "45.00", date="2024-03-02", category=Category.LEISURE),
        ],
        month="2024-03",
    )
    assert [t.category for t in totals] == [Category.LEISURE]


def test_monthly_trend_keeps_latest_months_oldest_first():
    records = [
        _tx("Salário", "5000.00", TransactionType.INCOME, date=f"2024-{m:02d}-05")
        for m in range(1, 9)
    ]
    records.append(_tx("Aluguel", "1500.00", date="2024-08-10"))
    records.append(_tx("Caixinha", "200.00", TransactionType.INVESTMENT, date="2024-08-11"))

    trend = monthly_trend(records)
    assert [t.month for t in trend] == [f"2024-{m:02d}" for m in range(3, 9)]
    assert trend[-1] == MonthlyTotals(
        month="2024-08", income=Decimal("5000.00"), expense=Decimal("1700.00")
    )
    assert trend[0].expense == Decimal("0")


def test_monthly_trend_limits():
    records = [_tx("Padaria", "10.00", date="2024-03-01"), _tx("Uber", "5.00", date="2024-04-01")]
    assert [t.month for t in monthly_trend(records, months=1)] == ["2024-04"]
    assert monthly_trend(records, months=0) == []
    assert monthly_trend([]) == []
