"""Public interface for the ``finance_tracker`` package.

This module exposes the statement import pipeline, the report helpers and the
public models/types as the stable import surface. There is no runtime logic
here, only symbol re-exports.
"""

from .classifier import classify
from .descriptions import clean_description
from .errors import StatementImportError, StatementReadError, UnrecognizedFormatError
from .ingest.columns import detect_columns
from .ingest.rows import normalize_amount, normalize_date, parse_rows
from .models import (
    Category,
    ClassifiedTransaction,
    CleanedDescription,
    ColumnIndices,
    ParsedTransaction,
    PaymentMethod,
    RawStatementRow,
    TransactionType,
)
from .pipeline import aimport_statement_file, import_statement, import_statement_file
from .reports import (
    CategoryTotal,
    DashboardStats,
    MonthlyTotals,
    RankedExpense,
    expenses_by_category,
    monthly_trend,
    rank_expenses,
    summarize,
)

__all__ = [
    # Pipeline
    "import_statement",
    "import_statement_file",
    "aimport_statement_file",
    # Stages
    "detect_columns",
    "parse_rows",
    "normalize_date",
    "normalize_amount",
    "clean_description",
    "classify",
    # Reports
    "summarize",
    "rank_expenses",
    "expenses_by_category",
    "monthly_trend",
    "DashboardStats",
    "RankedExpense",
    "CategoryTotal",
    "MonthlyTotals",
    # Models / types
    "Category",
    "TransactionType",
    "PaymentMethod",
    "ColumnIndices",
    "RawStatementRow",
    "ParsedTransaction",
    "ClassifiedTransaction",
    "CleanedDescription",
    # Errors
    "StatementImportError",
    "UnrecognizedFormatError",
    "StatementReadError",
]
