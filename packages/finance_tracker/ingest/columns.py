"""Header-based column detection for statement CSV exports.

The detector looks for Portuguese/English keywords in the header cells and
falls back to the Nubank account statement layout
(``Data, Valor, Identificador, Descrição``) for any column it cannot find.
It never raises: a file with an unexpected layout simply gets the fallback
positions and most of its rows are later dropped by the row parser.
"""

from __future__ import annotations

import csv

from ..models import ColumnIndices

# Substrings searched in each lower-cased header cell, in priority order.
DATE_KEYWORDS: tuple[str, ...] = ("data", "date")
DESCRIPTION_KEYWORDS: tuple[str, ...] = ("desc", "title", "mercado")
AMOUNT_KEYWORDS: tuple[str, ...] = ("valor", "amount")

# Nubank account statement: Data, Valor, Identificador, Descrição
NUBANK_STATEMENT_FALLBACK = ColumnIndices(date=0, description=3, amount=1)

# Legacy Nubank credit card export: date, category, title, amount
NUBANK_CARD_LAYOUT = ColumnIndices(date=0, description=2, amount=3)

SEMICOLON = ";"
COMMA = ","


def detect_delimiter(line: str) -> str:
    """Return ``";"`` when ``line`` contains a semicolon, else ``","``.

    Semicolon exports write amounts with a decimal comma, so a line that uses
    semicolons never splits on commas.
    """

    return SEMICOLON if SEMICOLON in line else COMMA


def split_cells(line: str, delimiter: str | None = None) -> list[str]:
    """Split one line into cells, honouring double-quoted fields."""

    delim = delimiter or detect_delimiter(line)
    return next(csv.reader([line], delimiter=delim), [])


def _find_column(cells: list[str], keywords: tuple[str, ...]) -> int:
    for idx, cell in enumerate(cells):
        if any(k in cell for k in keywords):
            return idx
    return -1


def detect_columns(
    header_line: str, *, fallback: ColumnIndices = NUBANK_STATEMENT_FALLBACK
) -> ColumnIndices:
    """Return the ``(date, description, amount)`` indices for ``header_line``.

    Each column is resolved independently; a column with no keyword match
    takes its position from ``fallback``.
    """

    cells = [c.strip().strip('"').lower() for c in split_cells(header_line)]

    date_idx = _find_column(cells, DATE_KEYWORDS)
    description_idx = _find_column(cells, DESCRIPTION_KEYWORDS)
    amount_idx = _find_column(cells, AMOUNT_KEYWORDS)

    return ColumnIndices(
        date=date_idx if date_idx != -1 else fallback.date,
        description=description_idx if description_idx != -1 else fallback.description,
        amount=amount_idx if amount_idx != -1 else fallback.amount,
    )


__all__ = [
    "DATE_KEYWORDS",
    "DESCRIPTION_KEYWORDS",
    "AMOUNT_KEYWORDS",
    "NUBANK_STATEMENT_FALLBACK",
    "NUBANK_CARD_LAYOUT",
    "detect_delimiter",
    "split_cells",
    "detect_columns",
]
