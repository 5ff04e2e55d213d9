"""Row parsing for delimiter-separated bank statement text.

Turns the full text of an export into :class:`ParsedTransaction` records in a
single forward pass. Rows are never rejected loudly: a line whose date or
amount cannot be normalized is dropped and logged at DEBUG level.

Locale rules
------------
- Fields are separated by semicolons when the header uses them and by
  commas otherwise. Double-quoted fields may contain the delimiter.
- Dates are ``DD/MM/YYYY`` (day and month may be unpadded) or ``YYYY-MM-DD``.
- Amounts use the Brazilian convention when both ``.`` and ``,`` appear
  (``1.234,56``), a decimal comma when only ``,`` appears (``40,00``) and a
  decimal point otherwise (``40.00``). A leading ``R$`` is ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import date
from decimal import Decimal

from ..logging_setup import get_logger
from ..models import ColumnIndices, ParsedTransaction, RawStatementRow
from .columns import COMMA, SEMICOLON, detect_columns, detect_delimiter, split_cells

_logger = get_logger("finance_tracker.ingest.rows")

_BR_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")

# Plain digits after separator normalization; no exponents, no signs.
_PLAIN_AMOUNT_RE = re.compile(r"\d+(?:\.\d+)?")
# Stored as NUMERIC(18, 2).
MAX_INTEGER_DIGITS = 16

_CURRENCY_PREFIX = "R$"


def non_empty_lines(text: str) -> list[str]:
    """Return the trimmed, non-empty lines of ``text`` in order."""

    return [line.strip() for line in text.splitlines() if line.strip()]


def split_fields(line: str, delimiter: str | None = None) -> list[str]:
    """Split a data line on ``delimiter`` outside double quotes.

    Without an explicit delimiter the line picks its own: semicolon when it
    has one, comma otherwise.
    """

    return split_cells(line, delimiter)


def normalize_date(raw: str | None) -> str | None:
    """Return ``raw`` as ``YYYY-MM-DD`` or ``None`` when it is not a valid date.

    ``"5/1/2024"`` becomes ``"2024-01-05"``; ISO dates pass through unchanged.
    Impossible calendar dates (``31/02/2024``) are rejected.
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    # Some exports append a time component; only the date part matters.
    first = s.split()[0]

    if "/" in first:
        m = _BR_DATE_RE.fullmatch(first)
        if m is None:
            return None
        day, month, year = (int(g) for g in m.groups())
    else:
        m = _ISO_DATE_RE.fullmatch(first)
        if m is None:
            return None
        year, month, day = (int(g) for g in m.groups())

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_amount(raw: str | None) -> Decimal | None:
    """Parse a locale-formatted amount into a signed ``Decimal``.

    Returns ``None`` when the value is empty or unparseable, uses exponent
    notation, or has more than :data:`MAX_INTEGER_DIGITS` integer digits.
    """

    if raw is None:
        return None
    s = raw.replace('"', "").strip()
    if not s:
        return None

    negative = False
    if s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:].lstrip()
    if s.upper().startswith(_CURRENCY_PREFIX):
        s = s[len(_CURRENCY_PREFIX) :].strip()
    # Sign may also come after the currency symbol ("R$ -45,90").
    if s and s[0] in "+-":
        negative = negative != (s[0] == "-")
        s = s[1:].lstrip()

    if "," in s and "." in s:
        s = s.replace(".", "").replace(",", ".")
    elif "," in s:
        s = s.replace(",", ".")

    if _PLAIN_AMOUNT_RE.fullmatch(s) is None:
        return None
    if len(s.split(".", 1)[0].lstrip("0")) > MAX_INTEGER_DIGITS:
        return None
    value = Decimal(s)
    return -value if negative else value


def _cell(fields: list[str], idx: int) -> str | None:
    if idx < 0 or idx >= len(fields):
        return None
    value = fields[idx].replace('"', "").strip()
    return value or None


def extract_raw_row(fields: list[str], columns: ColumnIndices) -> RawStatementRow | None:
    """Pick date/description/amount out of ``fields``.

    A missing or blank description or amount cell falls back to the last field
    of the row. Returns ``None`` when a required value is absent or the amount
    does not parse.
    """

    last = _cell(fields, len(fields) - 1)
    date_raw = _cell(fields, columns.date)
    description = _cell(fields, columns.description) or last
    amount_raw = _cell(fields, columns.amount) or last
    if not date_raw or not description or not amount_raw:
        return None

    amount = normalize_amount(amount_raw)
    if amount is None:
        return None
    return RawStatementRow(date=date_raw, description=description, amount=amount)


def to_parsed(row: RawStatementRow) -> ParsedTransaction | None:
    """Normalize the date of ``row``; ``None`` drops the row."""

    iso = normalize_date(row.date)
    if iso is None:
        return None
    return ParsedTransaction(
        date=iso,
        description=row.description,
        amount=abs(row.amount),
        raw_amount=row.amount,
    )


def parse_rows(text: str, columns: ColumnIndices | None = None) -> Iterator[ParsedTransaction]:
    """Yield parsed transactions from the data lines of ``text``.

    The first non-empty line is the header. When ``columns`` is ``None`` the
    indices are detected from it. Input with fewer than two non-empty lines
    yields nothing.
    """

    lines = non_empty_lines(text)
    if len(lines) < 2:
        return

    header = lines[0]
    cols = columns if columns is not None else detect_columns(header)
    # A header without any delimiter leaves the choice to each line.
    delimiter = detect_delimiter(header) if COMMA in header or SEMICOLON in header else None
    _logger.debug(
        "parse_rows:columns date=%d description=%d amount=%d",
        cols.date,
        cols.description,
        cols.amount,
    )

    for row_no, line in enumerate(lines[1:], start=1):
        raw = extract_raw_row(split_fields(line, delimiter), cols)
        parsed = to_parsed(raw) if raw is not None else None
        if parsed is None:
            _logger.debug("parse_rows:dropped row=%d", row_no)
            continue
        yield parsed


__all__ = [
    "non_empty_lines",
    "split_fields",
    "normalize_date",
    "normalize_amount",
    "MAX_INTEGER_DIGITS",
    "extract_raw_row",
    "to_parsed",
    "parse_rows",
]
