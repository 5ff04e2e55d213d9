"""Adapter for the legacy Nubank credit card CSV export.

CSV header (fixed layout, no detection):
``date,category,title,amount``

Unlike the account statement parser in :mod:`finance_tracker.ingest.rows`,
this layout is plain comma-separated CSV read with :mod:`csv` (never split
on semicolons) and requires at least four fields per row. Column positions come from
:data:`~finance_tracker.ingest.columns.NUBANK_CARD_LAYOUT` and are never
mixed with the account statement fallback. Date and amount normalization are
shared with the account statement parser.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator

from ...logging_setup import get_logger
from ...models import ParsedTransaction, RawStatementRow
from ..columns import NUBANK_CARD_LAYOUT
from ..rows import normalize_amount, to_parsed

EXACT_HEADER = "date,category,title,amount"

_logger = get_logger("finance_tracker.ingest.adapters.nubank_card_csv")


def is_card_export(header_line: str) -> bool:
    """Return True when ``header_line`` is the card export header."""

    return header_line.strip().lstrip("\ufeff").replace(" ", "").lower() == EXACT_HEADER


def parse_card_rows(text: str) -> Iterator[ParsedTransaction]:
    """Yield parsed transactions from a card export, skipping its header."""

    reader = csv.reader(io.StringIO(text))
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    if not rows:
        return
    header = ",".join(rows[0])
    if not is_card_export(header):
        _logger.debug("parse_card_rows:unexpected_header header=%r", header)
    cols = NUBANK_CARD_LAYOUT
    for row_no, row in enumerate(rows[1:], start=1):
        parts = [cell.strip() for cell in row]
        if len(parts) < 4:
            _logger.debug("parse_card_rows:dropped row=%d reason=short", row_no)
            continue

        date_raw = parts[cols.date]
        title = parts[cols.description]
        amount = normalize_amount(parts[cols.amount])
        if not date_raw or not title or amount is None:
            _logger.debug("parse_card_rows:dropped row=%d reason=missing", row_no)
            continue

        parsed = to_parsed(RawStatementRow(date=date_raw, description=title, amount=amount))
        if parsed is None:
            _logger.debug("parse_card_rows:dropped row=%d reason=date", row_no)
            continue
        yield parsed


__all__ = ["EXACT_HEADER", "is_card_export", "parse_card_rows"]
