"""Statement import pipeline: raw text in, classified records out.

Stages run strictly forward and hold no state between calls::

    text -> parse_statement -> clean_description -> classify -> records

Public API:
    - :func:`import_statement`
    - :func:`import_statement_file`
    - :func:`aimport_statement_file`
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping, Sequence
from os import PathLike

from .classifier import classify
from .descriptions import describe
from .errors import UnrecognizedFormatError
from .ingest.rows import non_empty_lines
from .ingest.utils import DEFAULT_PROVIDER, parse_statement, read_statement_text
from .logging_setup import get_logger
from .models import Category, ClassifiedTransaction
from .oracle import CategorizationOracle

_logger = get_logger("finance_tracker.pipeline")


def _consult_oracle(
    oracle: CategorizationOracle | None, descriptions: Sequence[str]
) -> Mapping[str, Category]:
    """Return oracle overrides for ``descriptions``; empty on absence or failure."""

    if oracle is None:
        return {}
    unique = list(dict.fromkeys(descriptions))
    try:
        answered = oracle.categorize(unique)
    except Exception as e:  # noqa: BLE001 - oracle is optional; rules still apply
        _logger.warning("import_statement:oracle_failed error=%s", e.__class__.__name__)
        return {}
    return {d: c for d, c in answered.items() if isinstance(c, Category)}


def import_statement(
    text: str,
    *,
    provider: str = DEFAULT_PROVIDER,
    oracle: CategorizationOracle | None = None,
) -> list[ClassifiedTransaction]:
    """Parse, clean and classify a statement export.

    Parameters
    ----------
    text:
        Full text of the CSV export (header on the first non-empty line).
    provider:
        ``"nubank"`` (header detection, default) or ``"nubank_card"`` (legacy
        fixed layout).
    oracle:
        Optional categorization oracle consulted with the cleaned
        descriptions; its answers override the rule-based category.

    Returns
    -------
    list[ClassifiedTransaction]
        One record per usable row, in input order. Empty when the text has
        no data lines (empty or header-only input).

    Raises
    ------
    UnrecognizedFormatError
        When the text has data lines but none of them survives parsing.
    ValueError
        For an unknown ``provider``.
    """

    t0 = time.perf_counter()
    parsed = list(parse_statement(text, provider=provider))
    data_lines = max(len(non_empty_lines(text)) - 1, 0)
    if data_lines == 0:
        _logger.info("import_statement:empty provider=%s", provider)
        return []
    if not parsed:
        _logger.warning(
            "import_statement:unrecognized_format provider=%s data_lines=%d",
            provider,
            data_lines,
        )
        raise UnrecognizedFormatError()

    titles = [describe(p.description) for p in parsed]
    overrides = _consult_oracle(oracle, [t.text for t in titles])

    records: list[ClassifiedTransaction] = []
    for row, title in zip(parsed, titles, strict=True):
        result = classify(title.text, row.description, row.raw_amount)
        records.append(
            ClassifiedTransaction(
                date=row.date,
                description=title.text,
                amount=row.amount,
                category=overrides.get(title.text, result.category),
                type=result.type,
                payment_method=result.payment_method,
            )
        )

    _logger.info(
        "import_statement:done provider=%s rows=%d dropped=%d oracle_overrides=%d latency_ms=%.2f",
        provider,
        len(records),
        data_lines - len(parsed),
        len(overrides),
        (time.perf_counter() - t0) * 1000.0,
    )
    return records


def import_statement_file(
    path: str | PathLike[str],
    *,
    provider: str = DEFAULT_PROVIDER,
    oracle: CategorizationOracle | None = None,
) -> list[ClassifiedTransaction]:
    """Read ``path`` and run :func:`import_statement` on its contents.

    Raises :class:`~finance_tracker.errors.StatementReadError` when the file
    cannot be read, distinct from
    :class:`~finance_tracker.errors.UnrecognizedFormatError`.
    """

    return import_statement(read_statement_text(path), provider=provider, oracle=oracle)


async def aimport_statement_file(
    path: str | PathLike[str],
    *,
    provider: str = DEFAULT_PROVIDER,
    oracle: CategorizationOracle | None = None,
) -> list[ClassifiedTransaction]:
    """Async variant of :func:`import_statement_file`.

    The file read is the only suspend point; parsing and classification run
    synchronously once the text is in memory.
    """

    text = await asyncio.to_thread(read_statement_text, path)
    return import_statement(text, provider=provider, oracle=oracle)


__all__ = ["import_statement", "import_statement_file", "aimport_statement_file"]
