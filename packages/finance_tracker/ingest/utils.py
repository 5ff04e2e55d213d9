"""Ingest utilities shared by the pipeline and the CLI.

Exposes the file-reading helper (the only I/O in an import) and the provider
dispatch that turns statement text into :class:`ParsedTransaction` records.
"""

from __future__ import annotations

from collections.abc import Iterator
from os import PathLike
from pathlib import Path

from ..errors import StatementReadError
from ..models import ParsedTransaction
from .adapters.nubank_card_csv import parse_card_rows
from .rows import parse_rows

# Header-detecting account statement parser is the canonical format.
DEFAULT_PROVIDER = "nubank"

_PROVIDER_ALIASES: dict[str, str] = {
    "nubank": "nubank",
    "nubank_statement": "nubank",
    "nubank_account": "nubank",
    "nubank_card": "nubank_card",
    "nubank_credit_card": "nubank_card",
}


def resolve_provider(provider: str) -> str:
    """Return the canonical provider key for ``provider``.

    Raises ``ValueError`` for unknown providers.
    """

    p = provider.strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return _PROVIDER_ALIASES[p]
    except KeyError:
        raise ValueError(f"unknown provider: {provider!r}") from None


def parse_statement(text: str, *, provider: str = DEFAULT_PROVIDER) -> Iterator[ParsedTransaction]:
    """Parse statement ``text`` with the parser registered for ``provider``."""

    if resolve_provider(provider) == "nubank_card":
        return parse_card_rows(text)
    return parse_rows(text)


def read_statement_text(path: str | PathLike[str]) -> str:
    """Read a statement export as UTF-8 text, tolerating a byte-order mark.

    Any failure to open, read or decode the file is raised as
    :class:`StatementReadError` with the original exception chained.
    """

    p = Path(path)
    try:
        return p.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise StatementReadError(f"File not found: {p}") from e
    except PermissionError as e:
        raise StatementReadError(f"Permission denied: {p}") from e
    except UnicodeDecodeError as e:
        raise StatementReadError(f"File is not valid UTF-8 text: {p}") from e
    except OSError as e:
        raise StatementReadError(f"Failed to read '{p}': {e}") from e


__all__ = ["DEFAULT_PROVIDER", "resolve_provider", "parse_statement", "read_statement_text"]
