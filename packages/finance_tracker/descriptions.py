"""Description cleanup for bank statement titles.

Nubank descriptions carry boilerplate around the part a person cares about::

    Transferência enviada pelo Pix - João Silva - 123.456.789/0001-00 - BANCO X
    Compra no débito - Supermercado Bom Preço - 12.345.678/0001-99

:func:`clean_description` reduces these to a display title (``"João Silva"``,
``"Supermercado Bom Preço"``). The cleaned title drives categorization and
the grouping used by expense rankings.

Matching is case-insensitive and accent-tolerant: text is folded once
(lower-case, diacritics removed, one output character per input character) and
the boilerplate patterns are written against the folded form only. Deletions
are applied to the original text, so accents in the kept part survive.

The cleanup is idempotent: it repeats the ordered steps until the text stops
changing, so cleaning an already-cleaned title returns it unchanged.
"""

from __future__ import annotations

import re
import unicodedata

from .models import CleanedDescription

# Patterns are matched against folded text at the start of the string only.
BOILERPLATE_PREFIXES: tuple[re.Pattern[str], ...] = (
    re.compile(r"transferencia (?:enviada|recebida) pelo pix\s*-\s*"),
    re.compile(r"transferencia (?:enviada|recebida)\s*-\s*"),
    re.compile(r"compra no (?:debito|credito)\s*-\s*"),
    re.compile(r"pagamento de fatura\s*-?\s*"),
    re.compile(r"resgate (?:de )?rdb\s*-?\s*"),
)

# Separators after which statements append document numbers and bank names.
TRUNCATE_AT: tuple[str, ...] = (" - ", " •")

TAX_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?<!\d)\d{2,3}\.\d{3}\.\d{3}/\d{4}-\d{2}(?!\d)"),  # CNPJ
    re.compile(r"\*{3}\.\d{3}\.\d{3}-\*{2}"),  # masked CPF
)


def _fold_char(ch: str) -> str:
    base = unicodedata.normalize("NFD", ch)[:1] or ch
    lowered = base.lower()
    return lowered if len(lowered) == 1 else base


def fold_text(text: str) -> str:
    """Lower-case ``text`` and strip diacritics, preserving its length.

    ``fold_text("Transferência")`` is ``"transferencia"``. Every input
    character maps to exactly one output character so match offsets in the
    folded text are valid offsets in the original.
    """

    return "".join(_fold_char(ch) for ch in text)


def _strip_prefixes(text: str) -> str:
    for pattern in BOILERPLATE_PREFIXES:
        m = pattern.match(fold_text(text))
        if m:
            text = text[m.end() :]
    return text


def _truncate(text: str) -> str:
    for sep in TRUNCATE_AT:
        cut = text.find(sep)
        if cut != -1:
            text = text[:cut]
    return text


def _strip_tax_ids(text: str) -> str:
    for pattern in TAX_ID_PATTERNS:
        text = pattern.sub(" ", text)
    return text


def _clean_pass(text: str) -> str:
    # Quotes and runs of whitespace are normalized up front so neither can
    # hide a separator from the truncation step.
    text = " ".join(text.replace('"', "").split())
    text = _strip_prefixes(text)
    text = _truncate(text)
    text = _strip_tax_ids(text)
    return " ".join(text.replace('"', "").split())


def clean_description(raw: str) -> str:
    """Return the display title for a raw statement description.

    Never returns an empty string: when nothing is left after cleanup the
    original text is returned untouched.
    """

    current = raw
    while True:
        nxt = _clean_pass(current)
        if not nxt or nxt == current:
            return current
        current = nxt


def describe(raw: str) -> CleanedDescription:
    """Return the cleaned title together with the original description."""

    return CleanedDescription(text=clean_description(raw), original=raw)


__all__ = [
    "BOILERPLATE_PREFIXES",
    "TRUNCATE_AT",
    "TAX_ID_PATTERNS",
    "fold_text",
    "clean_description",
    "describe",
]
