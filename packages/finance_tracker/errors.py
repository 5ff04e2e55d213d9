"""Exceptions surfaced by the statement import pipeline.

Individual malformed rows never raise; they are dropped while parsing. Only
whole-file outcomes reach the caller, and the two failure kinds are distinct
so a UI can tell "bad format" apart from "could not read the file".
"""

from __future__ import annotations


class StatementImportError(Exception):
    """Base class for statement import failures."""


class UnrecognizedFormatError(StatementImportError):
    """The file was read but no usable transaction rows were found."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Could not read transactions from the file. "
            "Check that it is an official Nubank CSV statement."
        )


class StatementReadError(StatementImportError):
    """The file could not be read or decoded."""


__all__ = ["StatementImportError", "UnrecognizedFormatError", "StatementReadError"]
