"""Logging for the ``finance_tracker`` package.

Library modules obtain loggers with ``get_logger("finance_tracker.<module>")``
and never install handlers. Output is switched on by the entrypoint (the CLI
or a host application) calling :func:`configure_logging` once; until then the
package logger carries a ``NullHandler`` and stays silent.

Levels come from the ``level`` argument, then ``FINANCE_TRACKER_LOG_LEVEL``,
then ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "finance_tracker"
LEVEL_ENV_VAR = "FINANCE_TRACKER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_CONFIGURED = False


def _level_from(value: int | str | None) -> int:
    if value is None:
        value = os.getenv(LEVEL_ENV_VAR) or logging.INFO
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    level = logging.getLevelNamesMapping().get(name)
    return level if level is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Attach one ``StreamHandler`` to the package logger; later calls are no-ops.

    ``stream`` defaults to ``sys.stderr`` as it is at call time.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in pkg.handlers if isinstance(h, logging.NullHandler)]:
        pkg.removeHandler(h)

    resolved = _level_from(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    handler.setLevel(resolved)
    pkg.addHandler(handler)
    pkg.setLevel(resolved)
    # Records stop at the package logger; the root logger never sees them twice.
    pkg.propagate = False

    _CONFIGURED = True


def reset_logging() -> None:
    """Undo :func:`configure_logging` (used by tests and long-lived hosts)."""

    global _CONFIGURED
    pkg = logging.getLogger(PACKAGE_LOGGER)
    for h in list(pkg.handlers):
        pkg.removeHandler(h)
    pkg.setLevel(logging.NOTSET)
    pkg.propagate = True
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if not _CONFIGURED and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "reset_logging", "get_logger"]
