"""Pytest configuration for test isolation.

The CLI loads ``.env`` and configures package logging once per process, and
the database client keeps a process-wide engine. Any of these leaking between
tests makes assertions about oracle calls, log output and stored rows depend
on test order, so each test starts from a clean slate via autouse fixtures.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from db.client import reset_engine

from finance_tracker.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop oracle/database settings and run from an empty working directory.

    Running from ``tmp_path`` keeps a developer's ``.env`` from being picked
    up by the CLI's ``load_dotenv`` call.
    """

    for var in (
        "OPENAI_API_KEY",
        "FT_ORACLE_MODEL",
        "FT_ORACLE_TIMEOUT_SEC",
        "DATABASE_URL",
        "FINANCE_TRACKER_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_db_engine() -> Iterator[None]:
    reset_engine()
    yield
    reset_engine()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo ``configure_logging`` so caplog keeps working in later tests."""

    reset_logging()
    yield
    reset_logging()
