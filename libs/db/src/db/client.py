"""Engine and session helpers for the finance tracker database.

One engine per process, bound to ``DATABASE_URL`` (or an explicit URL passed
on first use)::

    from db.client import init_schema, session_scope

    init_schema()
    with session_scope() as s:
        s.add(...)
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .models.finance import Base

_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None


def _resolve_url(database_url: str | None) -> str:
    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set and no database_url was given")
    return url


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the process-wide engine, creating it on first use.

    Asking for a different URL once an engine exists is an error; call
    :func:`reset_engine` to rebind.
    """

    global _ENGINE, _SESSION_MAKER
    url = _resolve_url(database_url)
    if _ENGINE is not None:
        if _ENGINE.url != make_url(url):
            raise RuntimeError(
                f"database engine already bound to {_ENGINE.url!r}; call reset_engine() first"
            )
        return _ENGINE

    _ENGINE = create_engine(url, pool_pre_ping=True)
    _SESSION_MAKER = sessionmaker(bind=_ENGINE, expire_on_commit=False)
    return _ENGINE


def reset_engine() -> None:
    """Dispose the engine so the next call binds afresh."""

    global _ENGINE, _SESSION_MAKER
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _SESSION_MAKER = None


def init_schema(*, database_url: str | None = None) -> None:
    """Create the ``transactions`` table (and any other model tables) if missing."""

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


def get_session(*, database_url: str | None = None) -> Session:
    get_engine(database_url=database_url)
    assert _SESSION_MAKER is not None
    return _SESSION_MAKER()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Commit on success, roll back on any exception, always close."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "get_engine",
    "reset_engine",
    "init_schema",
    "get_session",
    "session_scope",
]
