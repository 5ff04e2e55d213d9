"""SQLAlchemy models registry for the finance tracker database."""

from .finance import Base, Transaction

__all__ = [
    "Base",
    "Transaction",
]
