"""Error Boundary Mappers

Maps exceptions raised inside a module to a single AppError type at the
module boundary.
"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from .types import AppError
from .builders import (
    db_connection_failed,
    duplicate_key,
    internal_error,
    transaction_failed,
)


class DatabaseErrorMapper:
    """Maps SQLAlchemy exceptions to database AppErrors."""

    def __init__(self, origin: str = "database"):
        self.origin = origin

    def map_exception(self, exc: Exception) -> AppError:
        if isinstance(exc, IntegrityError):
            message = str(exc.orig) if exc.orig else str(exc)
            if "unique constraint" in message.lower() or "duplicate key" in message.lower():
                return duplicate_key("record", "unknown", "unknown", origin=self.origin).error
            return transaction_failed(message, origin=self.origin).error
        if isinstance(exc, OperationalError):
            message = str(exc.orig) if exc.orig else str(exc)
            if "connect" in message.lower():
                return db_connection_failed(message, origin=self.origin).error
            return transaction_failed(message, origin=self.origin).error
        if isinstance(exc, SQLAlchemyError):
            return transaction_failed(str(exc), origin=self.origin).error

        return internal_error(f"Database error: {exc}", origin=self.origin, cause=exc).error
