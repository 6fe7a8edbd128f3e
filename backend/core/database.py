"""Database Module

Async engine and session management for the sentence store tables.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID as PyUUID

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator, CHAR
from sqlalchemy.dialects.postgresql import UUID as PG_UUID

from core.config import settings


class GUID(TypeDecorator):
    """Platform-agnostic GUID type.

    Uses PostgreSQL's UUID type when available, otherwise stores as CHAR(32).
    """
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(32))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        if isinstance(value, PyUUID):
            return value.hex
        return PyUUID(value).hex

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, PyUUID):
            return value
        return PyUUID(value)


engine_kwargs = {
    "echo": settings.LOG_SQL,
}

if "sqlite" not in settings.DATABASE_URL:
    engine_kwargs.update({
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
    })

engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency that yields a database session."""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Context manager for a database session outside request scope."""
    async with AsyncSessionLocal() as session:
        yield session

