"""
SQLAlchemy schema and transaction handling for the ordering context.

Tables:
    orders -- one row per order; the full aggregate snapshot is kept as
              JSON next to the columns needed for lookups and the
              version compare-and-swap.
    outbox -- staged domain events; ``published_at`` is NULL until the
              dispatcher confirmed delivery.

The SQL repository and the SQL outbox share one connection while a
``SqlUnitOfWork.transaction()`` is open, so an order write and its
events commit or roll back together.
"""

import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from app.domain.ordering.ports import UnitOfWork

logger = logging.getLogger(__name__)

metadata = MetaData()

orders_table = Table(
    "orders",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("customer_id", String(255), nullable=False, index=True),
    Column("status", String(32), nullable=False),
    Column("version", Integer, nullable=False),
    Column("snapshot", Text, nullable=False),
)

outbox_table = Table(
    "outbox",
    metadata,
    Column("position", Integer, primary_key=True, autoincrement=True),
    Column("event_id", String(64), nullable=False, unique=True),
    Column("type", String(128), nullable=False),
    Column("payload", Text, nullable=False),
    Column("occurred_at", DateTime(timezone=True), nullable=False),
    Column("published_at", DateTime(timezone=True), nullable=True, index=True),
)

_current_connection: ContextVar[Optional[AsyncConnection]] = ContextVar(
    "ordering_sql_connection", default=None
)


def build_engine(database_url: str) -> AsyncEngine:
    """Build an async SQLAlchemy engine from a database URL."""
    return create_async_engine(database_url, pool_pre_ping=True)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the orders and outbox tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Ordering schema ready.")


@asynccontextmanager
async def connection_scope(engine: AsyncEngine) -> AsyncIterator[AsyncConnection]:
    """Yield the unit-of-work connection, or a fresh transactional one."""
    conn = _current_connection.get()
    if conn is not None:
        yield conn
        return
    async with engine.begin() as conn:
        yield conn


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes returned by backends such as SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlUnitOfWork(UnitOfWork):
    """Opens one database transaction shared by the SQL adapters."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if _current_connection.get() is not None:
            yield
            return
        async with self._engine.begin() as conn:
            token = _current_connection.set(conn)
            try:
                yield
            finally:
                _current_connection.reset(token)
