"""
Adapter: SQL order repository.

Implements OrderRepository port.
Reads and writes the orders table through an async SQLAlchemy engine.
Saves use a compare-and-swap on the version column.
"""

import json
import logging
from typing import Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.domain.ordering.entities import Order
from app.domain.ordering.errors import ConcurrentModificationError, PersistenceError
from app.domain.ordering.ports import OrderRepository
from app.infrastructure.ordering.database import connection_scope, orders_table

logger = logging.getLogger(__name__)


class SqlOrderRepositoryAdapter(OrderRepository):
    """SQLAlchemy adapter for the orders table."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        query = select(orders_table.c.snapshot, orders_table.c.version).where(
            orders_table.c.id == order_id
        )
        try:
            async with connection_scope(self._engine) as conn:
                row = (await conn.execute(query)).first()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load order {order_id}") from exc

        if row is None:
            return None

        snapshot = json.loads(row[0])
        snapshot["version"] = row[1]
        return Order.from_snapshot(snapshot)

    async def save(self, order: Order) -> None:
        """Insert a new order or update the row holding ``order.version``.

        Raises:
            ConcurrentModificationError: If another writer got there first.
            PersistenceError: On any other database failure.
        """
        new_version = order.version + 1
        snapshot = order.to_snapshot()
        snapshot["version"] = new_version
        values = {
            "customer_id": order.customer_id,
            "status": order.status.value,
            "version": new_version,
            "snapshot": json.dumps(snapshot, default=str),
        }

        try:
            async with connection_scope(self._engine) as conn:
                if order.version == 0:
                    await self._insert(conn, order, values)
                else:
                    await self._update(conn, order, values)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to save order {order.id}") from exc

        order.mark_persisted(new_version)
        logger.debug("Saved order id=%s version=%d", order.id, new_version)

    async def delete(self, order_id: str) -> None:
        try:
            async with connection_scope(self._engine) as conn:
                await conn.execute(
                    delete(orders_table).where(orders_table.c.id == order_id)
                )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to delete order {order_id}") from exc

    async def _insert(self, conn, order: Order, values: dict) -> None:
        existing = await conn.scalar(
            select(orders_table.c.version).where(orders_table.c.id == order.id)
        )
        if existing is not None:
            raise ConcurrentModificationError(order.id, 0, existing)
        try:
            await conn.execute(insert(orders_table).values(id=order.id, **values))
        except IntegrityError as exc:
            raise ConcurrentModificationError(order.id, 0, None) from exc

    async def _update(self, conn, order: Order, values: dict) -> None:
        result = await conn.execute(
            update(orders_table)
            .where(orders_table.c.id == order.id)
            .where(orders_table.c.version == order.version)
            .values(**values)
        )
        if result.rowcount != 1:
            actual = await conn.scalar(
                select(orders_table.c.version).where(orders_table.c.id == order.id)
            )
            raise ConcurrentModificationError(order.id, order.version, actual)
