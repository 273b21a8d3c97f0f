"""
Adapter: SQL outbox event bus.

Implements EventBus and OutboxStore ports on the outbox table.
Publishing only stages rows; the outbox dispatcher relays them and
sets ``published_at`` once delivery is confirmed. Inside a
SqlUnitOfWork transaction the rows are written on the same connection
as the order, making the entity write and the event write atomic.
"""

import json
import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.domain.ordering.entities import DomainEvent, OutboxRecord
from app.domain.ordering.errors import EventPublicationError, PersistenceError
from app.domain.ordering.ports import EventBus, OutboxStore
from app.infrastructure.ordering.database import as_utc, connection_scope, outbox_table

logger = logging.getLogger(__name__)


class SqlOutboxEventBusAdapter(EventBus, OutboxStore):
    """SQLAlchemy adapter for the outbox table."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        if not events:
            return
        rows = [
            {
                "event_id": event.id,
                "type": event.type,
                "payload": json.dumps(event.payload, default=str),
                "occurred_at": event.occurred_at,
                "published_at": None,
            }
            for event in events
        ]
        try:
            async with connection_scope(self._engine) as conn:
                await conn.execute(insert(outbox_table), rows)
        except SQLAlchemyError as exc:
            raise EventPublicationError(
                f"Failed to stage {len(rows)} event(s) in the outbox"
            ) from exc
        logger.debug("Staged %d event(s) in the outbox.", len(rows))

    async def fetch_unpublished(self, limit: int) -> list[OutboxRecord]:
        query = (
            select(
                outbox_table.c.event_id,
                outbox_table.c.type,
                outbox_table.c.payload,
                outbox_table.c.occurred_at,
            )
            .where(outbox_table.c.published_at.is_(None))
            .order_by(outbox_table.c.position)
            .limit(limit)
        )
        try:
            async with connection_scope(self._engine) as conn:
                rows = (await conn.execute(query)).fetchall()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to read the outbox") from exc

        return [
            OutboxRecord(
                id=row[0],
                type=row[1],
                payload=json.loads(row[2]),
                occurred_at=as_utc(row[3]),
            )
            for row in rows
        ]

    async def mark_published(self, record_ids: Sequence[str], at: datetime) -> None:
        if not record_ids:
            return
        statement = (
            update(outbox_table)
            .where(outbox_table.c.event_id.in_(list(record_ids)))
            .where(outbox_table.c.published_at.is_(None))
            .values(published_at=at)
        )
        try:
            async with connection_scope(self._engine) as conn:
                await conn.execute(statement)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to mark outbox events published") from exc
