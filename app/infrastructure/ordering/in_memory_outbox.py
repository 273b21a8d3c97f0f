"""
Adapter: In-memory outbox event bus.

Implements EventBus and OutboxStore ports for local development
and tests. Events are staged in a list and relayed by the outbox
dispatcher like in the SQL backend.

There is no shared transaction with the in-memory repository: a
publish failure after a save is not rolled back.
"""

from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime
from typing import AsyncIterator, Sequence

from app.domain.ordering.entities import DomainEvent, OutboxRecord
from app.domain.ordering.ports import EventBus, OutboxStore, UnitOfWork


class InMemoryOutboxEventBusAdapter(EventBus, OutboxStore):
    """List-backed outbox."""

    def __init__(self) -> None:
        self._records: list[OutboxRecord] = []

    @property
    def records(self) -> list[OutboxRecord]:
        """All staged records, published or not, in staging order."""
        return list(self._records)

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        known = {record.id for record in self._records}
        for event in events:
            if event.id in known:
                continue
            self._records.append(OutboxRecord.from_event(event))
            known.add(event.id)

    async def fetch_unpublished(self, limit: int) -> list[OutboxRecord]:
        pending = [r for r in self._records if r.published_at is None]
        return pending[:limit]

    async def mark_published(self, record_ids: Sequence[str], at: datetime) -> None:
        ids = set(record_ids)
        self._records = [
            replace(r, published_at=at) if r.id in ids and r.published_at is None else r
            for r in self._records
        ]


class InMemoryUnitOfWork(UnitOfWork):
    """Runs the grouped steps in sequence without atomicity."""

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield
