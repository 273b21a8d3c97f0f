"""
Adapter: In-memory order repository.

Implements OrderRepository port.
Keeps order snapshots in a dict guarded by an asyncio lock. Callers
always receive freshly rehydrated aggregates, so no mutable state is
shared between concurrent use-case invocations.
"""

import asyncio
import copy
import logging
from typing import Optional

from app.domain.ordering.entities import Order
from app.domain.ordering.errors import ConcurrentModificationError
from app.domain.ordering.ports import OrderRepository

logger = logging.getLogger(__name__)


class InMemoryOrderRepositoryAdapter(OrderRepository):
    """Process-local order store with optimistic concurrency."""

    def __init__(self) -> None:
        self._snapshots: dict[str, dict] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._snapshots)

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        async with self._lock:
            snapshot = self._snapshots.get(order_id)
            if snapshot is None:
                return None
            snapshot = copy.deepcopy(snapshot)
        return Order.from_snapshot(snapshot)

    async def save(self, order: Order) -> None:
        """Store the order if its version matches the stored one.

        Raises:
            ConcurrentModificationError: On a version mismatch.
        """
        async with self._lock:
            stored = self._snapshots.get(order.id)
            actual = stored["version"] if stored is not None else None
            if order.version == 0:
                if stored is not None:
                    raise ConcurrentModificationError(order.id, 0, actual)
            elif actual != order.version:
                raise ConcurrentModificationError(order.id, order.version, actual)

            new_version = order.version + 1
            snapshot = copy.deepcopy(order.to_snapshot())
            snapshot["version"] = new_version
            self._snapshots[order.id] = snapshot

        order.mark_persisted(new_version)
        logger.debug("Saved order id=%s version=%d", order.id, new_version)

    async def delete(self, order_id: str) -> None:
        async with self._lock:
            self._snapshots.pop(order_id, None)
