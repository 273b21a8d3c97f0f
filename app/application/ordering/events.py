"""
Domain event construction for the ordering use cases.

Event payloads are JSON-compatible: decimals are carried as strings.
"""

from typing import Any

from app.domain.ordering.entities import DomainEvent
from app.domain.ordering.ports import Clock

ORDER_CREATED = "order.created"
ORDER_ITEM_ADDED = "order.item_added"
ORDER_DELETED = "order.deleted"


def make_event(clock: Clock, event_type: str, payload: dict[str, Any]) -> DomainEvent:
    """Stamp a payload with the clock's current time."""
    return DomainEvent(type=event_type, payload=payload, occurred_at=clock.now())
