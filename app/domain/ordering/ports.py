"""
Port interfaces (ABCs) for the ordering bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.

All IO-bound ports are coroutine-based: use cases await them one after
the other, never concurrently.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Optional, Sequence

from app.domain.ordering.entities import DomainEvent, Money, Order, OutboxRecord


class OrderRepository(ABC):
    """Port for persisting and retrieving orders."""

    @abstractmethod
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        """Return the order with this id, or None if absent."""
        raise NotImplementedError

    @abstractmethod
    async def save(self, order: Order) -> None:
        """Persist an order using a compare-and-swap on its version.

        The stored version must equal ``order.version`` (no stored row
        when the version is 0). On success the stored version becomes
        ``order.version + 1`` and the order is told its new version.

        Raises:
            ConcurrentModificationError: If the stored version differs.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, order_id: str) -> None:
        """Remove the order. Deleting an absent id is a no-op."""
        raise NotImplementedError


class PricingService(ABC):
    """Port for looking up the current price of a product."""

    @abstractmethod
    async def get_current_price(self, sku: str, currency: str) -> Optional[Money]:
        """Return the current price, or None when no price exists.

        Raises:
            PricingUnavailableError: If the pricing backend fails.
        """
        raise NotImplementedError


class EventBus(ABC):
    """Port for reliable publication of domain events.

    Delivery is at-least-once. Events passed in one call keep their
    relative order; no ordering holds across calls.
    """

    @abstractmethod
    async def publish(self, events: Sequence[DomainEvent]) -> None:
        raise NotImplementedError


class Clock(ABC):
    """Port for the current time, injected to keep tests deterministic."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        raise NotImplementedError


class UnitOfWork(ABC):
    """Port grouping a repository write and an event publish.

    Backends that support it run both inside one atomic transaction;
    others simply execute the steps in sequence.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        raise NotImplementedError


class OutboxStore(ABC):
    """Port for reading staged events and marking them relayed."""

    @abstractmethod
    async def fetch_unpublished(self, limit: int) -> list[OutboxRecord]:
        """Return up to ``limit`` unpublished records in staging order."""
        raise NotImplementedError

    @abstractmethod
    async def mark_published(self, record_ids: Sequence[str], at: datetime) -> None:
        raise NotImplementedError


class EventPublisher(ABC):
    """Port for the external target the outbox relays events to."""

    @abstractmethod
    async def deliver(self, record: OutboxRecord) -> None:
        """Deliver one record.

        Raises:
            EventPublicationError: If delivery was not confirmed.
        """
        raise NotImplementedError
