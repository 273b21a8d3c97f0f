"""
Shared fixtures for the ordering tests.

Fakes are built from the in-memory adapters; the clock is fixed and can
be advanced by hand so timestamps are deterministic.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest

from app.application.ordering.add_item_to_order import AddItemToOrderUseCase
from app.application.ordering.create_order import CreateOrderUseCase
from app.application.ordering.delete_order import DeleteOrderUseCase
from app.application.ordering.get_order import GetOrderUseCase
from app.domain.ordering.entities import Money
from app.domain.ordering.ports import Clock, PricingService
from app.infrastructure.ordering.in_memory_order_repository import (
    InMemoryOrderRepositoryAdapter,
)
from app.infrastructure.ordering.in_memory_outbox import (
    InMemoryOutboxEventBusAdapter,
    InMemoryUnitOfWork,
)

START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 1.0) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


class CountingPricing(PricingService):
    """Pricing fake that records every lookup."""

    def __init__(self, prices: Optional[dict[tuple[str, str], Decimal]] = None) -> None:
        self.prices = dict(prices or {})
        self.calls: list[tuple[str, str]] = []

    async def get_current_price(self, sku: str, currency: str) -> Optional[Money]:
        self.calls.append((sku, currency))
        amount = self.prices.get((sku, currency))
        if amount is None:
            return None
        return Money(amount=amount, currency=currency)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def orders() -> InMemoryOrderRepositoryAdapter:
    return InMemoryOrderRepositoryAdapter()


@pytest.fixture
def outbox() -> InMemoryOutboxEventBusAdapter:
    return InMemoryOutboxEventBusAdapter()


@pytest.fixture
def pricing() -> CountingPricing:
    return CountingPricing({("prod-2", "EUR"): Decimal("7.50")})


@pytest.fixture
def create_order(orders, outbox, clock) -> CreateOrderUseCase:
    return CreateOrderUseCase(
        order_repo=orders,
        event_bus=outbox,
        clock=clock,
        unit_of_work=InMemoryUnitOfWork(),
    )


@pytest.fixture
def add_item(orders, pricing, outbox, clock) -> AddItemToOrderUseCase:
    return AddItemToOrderUseCase(
        order_repo=orders,
        pricing=pricing,
        event_bus=outbox,
        clock=clock,
        unit_of_work=InMemoryUnitOfWork(),
    )


@pytest.fixture
def delete_order(orders, outbox, clock) -> DeleteOrderUseCase:
    return DeleteOrderUseCase(
        order_repo=orders,
        event_bus=outbox,
        clock=clock,
        unit_of_work=InMemoryUnitOfWork(),
    )


@pytest.fixture
def get_order(orders) -> GetOrderUseCase:
    return GetOrderUseCase(order_repo=orders)
