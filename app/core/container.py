"""
Composition root.

Builds every port adapter and use case once per application from the
given settings and hands them out through an explicit Container. There
are no module-level adapter singletons: the FastAPI app keeps its
container on ``app.state`` and request dependencies read it from there.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine

from app.application.ordering.add_item_to_order import AddItemToOrderUseCase
from app.application.ordering.create_order import CreateOrderUseCase
from app.application.ordering.delete_order import DeleteOrderUseCase
from app.application.ordering.dispatch_outbox import OutboxDispatcher
from app.application.ordering.get_order import GetOrderUseCase
from app.core.config import Settings
from app.domain.ordering.ports import (
    Clock,
    EventBus,
    EventPublisher,
    OrderRepository,
    OutboxStore,
    PricingService,
    UnitOfWork,
)
from app.infrastructure.ordering.clock_adapter import SystemClockAdapter
from app.infrastructure.ordering.database import (
    SqlUnitOfWork,
    build_engine,
    create_schema,
)
from app.infrastructure.ordering.event_publisher_adapter import (
    LoggingEventPublisherAdapter,
    WebhookEventPublisherAdapter,
)
from app.infrastructure.ordering.in_memory_order_repository import (
    InMemoryOrderRepositoryAdapter,
)
from app.infrastructure.ordering.in_memory_outbox import (
    InMemoryOutboxEventBusAdapter,
    InMemoryUnitOfWork,
)
from app.infrastructure.ordering.pricing_adapter import (
    HttpPricingAdapter,
    StaticPricingAdapter,
)
from app.infrastructure.ordering.sql_order_repository import SqlOrderRepositoryAdapter
from app.infrastructure.ordering.sql_outbox import SqlOutboxEventBusAdapter

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Everything the HTTP layer and the lifespan need, already wired."""

    settings: Settings
    orders: OrderRepository
    pricing: PricingService
    events: EventBus
    outbox: OutboxStore
    clock: Clock
    unit_of_work: UnitOfWork
    create_order: CreateOrderUseCase
    add_item_to_order: AddItemToOrderUseCase
    delete_order: DeleteOrderUseCase
    get_order: GetOrderUseCase
    dispatcher: OutboxDispatcher
    http_client: httpx.AsyncClient
    engine: Optional[AsyncEngine] = None

    async def startup(self) -> None:
        """Prepare storage and start relaying outbox events."""
        if self.engine is not None:
            await create_schema(self.engine)
        self.dispatcher.start()

    async def shutdown(self) -> None:
        """Stop background work and release connections."""
        await self.dispatcher.stop()
        await self.http_client.aclose()
        if self.engine is not None:
            await self.engine.dispose()


def build_container(
    settings: Settings,
    *,
    clock: Optional[Clock] = None,
    pricing: Optional[PricingService] = None,
    publisher: Optional[EventPublisher] = None,
) -> Container:
    """Wire adapters and use cases for the given settings.

    Args:
        settings: Application settings.
        clock: Optional clock override, defaults to the system clock.
        pricing: Optional pricing override.
        publisher: Optional outbox relay target override.

    Returns:
        A ready-to-use Container. Call ``startup()`` before serving.
    """
    clock = clock or SystemClockAdapter()
    http_client = httpx.AsyncClient(
        base_url=settings.pricing_service_url,
        timeout=settings.pricing_timeout_seconds,
    )

    engine: Optional[AsyncEngine] = None
    if settings.use_inmemory:
        orders: OrderRepository = InMemoryOrderRepositoryAdapter()
        outbox_bus = InMemoryOutboxEventBusAdapter()
        unit_of_work: UnitOfWork = InMemoryUnitOfWork()
        default_pricing: PricingService = StaticPricingAdapter(settings.static_prices)
        logger.info("Using in-memory order store and outbox.")
    else:
        engine = build_engine(settings.database_url)
        orders = SqlOrderRepositoryAdapter(engine)
        outbox_bus = SqlOutboxEventBusAdapter(engine)
        unit_of_work = SqlUnitOfWork(engine)
        default_pricing = HttpPricingAdapter(http_client)
        logger.info("Using SQL order store and outbox.")

    pricing = pricing or default_pricing

    if publisher is None:
        if settings.outbox_webhook_url:
            publisher = WebhookEventPublisherAdapter(
                http_client, settings.outbox_webhook_url
            )
        else:
            publisher = LoggingEventPublisherAdapter()

    return Container(
        settings=settings,
        orders=orders,
        pricing=pricing,
        events=outbox_bus,
        outbox=outbox_bus,
        clock=clock,
        unit_of_work=unit_of_work,
        create_order=CreateOrderUseCase(
            order_repo=orders,
            event_bus=outbox_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        ),
        add_item_to_order=AddItemToOrderUseCase(
            order_repo=orders,
            pricing=pricing,
            event_bus=outbox_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        ),
        delete_order=DeleteOrderUseCase(
            order_repo=orders,
            event_bus=outbox_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        ),
        get_order=GetOrderUseCase(order_repo=orders),
        dispatcher=OutboxDispatcher(
            outbox=outbox_bus,
            publisher=publisher,
            clock=clock,
            batch_size=settings.outbox_batch_size,
            interval_seconds=settings.outbox_dispatch_interval_seconds,
        ),
        http_client=http_client,
        engine=engine,
    )
