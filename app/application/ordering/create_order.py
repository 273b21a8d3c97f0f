"""
Use case: Create an order.

Input: CreateOrderCommand (customer_id, items, optional order_id)
Output: Result[CreateOrderResult]
Side effects: Persists the order and stages an "order.created" event.
Failure cases:
    - conflict: an explicit order_id is already taken (never idempotent).
    - validation: the aggregate rejects the customer or items.
    - infrastructure: the store or the event bus failed.
"""

import logging

from app.application.ordering.dtos import CreateOrderCommand, CreateOrderResult
from app.application.ordering.events import ORDER_CREATED, make_event
from app.application.result import AppError, Err, Ok, Result
from app.domain.ordering.entities import Order
from app.domain.ordering.errors import (
    ConcurrentModificationError,
    InfrastructureError,
    OrderValidationError,
)
from app.domain.ordering.ports import Clock, EventBus, OrderRepository, UnitOfWork

logger = logging.getLogger(__name__)


class CreateOrderUseCase:
    """Orchestrates creation of a new order.

    Rejects explicit ids that already exist, builds the aggregate,
    then saves it and publishes its snapshot in one unit of work.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> None:
        self._order_repo = order_repo
        self._event_bus = event_bus
        self._clock = clock
        self._unit_of_work = unit_of_work

    async def execute(self, command: CreateOrderCommand) -> Result[CreateOrderResult]:
        """Run the create-order use case.

        Args:
            command: Customer, items and optional explicit order id.

        Returns:
            Ok with the assigned order id and total, or Err.
        """
        try:
            return await self._create(command)
        except ConcurrentModificationError:
            logger.warning("Order %s was created concurrently.", command.order_id)
            return Err(AppError.conflict("Order already exists"))
        except InfrastructureError as exc:
            logger.error("Create order failed: %s", exc.message)
            return Err(AppError.infrastructure(exc.message))
        except Exception:
            logger.exception("Unexpected error while creating order.")
            return Err(AppError.infrastructure("Unexpected error while creating order"))

    async def _create(self, command: CreateOrderCommand) -> Result[CreateOrderResult]:
        if command.order_id is not None:
            existing = await self._order_repo.find_by_id(command.order_id)
            if existing is not None:
                logger.info("Rejecting duplicate order id=%s", command.order_id)
                return Err(AppError.conflict("Order already exists"))

        now = self._clock.now()
        try:
            order = Order.create(
                customer_id=command.customer_id,
                items=command.items,
                id=command.order_id,
                created_at=now,
                updated_at=now,
            )
        except OrderValidationError as exc:
            return Err(AppError.validation(exc.message, exc.details))

        async with self._unit_of_work.transaction():
            await self._order_repo.save(order)
            await self._event_bus.publish(
                [make_event(self._clock, ORDER_CREATED, order.to_snapshot())]
            )

        logger.info(
            "Created order id=%s customer=%s items=%d",
            order.id,
            order.customer_id,
            len(order.items),
        )
        return Ok(CreateOrderResult(order_id=order.id, total=order.total))
