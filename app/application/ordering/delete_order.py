"""
Use case: Delete an order.

Input: DeleteOrderCommand (order_id)
Output: Result[None]
Side effects: Removes the order and stages an "order.deleted" event.
Failure cases:
    - not_found: the order does not exist.
    - infrastructure: the store or the event bus failed.

Deletion is not gated on status: paid and shipped orders are deleted too.
"""

import logging

from app.application.ordering.dtos import DeleteOrderCommand
from app.application.ordering.events import ORDER_DELETED, make_event
from app.application.result import AppError, Err, Ok, Result
from app.domain.ordering.errors import InfrastructureError
from app.domain.ordering.ports import Clock, EventBus, OrderRepository, UnitOfWork

logger = logging.getLogger(__name__)


class DeleteOrderUseCase:
    """Orchestrates unconditional deletion of an order."""

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

    async def execute(self, command: DeleteOrderCommand) -> Result[None]:
        try:
            order = await self._order_repo.find_by_id(command.order_id)
            if order is None:
                return Err(AppError.not_found("order", command.order_id))

            async with self._unit_of_work.transaction():
                await self._order_repo.delete(order.id)
                await self._event_bus.publish(
                    [
                        make_event(
                            self._clock,
                            ORDER_DELETED,
                            {"order_id": order.id, "status": order.status.value},
                        )
                    ]
                )
        except InfrastructureError as exc:
            logger.error("Delete order failed: %s", exc.message)
            return Err(AppError.infrastructure(exc.message))
        except Exception:
            logger.exception("Unexpected error while deleting order.")
            return Err(AppError.infrastructure("Unexpected error while deleting order"))

        logger.info("Deleted order id=%s (status=%s)", order.id, order.status.value)
        return Ok(None)
