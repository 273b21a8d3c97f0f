"""
Use case: Read a single order.

Input: GetOrderQuery (order_id)
Output: Result[OrderView]
Side effects: None.
Failure cases:
    - not_found: the order does not exist.
    - infrastructure: the store failed or the stored order is unreadable.
"""

import logging

from app.application.ordering.dtos import GetOrderQuery, OrderItemView, OrderView
from app.application.result import AppError, Err, Ok, Result
from app.domain.ordering.entities import Order
from app.domain.ordering.errors import InfrastructureError
from app.domain.ordering.ports import OrderRepository

logger = logging.getLogger(__name__)


class GetOrderUseCase:
    """Loads an order and maps it to a read-only view."""

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    async def execute(self, query: GetOrderQuery) -> Result[OrderView]:
        try:
            order = await self._order_repo.find_by_id(query.order_id)
        except InfrastructureError as exc:
            logger.error("Get order failed: %s", exc.message)
            return Err(AppError.infrastructure(exc.message))
        except Exception:
            logger.exception("Unexpected error while loading order.")
            return Err(AppError.infrastructure("Unexpected error while loading order"))

        if order is None:
            return Err(AppError.not_found("order", query.order_id))
        return Ok(to_order_view(order))


def to_order_view(order: Order) -> OrderView:
    return OrderView(
        order_id=order.id,
        customer_id=order.customer_id,
        status=order.status.value,
        items=[
            OrderItemView(
                product_id=item.product_id,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
                metadata=item.metadata,
            )
            for item in order.items
        ],
        total=order.total,
        created_at=order.created_at,
        updated_at=order.updated_at,
        metadata=order.metadata,
        version=order.version,
    )
