"""
Use case: Add an item to an existing order.

Input: AddItemToOrderCommand (order_id, sku, qty, currency, optional unit_price)
Output: Result[AddItemToOrderResult]
Side effects: Saves the order and stages an "order.item_added" event.
Failure cases:
    - validation: malformed input, or no usable price for the sku.
    - not_found: the order does not exist.
    - conflict: the order was modified concurrently.
    - infrastructure: the store or the event bus failed.
"""

import logging
import re
from decimal import Decimal

from app.application.ordering.dtos import (
    AddItemToOrderCommand,
    AddItemToOrderResult,
    MoneyResult,
)
from app.application.ordering.events import ORDER_ITEM_ADDED, make_event
from app.application.result import AppError, Err, Ok, Result
from app.domain.ordering.entities import OrderItem, is_positive_int, to_amount
from app.domain.ordering.errors import (
    ConcurrentModificationError,
    InfrastructureError,
    OrderValidationError,
    PricingUnavailableError,
)
from app.domain.ordering.ports import (
    Clock,
    EventBus,
    OrderRepository,
    PricingService,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

SKU_PATTERN = re.compile(r"[A-Za-z0-9-]{3,30}")
SUPPORTED_CURRENCIES = frozenset({"EUR", "USD"})


class AddItemToOrderUseCase:
    """Orchestrates adding an item to an order.

    Validates the request, loads the order, resolves the unit price
    (explicit price first, pricing service otherwise), applies the
    aggregate rule and persists the change with its event.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        pricing: PricingService,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> None:
        self._order_repo = order_repo
        self._pricing = pricing
        self._event_bus = event_bus
        self._clock = clock
        self._unit_of_work = unit_of_work

    async def execute(
        self, command: AddItemToOrderCommand
    ) -> Result[AddItemToOrderResult]:
        """Run the add-item use case.

        Args:
            command: Target order, sku, quantity, currency and optional price.

        Returns:
            Ok with the new order total, or Err. Never raises.
        """
        details = validate_add_item(command)
        if details:
            return Err(AppError.validation("Invalid input", details))

        try:
            return await self._add_item(command)
        except ConcurrentModificationError as exc:
            logger.warning("Concurrent update on order %s.", exc.order_id)
            return Err(AppError.conflict("Order was modified concurrently"))
        except InfrastructureError as exc:
            logger.error("Add item failed: %s", exc.message)
            return Err(AppError.infrastructure(exc.message))
        except Exception:
            logger.exception("Unexpected error while adding item.")
            return Err(AppError.infrastructure("Unexpected error while adding item"))

    async def _add_item(
        self, command: AddItemToOrderCommand
    ) -> Result[AddItemToOrderResult]:
        order = await self._order_repo.find_by_id(command.order_id)
        if order is None:
            return Err(AppError.not_found("order", command.order_id))

        price = await self._resolve_unit_price(command)
        if not price.ok:
            return price
        unit_price = price.value

        try:
            order.add_item(
                OrderItem(
                    product_id=command.sku,
                    name=command.sku,
                    quantity=command.qty,
                    unit_price=unit_price,
                ),
                at=self._clock.now(),
            )
        except OrderValidationError as exc:
            return Err(AppError.validation(exc.message, exc.details))

        async with self._unit_of_work.transaction():
            await self._order_repo.save(order)
            await self._event_bus.publish(
                [
                    make_event(
                        self._clock,
                        ORDER_ITEM_ADDED,
                        {
                            "order_id": order.id,
                            "sku": command.sku,
                            "qty": command.qty,
                            "unit_price": str(unit_price),
                            "total": str(order.total),
                        },
                    )
                ]
            )

        logger.info(
            "Added item sku=%s qty=%d to order id=%s", command.sku, command.qty, order.id
        )
        return Ok(
            AddItemToOrderResult(
                order_id=order.id,
                total=MoneyResult(amount=order.total, currency=command.currency),
            )
        )

    async def _resolve_unit_price(self, command: AddItemToOrderCommand) -> Result[Decimal]:
        """Use the explicit price if given, otherwise ask the pricing service.

        Price unavailability is a business condition, reported as a
        validation error rather than an infrastructure one.
        """
        if command.unit_price is not None:
            return Ok(to_amount(command.unit_price))

        try:
            fetched = await self._pricing.get_current_price(command.sku, command.currency)
        except PricingUnavailableError as exc:
            logger.warning("Pricing lookup failed for sku=%s: %s", command.sku, exc.reason)
            return Err(
                AppError.validation(
                    "Price not available for sku/currency", {"price": exc.reason}
                )
            )

        if fetched is None:
            return Err(
                AppError.validation(
                    "Price not available for sku/currency",
                    {"price": "Pricing service returned no price"},
                )
            )
        amount = to_amount(fetched.amount)
        if amount is None:
            return Err(
                AppError.validation(
                    "Price not available for sku/currency",
                    {"price": "Pricing service returned an invalid price"},
                )
            )
        return Ok(amount)


def validate_add_item(command: AddItemToOrderCommand) -> dict[str, str]:
    """Return a field -> message map of structural problems (empty if valid)."""
    errors: dict[str, str] = {}

    if not isinstance(command.order_id, str) or not command.order_id.strip():
        errors["order_id"] = "Required"
    if not isinstance(command.sku, str) or not SKU_PATTERN.fullmatch(command.sku):
        errors["sku"] = "Invalid SKU format"
    if not is_positive_int(command.qty):
        errors["qty"] = "Quantity must be a positive integer"
    if (
        not isinstance(command.currency, str)
        or command.currency not in SUPPORTED_CURRENCIES
    ):
        errors["currency"] = "Unsupported currency"
    if command.unit_price is not None and to_amount(command.unit_price) is None:
        errors["unit_price"] = "Unit price must be a non-negative number"

    return errors
