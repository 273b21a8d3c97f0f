"""
Data Transfer Objects for the ordering application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional


@dataclass(frozen=True)
class MoneyResult:
    """An amount in a currency.

    Attributes:
        amount: Decimal amount.
        currency: ISO currency code.
    """

    amount: Decimal
    currency: str


@dataclass(frozen=True)
class CreateOrderCommand:
    """Input DTO for creating an order.

    Attributes:
        customer_id: Owner of the order.
        items: Item mappings with product_id, name, quantity, unit_price
            and optional metadata.
        order_id: Optional caller-chosen id. Rejected if already taken.
    """

    customer_id: str
    items: list[dict[str, Any]]
    order_id: Optional[str] = None


@dataclass(frozen=True)
class CreateOrderResult:
    """Output DTO for a created order.

    Attributes:
        order_id: Assigned order id.
        total: Sum of line totals.
    """

    order_id: str
    total: Decimal


@dataclass(frozen=True)
class AddItemToOrderCommand:
    """Input DTO for adding an item to an order.

    Attributes:
        order_id: Target order.
        sku: Product identifier, 3-30 chars of [A-Za-z0-9-].
        qty: Positive number of units.
        currency: EUR or USD.
        unit_price: Optional explicit price; looked up when omitted.
    """

    order_id: str
    sku: str
    qty: int
    currency: str
    unit_price: Optional[Decimal] = None


@dataclass(frozen=True)
class AddItemToOrderResult:
    """Output DTO after adding an item.

    Attributes:
        order_id: The updated order.
        total: New order total in the requested currency.
    """

    order_id: str
    total: MoneyResult


@dataclass(frozen=True)
class DeleteOrderCommand:
    """Input DTO for deleting an order."""

    order_id: str


@dataclass(frozen=True)
class GetOrderQuery:
    """Input DTO for reading an order."""

    order_id: str


@dataclass(frozen=True)
class OrderItemView:
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    metadata: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class OrderView:
    """Output DTO describing an order.

    Attributes:
        order_id: Order id.
        customer_id: Owner of the order.
        status: Lifecycle status value.
        items: Order lines in insertion order.
        total: Sum of line totals.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
        metadata: Optional free-form attributes.
        version: Persisted version.
    """

    order_id: str
    customer_id: str
    status: str
    items: list[OrderItemView]
    total: Decimal
    created_at: datetime
    updated_at: datetime
    metadata: Optional[dict[str, Any]] = None
    version: int = 0


@dataclass(frozen=True)
class DispatchOutboxResult:
    """Summary of one outbox dispatch pass."""

    delivered: int
    failed: int = 0
    failed_event_ids: list[str] = field(default_factory=list)
