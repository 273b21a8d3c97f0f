"""
Pydantic schemas for ordering API request/response validation.

These schemas define the API contract. They only check types: the
business rules (SKU format, positive quantities, supported currencies)
are enforced by the use cases so that every rule violation is reported
with the same field-level error shape.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class OrderItemRequest(BaseModel):
    """A single item in a create-order request."""

    product_id: str = Field(..., description="Product identifier, unique per order")
    name: str = Field(..., description="Product display name")
    quantity: int = Field(..., description="Number of units (positive)")
    unit_price: Decimal = Field(..., description="Price per unit (non-negative)")
    metadata: dict[str, Any] | None = None


class CreateOrderRequest(BaseModel):
    """Request schema for the create-order endpoint.

    Attributes:
        order_id: Optional explicit id; rejected with 409 if taken.
        customer_id: Owner of the order.
        items: At least one item.
    """

    order_id: str | None = Field(default=None, description="Explicit order id")
    customer_id: str = Field(..., description="Customer placing the order")
    items: list[OrderItemRequest] = Field(default_factory=list)


class CreateOrderResponse(BaseModel):
    """Response schema for the create-order endpoint."""

    order_id: str
    total: Decimal


class AddItemRequest(BaseModel):
    """Request schema for the add-item endpoint.

    Attributes:
        sku: Product identifier, 3-30 chars of letters, digits and '-'.
        qty: Number of units (positive).
        currency: EUR or USD.
        unit_price: Optional explicit price; looked up when omitted.
    """

    sku: str
    qty: int
    currency: str
    unit_price: Decimal | None = None


class MoneySchema(BaseModel):
    """An amount in a currency."""

    amount: Decimal
    currency: str


class AddItemResponse(BaseModel):
    """Response schema for the add-item endpoint."""

    order_id: str
    total: MoneySchema


class OrderItemSchema(BaseModel):
    """A single order line in an order response."""

    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    metadata: dict[str, Any] | None = None


class OrderResponse(BaseModel):
    """Response schema for reading an order."""

    order_id: str
    customer_id: str
    status: str
    items: list[OrderItemSchema]
    total: Decimal
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] | None = None
    version: int


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    kind: str
    details: dict[str, str] | None = None
    resource: str | None = None
    id: str | None = None
