"""
Domain entities for the ordering bounded context.

The Order aggregate owns its items, status and timestamps. Every
mutation goes through an aggregate method that validates first and
only then assigns, so a failed call leaves the order untouched.
No framework imports and no IO operations.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping, Optional
from uuid import uuid4

from app.domain.ordering.errors import (
    InvalidTransitionError,
    InvariantViolationError,
    OrderValidationError,
    ProductNotInOrderError,
)


class OrderStatus(Enum):
    """Lifecycle status of an order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"


# Target status -> statuses it may be entered from.
_ALLOWED_SOURCES: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PENDING}),
    OrderStatus.PAID: frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.PAID}),
    OrderStatus.CANCELLED: frozenset(
        {
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.PAID,
            OrderStatus.CANCELLED,
        }
    ),
}

CANCELLATION_REASON_KEY = "cancellation_reason"
TIMESTAMP_MESSAGE = "Timestamp must be timezone-aware"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_aware(value: Any) -> bool:
    return isinstance(value, datetime) and value.utcoffset() is not None


def is_positive_int(value: Any) -> bool:
    """Return True for ints greater than zero (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def to_amount(value: Any) -> Optional[Decimal]:
    """Coerce a price to a finite, non-negative Decimal.

    Returns None when the value cannot be used as a price.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


@dataclass(frozen=True)
class Money:
    """An amount in a given ISO currency."""

    amount: Decimal
    currency: str


@dataclass(frozen=True)
class OrderItem:
    """A single order line.

    Immutable: quantity or price changes produce a new instance.

    Attributes:
        product_id: Product identifier, unique within an order.
        name: Display name of the product.
        quantity: Number of units, a positive integer.
        unit_price: Price per unit, finite and non-negative.
        metadata: Optional free-form attributes.
    """

    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    metadata: Optional[dict[str, Any]] = None

    def __post_init__(self) -> None:
        details: dict[str, str] = {}
        if not isinstance(self.product_id, str) or not self.product_id.strip():
            details["product_id"] = "Required"
        if not isinstance(self.name, str) or not self.name.strip():
            details["name"] = "Required"
        if not is_positive_int(self.quantity):
            details["quantity"] = "Quantity must be a positive integer"
        amount = to_amount(self.unit_price)
        if amount is None:
            details["unit_price"] = "Unit price must be a non-negative number"
        if self.metadata is not None and not isinstance(self.metadata, Mapping):
            details["metadata"] = "Metadata must be a mapping"
        if details:
            raise OrderValidationError("Invalid order item", details)

        object.__setattr__(self, "unit_price", amount)
        if self.metadata is not None:
            object.__setattr__(self, "metadata", dict(self.metadata))

    @property
    def line_total(self) -> Decimal:
        """Quantity multiplied by unit price."""
        return self.unit_price * self.quantity

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OrderItem":
        """Build an item from a plain mapping (request body, snapshot)."""
        if not isinstance(data, Mapping):
            raise OrderValidationError(
                "Invalid order item", {"item": "Item must be an object"}
            )
        return cls(
            product_id=data.get("product_id"),
            name=data.get("name"),
            quantity=data.get("quantity"),
            unit_price=data.get("unit_price"),
            metadata=data.get("metadata"),
        )

    def to_primitives(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "metadata": dict(self.metadata) if self.metadata is not None else None,
        }


def _coerce_item(item: "OrderItem | Mapping[str, Any]") -> OrderItem:
    if isinstance(item, OrderItem):
        return item
    return OrderItem.from_mapping(item)


@dataclass(frozen=True)
class DomainEvent:
    """Something that happened to an order.

    Attributes:
        type: Event tag, e.g. "order.created".
        payload: JSON-compatible event data.
        occurred_at: Timestamp taken from the injected clock.
        id: Unique event id, used by the outbox.
    """

    type: str
    payload: dict[str, Any]
    occurred_at: datetime
    id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(frozen=True)
class OutboxRecord:
    """A staged event awaiting relay to the outside world."""

    id: str
    type: str
    payload: dict[str, Any]
    occurred_at: datetime
    published_at: Optional[datetime] = None

    @classmethod
    def from_event(cls, event: DomainEvent) -> "OutboxRecord":
        return cls(
            id=event.id,
            type=event.type,
            payload=event.payload,
            occurred_at=event.occurred_at,
        )


class Order:
    """Order aggregate root.

    Build instances with ``Order.create`` (new orders) or
    ``Order.from_snapshot`` (rehydration); the constructor is closed.

    Invariants:
        - at least one item at all times;
        - product ids are unique across items;
        - status only moves forward, cancellation excepted;
        - ``updated_at`` never decreases.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        raise TypeError("Use Order.create() or Order.from_snapshot()")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        customer_id: str,
        items: Iterable["OrderItem | Mapping[str, Any]"],
        *,
        id: Optional[str] = None,
        status: "OrderStatus | str | None" = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        metadata: Optional[Mapping[str, Any]] = None,
        version: int = 0,
    ) -> "Order":
        """Validate input and build an order.

        Args:
            customer_id: Owner of the order, non-empty.
            items: At least one item, as OrderItem or plain mappings.
            id: Explicit order id; a uuid4 is generated when omitted.
            status: Initial status, defaults to pending.
            created_at: Creation time, defaults to now (UTC).
            updated_at: Last change time, defaults to created_at.
            metadata: Optional free-form attributes.
            version: Persisted version, 0 for a brand-new order.

        Returns:
            A fully validated Order.

        Raises:
            OrderValidationError: If any field or item is invalid.
        """
        details: dict[str, str] = {}

        if id is not None and (not isinstance(id, str) or not id.strip()):
            details["id"] = "Order id must be a non-empty string"
        if not isinstance(customer_id, str) or not customer_id.strip():
            details["customer_id"] = "Required"

        parsed_items: list[OrderItem] = []
        raw_items = list(items) if items is not None else []
        if not raw_items:
            details["items"] = "Order must have at least one item"
        seen: set[str] = set()
        for index, raw in enumerate(raw_items):
            try:
                item = _coerce_item(raw)
            except OrderValidationError as exc:
                for key, message in exc.details.items():
                    details[f"items[{index}].{key}"] = message
                continue
            if item.product_id in seen:
                details[f"items[{index}].product_id"] = "Duplicate product id"
                continue
            seen.add(item.product_id)
            parsed_items.append(item)

        order_status = OrderStatus.PENDING
        if status is not None:
            try:
                order_status = OrderStatus(status)
            except ValueError:
                details["status"] = f"Unknown status: {status}"

        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            details["version"] = "Version must be a non-negative integer"
        if metadata is not None and not isinstance(metadata, Mapping):
            details["metadata"] = "Metadata must be a mapping"

        created = created_at or _utcnow()
        updated = updated_at or created
        if not _is_aware(created):
            details["created_at"] = TIMESTAMP_MESSAGE
        if not _is_aware(updated):
            details["updated_at"] = TIMESTAMP_MESSAGE
        if "created_at" not in details and "updated_at" not in details:
            if updated < created:
                details["updated_at"] = "updated_at cannot precede created_at"

        if details:
            raise OrderValidationError("Invalid order", details)

        order = cls.__new__(cls)
        order._id = id or str(uuid4())
        order._customer_id = customer_id
        order._items = parsed_items
        order._status = order_status
        order._created_at = created
        order._updated_at = updated
        order._metadata = dict(metadata) if metadata is not None else None
        order._version = version
        return order

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> "Order":
        """Rehydrate an order from ``to_snapshot`` output."""
        return cls.create(
            customer_id=snapshot.get("customer_id"),
            items=snapshot.get("items") or [],
            id=snapshot.get("id"),
            status=snapshot.get("status"),
            created_at=_parse_timestamp(snapshot.get("created_at")),
            updated_at=_parse_timestamp(snapshot.get("updated_at")),
            metadata=snapshot.get("metadata"),
            version=snapshot.get("version", 0),
        )

    def to_snapshot(self) -> dict[str, Any]:
        """Return a JSON-compatible primitive view of the order."""
        return {
            "id": self._id,
            "customer_id": self._customer_id,
            "items": [item.to_primitives() for item in self._items],
            "status": self._status.value,
            "created_at": self._created_at.isoformat(),
            "updated_at": self._updated_at.isoformat(),
            "metadata": dict(self._metadata) if self._metadata is not None else None,
            "version": self._version,
        }

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def customer_id(self) -> str:
        return self._customer_id

    @property
    def items(self) -> tuple[OrderItem, ...]:
        return tuple(self._items)

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def metadata(self) -> Optional[dict[str, Any]]:
        return dict(self._metadata) if self._metadata is not None else None

    @property
    def version(self) -> int:
        return self._version

    @property
    def total(self) -> Decimal:
        """Sum of all line totals, recomputed on every read."""
        return sum((item.line_total for item in self._items), Decimal("0"))

    def find_item(self, product_id: str) -> Optional[OrderItem]:
        index = self._index_of(product_id)
        return self._items[index] if index is not None else None

    # ------------------------------------------------------------------
    # Item mutations
    # ------------------------------------------------------------------

    def add_item(
        self,
        item: "OrderItem | Mapping[str, Any]",
        *,
        at: Optional[datetime] = None,
    ) -> None:
        """Add an item, merging with an existing line for the same product.

        On merge the quantities are summed, the new unit price wins and
        metadata is merged with the new keys taking precedence.
        """
        new_item = _coerce_item(item)
        updated_at = self._next_updated_at(at)
        index = self._index_of(new_item.product_id)
        items = list(self._items)
        if index is None:
            items.append(new_item)
        else:
            existing = items[index]
            merged_metadata = None
            if existing.metadata is not None or new_item.metadata is not None:
                merged_metadata = {
                    **(existing.metadata or {}),
                    **(new_item.metadata or {}),
                }
            items[index] = replace(
                existing,
                quantity=existing.quantity + new_item.quantity,
                unit_price=new_item.unit_price,
                metadata=merged_metadata,
            )
        self._items = items
        self._updated_at = updated_at

    def remove_item(self, product_id: str, *, at: Optional[datetime] = None) -> None:
        index = self._require_index(product_id)
        if len(self._items) == 1:
            raise InvariantViolationError("Order must have at least one item")
        updated_at = self._next_updated_at(at)
        self._items = [item for i, item in enumerate(self._items) if i != index]
        self._updated_at = updated_at

    def update_item_quantity(
        self, product_id: str, quantity: int, *, at: Optional[datetime] = None
    ) -> None:
        if not is_positive_int(quantity):
            raise OrderValidationError(
                "Invalid quantity",
                {"quantity": "Quantity must be a positive integer"},
            )
        index = self._require_index(product_id)
        updated_at = self._next_updated_at(at)
        items = list(self._items)
        items[index] = replace(items[index], quantity=quantity)
        self._items = items
        self._updated_at = updated_at

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def confirm(self, *, at: Optional[datetime] = None) -> None:
        self._transition(OrderStatus.CONFIRMED, at)

    def mark_paid(self, *, at: Optional[datetime] = None) -> None:
        self._transition(OrderStatus.PAID, at)

    def mark_shipped(self, *, at: Optional[datetime] = None) -> None:
        self._transition(OrderStatus.SHIPPED, at)

    def cancel(
        self, reason: Optional[str] = None, *, at: Optional[datetime] = None
    ) -> None:
        """Cancel the order, recording the reason in metadata if given."""
        self._check_transition(OrderStatus.CANCELLED)
        updated_at = self._next_updated_at(at)
        if reason:
            self._metadata = {**(self._metadata or {}), CANCELLATION_REASON_KEY: reason}
        self._status = OrderStatus.CANCELLED
        self._updated_at = updated_at

    # ------------------------------------------------------------------
    # Persistence support
    # ------------------------------------------------------------------

    def mark_persisted(self, version: int) -> None:
        """Record the version assigned by the repository on save."""
        self._version = version

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, target: OrderStatus, at: Optional[datetime]) -> None:
        self._check_transition(target)
        updated_at = self._next_updated_at(at)
        self._status = target
        self._updated_at = updated_at

    def _check_transition(self, target: OrderStatus) -> None:
        if self._status not in _ALLOWED_SOURCES[target]:
            raise InvalidTransitionError(self._status.value, target.value)

    def _index_of(self, product_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.product_id == product_id:
                return index
        return None

    def _require_index(self, product_id: str) -> int:
        index = self._index_of(product_id)
        if index is None:
            raise ProductNotInOrderError(product_id)
        return index

    def _next_updated_at(self, at: Optional[datetime]) -> datetime:
        """Return the timestamp a mutation stamped ``at`` should record."""
        if at is None:
            at = _utcnow()
        elif not _is_aware(at):
            raise OrderValidationError("Invalid timestamp", {"at": TIMESTAMP_MESSAGE})
        return max(self._updated_at, at)

    def __repr__(self) -> str:
        return (
            f"Order(id={self._id!r}, customer_id={self._customer_id!r}, "
            f"status={self._status.value}, items={len(self._items)}, "
            f"version={self._version})"
        )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
