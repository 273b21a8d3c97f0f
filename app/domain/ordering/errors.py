"""
Domain-specific errors for the ordering bounded context.

All errors raised from the domain layer must be defined here.
Use cases translate them into typed results; the interface layer
maps those results to HTTP responses.
No framework imports allowed.
"""


class OrderingDomainError(Exception):
    """Base error for all ordering domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class OrderValidationError(OrderingDomainError):
    """Raised when order or item data breaks a field-level rule.

    Attributes:
        details: Mapping of field name to a human-readable message.
    """

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})


class ProductNotInOrderError(OrderingDomainError):
    """Raised when an item operation references a product the order lacks."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found in order: {product_id}")
        self.product_id = product_id


class InvalidTransitionError(OrderingDomainError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move order from {current} to {target}")
        self.current = current
        self.target = target


class InvariantViolationError(OrderingDomainError):
    """Raised when a mutation would leave the aggregate inconsistent."""


class ConcurrentModificationError(OrderingDomainError):
    """Raised when a save is attempted against a stale order version."""

    def __init__(self, order_id: str, expected: int, actual: int | None) -> None:
        super().__init__(
            f"Order {order_id} was modified concurrently: "
            f"expected version {expected}, found {actual}"
        )
        self.order_id = order_id
        self.expected = expected
        self.actual = actual


class InfrastructureError(Exception):
    """Base error for failures of a backend behind a port."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class PersistenceError(InfrastructureError):
    """Raised when the order store or the outbox cannot be reached."""


class PricingUnavailableError(InfrastructureError):
    """Raised when the pricing backend fails to answer a lookup."""

    def __init__(self, sku: str, reason: str) -> None:
        super().__init__(f"Price lookup failed for {sku}: {reason}")
        self.sku = sku
        self.reason = reason


class EventPublicationError(InfrastructureError):
    """Raised when an event cannot be staged or relayed."""
