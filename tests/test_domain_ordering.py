"""
Tests for the ordering domain layer.

Tests the Order aggregate and OrderItem value object in isolation.
No infrastructure, no framework, no IO.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.domain.ordering.entities import (
    CANCELLATION_REASON_KEY,
    Order,
    OrderItem,
    OrderStatus,
    to_amount,
)
from app.domain.ordering.errors import (
    InvalidTransitionError,
    InvariantViolationError,
    OrderValidationError,
    ProductNotInOrderError,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(minutes=1)


def make_item(product_id: str = "prod-1", quantity: int = 1, unit_price="10", **extra):
    return OrderItem(
        product_id=product_id,
        name=extra.pop("name", "Widget"),
        quantity=quantity,
        unit_price=unit_price,
        **extra,
    )


def make_order(*items, status=None) -> Order:
    return Order.create(
        customer_id="cust-1",
        items=list(items) or [make_item()],
        status=status,
        created_at=T0,
    )


class TestOrderItem:
    """Tests for the OrderItem value object."""

    def test_valid_item_normalizes_price(self) -> None:
        """String and int prices become Decimals."""
        item = make_item(unit_price="2.50", quantity=4)
        assert item.unit_price == Decimal("2.50")
        assert item.line_total == Decimal("10.00")

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, None])
    def test_invalid_quantity_rejected(self, quantity) -> None:
        """Quantity must be a positive integer."""
        with pytest.raises(OrderValidationError) as exc_info:
            make_item(quantity=quantity)
        assert "quantity" in exc_info.value.details

    @pytest.mark.parametrize("price", [-1, "abc", "NaN", float("inf"), None])
    def test_invalid_price_rejected(self, price) -> None:
        """Unit price must be finite and non-negative."""
        with pytest.raises(OrderValidationError) as exc_info:
            make_item(unit_price=price)
        assert "unit_price" in exc_info.value.details

    def test_all_field_errors_reported_together(self) -> None:
        """Every broken field appears in the details map."""
        with pytest.raises(OrderValidationError) as exc_info:
            OrderItem(product_id="", name=" ", quantity=0, unit_price=-5)
        assert set(exc_info.value.details) == {
            "product_id",
            "name",
            "quantity",
            "unit_price",
        }

    def test_zero_price_allowed(self) -> None:
        """Free items are valid."""
        assert make_item(unit_price=0).line_total == Decimal("0")

    def test_from_mapping_rejects_non_mapping(self) -> None:
        with pytest.raises(OrderValidationError):
            OrderItem.from_mapping(["prod-1"])


class TestToAmount:
    """Tests for price coercion."""

    def test_bool_is_not_a_price(self) -> None:
        assert to_amount(True) is None

    def test_float_keeps_its_decimal_text(self) -> None:
        assert to_amount(0.1) == Decimal("0.1")


class TestOrderCreate:
    """Tests for Order.create."""

    def test_total_is_sum_of_line_totals(self) -> None:
        """Total equals the sum of quantity times unit price."""
        order = make_order(
            make_item("a-1", quantity=2, unit_price="3.25"),
            make_item("b-2", quantity=3, unit_price="1"),
        )
        assert order.total == Decimal("9.50")

    def test_defaults(self) -> None:
        """New orders are pending, versionless and get a generated id."""
        order = make_order()
        assert order.status is OrderStatus.PENDING
        assert order.version == 0
        assert order.id
        assert order.created_at == order.updated_at == T0

    def test_explicit_id_kept(self) -> None:
        order = Order.create("cust-1", [make_item()], id="order-42")
        assert order.id == "order-42"

    def test_constructor_is_closed(self) -> None:
        """Orders can only be built through the factories."""
        with pytest.raises(TypeError):
            Order()

    def test_empty_customer_and_items_rejected(self) -> None:
        with pytest.raises(OrderValidationError) as exc_info:
            Order.create(customer_id="  ", items=[])
        assert set(exc_info.value.details) == {"customer_id", "items"}

    def test_item_errors_are_indexed(self) -> None:
        """Item failures are reported under items[i].field keys."""
        with pytest.raises(OrderValidationError) as exc_info:
            Order.create(
                "cust-1",
                [
                    {"product_id": "p-1", "name": "A", "quantity": 1, "unit_price": 1},
                    {"product_id": "p-2", "name": "B", "quantity": 0, "unit_price": 1},
                ],
            )
        assert exc_info.value.details == {
            "items[1].quantity": "Quantity must be a positive integer"
        }

    def test_duplicate_product_ids_rejected(self) -> None:
        with pytest.raises(OrderValidationError) as exc_info:
            Order.create("cust-1", [make_item("p-1"), make_item("p-1")])
        assert "items[1].product_id" in exc_info.value.details

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(OrderValidationError) as exc_info:
            Order.create("cust-1", [make_item()], status="lost")
        assert "status" in exc_info.value.details

    def test_updated_before_created_rejected(self) -> None:
        with pytest.raises(OrderValidationError):
            Order.create(
                "cust-1", [make_item()], created_at=T1, updated_at=T0
            )

    def test_snapshot_rehydrates_equal_state(self) -> None:
        """from_snapshot(to_snapshot()) keeps every field."""
        order = Order.create(
            "cust-1",
            [make_item(metadata={"color": "red"})],
            created_at=T0,
            metadata={"channel": "web"},
        )
        order.confirm(at=T1)
        restored = Order.from_snapshot(order.to_snapshot())
        assert restored.to_snapshot() == order.to_snapshot()
        assert restored.updated_at == T1
        assert restored.items[0].metadata == {"color": "red"}


class TestOrderItems:
    """Tests for item mutations on the aggregate."""

    def test_add_new_item_appends(self) -> None:
        order = make_order()
        order.add_item(make_item("prod-2", quantity=2, unit_price="5"), at=T1)
        assert [i.product_id for i in order.items] == ["prod-1", "prod-2"]
        assert order.total == Decimal("20")
        assert order.updated_at == T1

    def test_add_existing_item_merges(self) -> None:
        """Same product id sums quantities and keeps one line."""
        order = make_order(make_item(quantity=2, unit_price="10", metadata={"a": 1}))
        order.add_item(make_item(quantity=3, unit_price="8", metadata={"b": 2}))
        assert len(order.items) == 1
        item = order.items[0]
        assert item.quantity == 5
        assert item.unit_price == Decimal("8")
        assert item.metadata == {"a": 1, "b": 2}

    def test_add_accepts_mapping(self) -> None:
        order = make_order()
        order.add_item({"product_id": "p-9", "name": "X", "quantity": 1, "unit_price": 1})
        assert order.find_item("p-9") is not None

    def test_add_invalid_item_leaves_order_unchanged(self) -> None:
        order = make_order()
        before = order.to_snapshot()
        with pytest.raises(OrderValidationError):
            order.add_item({"product_id": "p-9", "name": "X", "quantity": 0, "unit_price": 1})
        assert order.to_snapshot() == before

    def test_remove_sole_item_fails_without_mutation(self) -> None:
        """An order can never be emptied."""
        order = make_order()
        before = order.to_snapshot()
        with pytest.raises(InvariantViolationError):
            order.remove_item("prod-1", at=T1)
        assert order.to_snapshot() == before

    def test_remove_missing_item_fails(self) -> None:
        order = make_order(make_item("a-1"), make_item("b-2"))
        with pytest.raises(ProductNotInOrderError):
            order.remove_item("zzz")

    def test_remove_item(self) -> None:
        order = make_order(make_item("a-1"), make_item("b-2"))
        order.remove_item("a-1", at=T1)
        assert [i.product_id for i in order.items] == ["b-2"]
        assert order.updated_at == T1

    def test_update_quantity(self) -> None:
        order = make_order()
        order.update_item_quantity("prod-1", 7)
        assert order.items[0].quantity == 7
        assert order.total == Decimal("70")

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_update_quantity_rejects_non_positive(self, quantity) -> None:
        order = make_order()
        with pytest.raises(OrderValidationError):
            order.update_item_quantity("prod-1", quantity)
        assert order.items[0].quantity == 1

    def test_update_quantity_missing_product(self) -> None:
        with pytest.raises(ProductNotInOrderError):
            make_order().update_item_quantity("nope", 2)

    def test_items_view_is_read_only(self) -> None:
        """Callers cannot reach into the aggregate's item list."""
        order = make_order()
        assert isinstance(order.items, tuple)

    def test_updated_at_never_goes_backwards(self) -> None:
        order = make_order()
        order.add_item(make_item("p-2"), at=T0 - timedelta(days=1))
        assert order.updated_at == T0


class TestOrderTransitions:
    """Tests for the order status state machine."""

    def test_happy_path(self) -> None:
        order = make_order()
        order.confirm(at=T1)
        order.mark_paid(at=T1)
        order.mark_shipped(at=T1)
        assert order.status is OrderStatus.SHIPPED

    def test_pay_directly_from_pending(self) -> None:
        order = make_order()
        order.mark_paid()
        assert order.status is OrderStatus.PAID

    @pytest.mark.parametrize(
        "status,operation",
        [
            ("confirmed", "confirm"),
            ("paid", "confirm"),
            ("shipped", "mark_paid"),
            ("pending", "mark_shipped"),
            ("confirmed", "mark_shipped"),
            ("cancelled", "confirm"),
            ("cancelled", "mark_paid"),
        ],
    )
    def test_wrong_source_fails_without_mutation(self, status, operation) -> None:
        """Illegal moves change neither status nor updated_at."""
        order = make_order(status=status)
        with pytest.raises(InvalidTransitionError):
            getattr(order, operation)(at=T1)
        assert order.status.value == status
        assert order.updated_at == T0

    @pytest.mark.parametrize("status", ["pending", "confirmed", "paid"])
    def test_cancel_allowed(self, status) -> None:
        order = make_order(status=status)
        order.cancel(at=T1)
        assert order.status is OrderStatus.CANCELLED
        assert order.updated_at == T1

    def test_cancel_refused_once_shipped(self) -> None:
        order = make_order(status="shipped")
        with pytest.raises(InvalidTransitionError):
            order.cancel("too late", at=T1)
        assert order.status is OrderStatus.SHIPPED
        assert order.metadata is None

    def test_cancel_again_records_new_reason(self) -> None:
        """A cancelled order can be cancelled again to record a reason."""
        order = Order.create(
            "cust-1",
            [make_item()],
            status="cancelled",
            created_at=T0,
            metadata={"channel": "web"},
        )
        order.cancel("second reason", at=T1)
        assert order.status is OrderStatus.CANCELLED
        assert order.metadata == {
            "channel": "web",
            CANCELLATION_REASON_KEY: "second reason",
        }
        assert order.updated_at == T1

    def test_cancel_reason_merged_into_metadata(self) -> None:
        order = Order.create("cust-1", [make_item()], metadata={"channel": "web"})
        order.cancel("customer request")
        assert order.metadata == {
            "channel": "web",
            CANCELLATION_REASON_KEY: "customer request",
        }


class TestOrderTimestamps:
    """Tests for timezone handling of order timestamps."""

    NAIVE = datetime(2024, 1, 1, 12, 0)

    def test_naive_created_at_rejected(self) -> None:
        with pytest.raises(OrderValidationError) as exc_info:
            Order.create("cust-1", [make_item()], created_at=self.NAIVE)
        assert exc_info.value.details == {
            "created_at": "Timestamp must be timezone-aware",
            "updated_at": "Timestamp must be timezone-aware",
        }

    def test_mixed_timestamps_rejected(self) -> None:
        """A naive value next to an aware one is a validation error."""
        with pytest.raises(OrderValidationError) as exc_info:
            Order.create(
                "cust-1", [make_item()], created_at=self.NAIVE, updated_at=T1
            )
        assert set(exc_info.value.details) == {"created_at"}

    @pytest.mark.parametrize(
        "mutation",
        [
            lambda order, at: order.confirm(at=at),
            lambda order, at: order.cancel("changed mind", at=at),
            lambda order, at: order.add_item(make_item("prod-2"), at=at),
            lambda order, at: order.update_item_quantity("prod-1", 5, at=at),
        ],
    )
    def test_naive_at_leaves_order_unchanged(self, mutation) -> None:
        """A rejected timestamp aborts the mutation before any state changes."""
        order = make_order()
        before = order.to_snapshot()
        with pytest.raises(OrderValidationError):
            mutation(order, self.NAIVE)
        assert order.to_snapshot() == before

    def test_naive_at_on_remove_leaves_order_unchanged(self) -> None:
        order = make_order(make_item("a-1"), make_item("b-2"))
        before = order.to_snapshot()
        with pytest.raises(OrderValidationError):
            order.remove_item("a-1", at=self.NAIVE)
        assert order.to_snapshot() == before
