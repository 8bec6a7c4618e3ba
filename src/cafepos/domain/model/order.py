"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items.  Line items,
prices and the order number are frozen at creation; afterwards the order
only moves through its status machine.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from cafepos.domain.exceptions import (
    InvalidStatusError,
    InvalidTransitionError,
    ValidationError,
)
from cafepos.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: str | None) -> OrderStatus:
        for status in cls:
            if status.value == value:
                return status
        valid = ", ".join(s.value for s in cls)
        raise InvalidStatusError(f"Status must be one of: {valid}")

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class OrderType(Enum):
    DINE_IN = "Dine-In"
    TAKE_AWAY = "Take Away"

    @classmethod
    def parse(cls, value: str | None) -> OrderType:
        if not value:
            raise ValidationError("Order type is required")
        for order_type in cls:
            if order_type.value == value:
                return order_type
        raise ValidationError(f"{value} is not a valid order type")


class PaymentMethod(Enum):
    CASH = "Cash"
    QR_CODE = "QRCode"

    @classmethod
    def parse(cls, value: str | None) -> PaymentMethod:
        if not value:
            raise ValidationError("Payment method is required")
        for method in cls:
            if method.value == value:
                return method
        raise ValidationError(f"{value} is not a valid payment method")


# ---------------------------------------------------------------------------
# Order numbers: ORD-YYYYMMDD-NNNN
# ---------------------------------------------------------------------------
ORDER_NUMBER_RE = re.compile(r"^ORD-(\d{8})-(\d{4})$")
MAX_DAILY_SEQUENCE = 9999


def order_number_prefix(day: date) -> str:
    return f"ORD-{day.strftime('%Y%m%d')}-"


def format_order_number(day: date, sequence: int) -> str:
    if not 1 <= sequence <= MAX_DAILY_SEQUENCE:
        raise ValidationError(f"Order sequence {sequence} out of range")
    return f"{order_number_prefix(day)}{sequence:04d}"


def parse_order_sequence(order_number: str) -> int:
    match = ORDER_NUMBER_RE.match(order_number)
    if match is None:
        raise ValidationError(f"Malformed order number: {order_number!r}")
    return int(match.group(2))


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProductSnapshot:
    """What the product looked like at the moment it was sold."""

    name: str
    price: Money
    image_url: str = ""


@dataclass(frozen=True)
class SelectedOptionValue:
    name: str
    price_modifier: Decimal  # catalog value, never the client's number


@dataclass(frozen=True)
class SelectedOption:
    group_name: str
    values: tuple[SelectedOptionValue, ...]

    @property
    def total(self) -> Decimal:
        return sum((v.price_modifier for v in self.values), Decimal("0"))


@dataclass(frozen=True)
class OrderLineItem:
    """Immutable price snapshot of one product entry in an order.

    ``product_id`` is kept for later stock lookups; everything needed to
    show or re-total the line lives on the item itself.
    """

    product_id: str
    product_snapshot: ProductSnapshot
    quantity: Quantity
    base_price: Money
    options_total: Decimal
    item_price: Money
    item_total: Money
    selected_options: tuple[SelectedOption, ...] = ()
    customization_notes: str = ""

    @property
    def product_name(self) -> str:
        return self.product_snapshot.name


@dataclass
class Order:
    """Aggregate root for café orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    items: list[OrderLineItem]
    subtotal: Money
    tax: Money
    total: Money
    payment_method: PaymentMethod
    order_type: OrderType
    discount: Money = field(default_factory=Money.zero)
    cash_received: Money = field(default_factory=Money.zero)
    change_given: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.PENDING
    customer_name: str = ""
    table_number: str = ""
    created_by: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        items: list[OrderLineItem],
        subtotal: Money,
        tax: Money,
        total: Money,
        payment_method: PaymentMethod,
        order_type: OrderType,
        cash_received: Money | None = None,
        change_given: Money | None = None,
        discount: Money | None = None,
        customer_name: str = "",
        table_number: str = "",
        created_by: str | None = None,
        created_at: datetime | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")
        parse_order_sequence(order_number)

        expected = sum((item.item_total.amount for item in items), Decimal("0"))
        if subtotal.amount != expected:
            raise ValidationError(
                f"Subtotal {subtotal} does not match line items ({expected})"
            )

        currency = subtotal.currency
        when = created_at or datetime.now(timezone.utc)
        return Order(
            id=None,
            order_number=order_number,
            items=list(items),
            subtotal=subtotal,
            tax=tax,
            total=total,
            payment_method=payment_method,
            order_type=order_type,
            discount=discount or Money.zero(currency),
            cash_received=cash_received or Money.zero(currency),
            change_given=change_given or Money.zero(currency),
            customer_name=(customer_name or "").strip(),
            table_number=(table_number or "").strip(),
            created_by=created_by,
            created_at=when,
            updated_at=when,
        )

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, new_status: OrderStatus, now: datetime | None = None) -> OrderStatus:
        """Move the order to *new_status* and return the previous status.

        Stock restoration on cancellation is coordinated by the application
        handler via the stock ledger, not here.
        """
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Cannot change order {self.order_number} from "
                f"{self.status.value} to {new_status.value}"
            )
        now = now or datetime.now(timezone.utc)
        previous = self.status
        self.status = new_status
        self.updated_at = now
        if new_status == OrderStatus.COMPLETED and self.completed_at is None:
            self.completed_at = now
        return previous

    # --- Computed properties --------------------------------------------------

    @property
    def product_ids(self) -> list[str]:
        """Distinct product ids, in line-item order."""
        seen: list[str] = []
        for item in self.items:
            if item.product_id not in seen:
                seen.append(item.product_id)
        return seen

    @property
    def quantities_by_product(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for item in self.items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity.value
        return totals
