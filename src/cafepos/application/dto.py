"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Money is rendered as
plain decimal strings (``"256.80"``) so callers never see floats.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from cafepos.domain.model.order import Order, OrderLineItem
from cafepos.domain.model.value_objects import Money
from cafepos.domain.service.order_pricer import LineItemRequest, OptionSelection

# Inputs are the pricer's request types; re-exported for the CLI.
OrderItemSpec = LineItemRequest
OptionSelectionSpec = OptionSelection


def money_str(money: Money) -> str:
    return f"{money.amount:.2f}"


def _iso(when: datetime | None) -> str | None:
    return when.isoformat() if when is not None else None


@dataclass(frozen=True)
class SelectedOptionDTO:
    group_name: str
    values: list[tuple[str, str]]  # (name, price modifier)


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    base_price: str
    options_total: str
    item_price: str
    item_total: str
    selected_options: list[SelectedOptionDTO]
    customization_notes: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    status: str
    order_type: str
    payment_method: str
    customer_name: str
    table_number: str
    items: list[OrderLineItemDTO]
    subtotal: str
    tax: str
    discount: str
    total: str
    cash_received: str
    change_given: str
    currency: str
    created_by: str | None
    created_at: str
    completed_at: str | None


def line_item_to_dto(item: OrderLineItem) -> OrderLineItemDTO:
    return OrderLineItemDTO(
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity.value,
        base_price=money_str(item.base_price),
        options_total=f"{item.options_total:.2f}",
        item_price=money_str(item.item_price),
        item_total=money_str(item.item_total),
        selected_options=[
            SelectedOptionDTO(
                group_name=group.group_name,
                values=[(v.name, f"{v.price_modifier:.2f}") for v in group.values],
            )
            for group in item.selected_options
        ],
        customization_notes=item.customization_notes,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        status=order.status.value,
        order_type=order.order_type.value,
        payment_method=order.payment_method.value,
        customer_name=order.customer_name,
        table_number=order.table_number,
        items=[line_item_to_dto(item) for item in order.items],
        subtotal=money_str(order.subtotal),
        tax=money_str(order.tax),
        discount=money_str(order.discount),
        total=money_str(order.total),
        cash_received=money_str(order.cash_received),
        change_given=money_str(order.change_given),
        currency=order.total.currency,
        created_by=order.created_by,
        created_at=order.created_at.isoformat(),
        completed_at=_iso(order.completed_at),
    )
