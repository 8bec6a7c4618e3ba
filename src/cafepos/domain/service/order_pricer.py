"""Domain service: Order Pricer.

Turns what the cashier asked for into validated, priced line items and
order totals.  Every check for every item runs before the caller
persists anything, so a failing item never leaves a partial order or a
partial stock movement behind.

Checks run in a fixed order per item: existence, availability, stock,
then options.  Payment is settled only after all items are priced.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from cafepos.domain.exceptions import (
    EntityNotFoundError,
    InsufficientPaymentError,
    InsufficientStockError,
    InvalidOptionError,
    MissingRequiredOptionError,
    ProductUnavailableError,
    ValidationError,
)
from cafepos.domain.model.order import (
    OrderLineItem,
    PaymentMethod,
    ProductSnapshot,
    SelectedOption,
    SelectedOptionValue,
)
from cafepos.domain.model.product import OptionGroup, Product, SelectionMode
from cafepos.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity, TaxPolicy
from cafepos.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class OptionSelection:
    """Input: option value names chosen within one group."""

    group_name: str
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class LineItemRequest:
    """Input: one product the customer asked for.

    Prices are never taken from the request; only names are matched
    against the catalog.
    """

    product_id: str
    quantity: int
    selected_options: tuple[OptionSelection, ...] = ()
    customization_notes: str = ""


@dataclass(frozen=True)
class PricedOrder:
    items: tuple[OrderLineItem, ...]
    subtotal: Money
    tax: Money
    total: Money


class OrderPricer:

    def __init__(
        self,
        product_repo: ProductRepository,
        tax_policy: TaxPolicy,
        currency: str = DEFAULT_CURRENCY,
    ) -> None:
        self._product_repo = product_repo
        self._tax_policy = tax_policy
        self._currency = currency

    def price(self, requests: Sequence[LineItemRequest]) -> PricedOrder:
        """Validate and price every request, then compute order totals."""
        if not requests:
            raise ValidationError("Order must contain at least one item")

        items: list[OrderLineItem] = []
        # Lines for the same product draw from the same stock.
        claimed: dict[str, int] = {}

        for request in requests:
            if not request.product_id:
                raise ValidationError("Each item must have a product ID and quantity")
            product = self._product_repo.get_by_id(request.product_id)
            if product is None:
                raise EntityNotFoundError(
                    f"Product with ID {request.product_id} not found"
                )
            if product.price.currency != self._currency:
                raise ValidationError(
                    f'Product "{product.name}" is priced in {product.price.currency}, '
                    f"the store sells in {self._currency}"
                )
            already = claimed.get(product.id, 0)
            items.append(price_line_item(product, request, already_claimed=already))
            claimed[product.id] = already + request.quantity

        subtotal = Money.zero(self._currency)
        for item in items:
            subtotal = subtotal + item.item_total

        tax, total = self._tax_policy.apply(subtotal)
        return PricedOrder(items=tuple(items), subtotal=subtotal, tax=tax, total=total)


def price_line_item(
    product: Product,
    request: LineItemRequest,
    already_claimed: int = 0,
) -> OrderLineItem:
    """Validate one request against its product and build the line item."""
    quantity = Quantity(request.quantity)

    if not product.is_available:
        raise ProductUnavailableError(f'Product "{product.name}" is not available')

    if not product.has_stock_for(already_claimed + quantity.value):
        available = max(product.stock_count - already_claimed, 0)
        raise InsufficientStockError(
            f'Insufficient stock for "{product.name}". '
            f"Available: {available}, Requested: {quantity.value}"
        )

    selected = resolve_options(product, request.selected_options)
    options_total = sum((group.total for group in selected), Decimal("0"))

    item_amount = product.price.amount + options_total
    if item_amount < 0:
        raise ValidationError(f'Item price for "{product.name}" cannot be negative')
    item_price = Money(item_amount, product.price.currency)

    return OrderLineItem(
        product_id=product.id,
        product_snapshot=ProductSnapshot(
            name=product.name,
            price=product.price,
            image_url=product.image_url,
        ),
        quantity=quantity,
        base_price=product.price,
        options_total=options_total,
        item_price=item_price,
        item_total=item_price * quantity.value,
        selected_options=selected,
        customization_notes=(request.customization_notes or "").strip(),
    )


def resolve_options(
    product: Product,
    selections: Sequence[OptionSelection],
) -> tuple[SelectedOption, ...]:
    """Fold client selections through the product's option groups.

    Fails fast on the first mismatch.  Modifiers always come from the
    catalog.  Empty selections for optional groups are dropped.
    """
    resolved: list[SelectedOption] = []
    chosen_groups: set[str] = set()

    for selection in selections:
        group = product.find_option_group(selection.group_name)
        if group is None:
            raise InvalidOptionError(
                f'Invalid option group "{selection.group_name}" '
                f'for product "{product.name}"'
            )
        if selection.group_name in chosen_groups:
            raise InvalidOptionError(
                f'Option group "{selection.group_name}" selected more than once'
            )
        chosen_groups.add(selection.group_name)

        if not selection.values:
            if group.required:
                raise MissingRequiredOptionError(
                    f'Required option group "{group.name}" must have at least one selection'
                )
            continue

        resolved.append(_resolve_group(group, selection))

    for group in product.option_groups:
        if group.required and not any(s.group_name == group.name for s in resolved):
            raise MissingRequiredOptionError(
                f'Required option "{group.name}" is missing for product "{product.name}"'
            )

    return tuple(resolved)


def _resolve_group(group: OptionGroup, selection: OptionSelection) -> SelectedOption:
    if group.mode == SelectionMode.SINGLE and len(selection.values) > 1:
        raise InvalidOptionError(
            f'Option group "{group.name}" allows a single selection'
        )

    values: list[SelectedOptionValue] = []
    for name in selection.values:
        option = group.find_value(name)
        if option is None:
            raise InvalidOptionError(
                f'Invalid option value "{name}" in group "{group.name}"'
            )
        values.append(SelectedOptionValue(name=option.name, price_modifier=option.price_modifier))

    return SelectedOption(group_name=group.name, values=tuple(values))


def settle_payment(
    method: PaymentMethod,
    total: Money,
    cash_received: Money | None = None,
    change_given: Money | None = None,
) -> tuple[Money, Money]:
    """Return ``(cash_received, change_given)`` to record on the order.

    Only cash payments record cash; QR payments record zero for both.
    """
    if method != PaymentMethod.CASH:
        return Money.zero(total.currency), Money.zero(total.currency)

    received = cash_received or Money.zero(total.currency)
    if received < total:
        raise InsufficientPaymentError("Cash received is less than the total amount")
    if change_given is None:
        change_given = received - total
    return received, change_given
