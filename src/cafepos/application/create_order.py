"""Application service: Create Order use case.

Orchestrates the flow between repositories and the domain model:

1. Price and validate every item (nothing is written if any item fails).
2. Settle the payment against the computed total.
3. Assign an order number and persist the order.
4. Take the ordered quantities out of stock.
5. Notify subscribers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Sequence

import structlog

from cafepos.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from cafepos.application.notifications import (
    NEW_ORDER,
    PRODUCT_STOCK_CHANGED,
    NotificationPublisher,
    new_order_payload,
    publish_safely,
    stock_changed_payload,
)
from cafepos.domain.exceptions import (
    ConflictError,
    DuplicateOrderNumberError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from cafepos.domain.model.order import Order, OrderStatus, OrderType, PaymentMethod
from cafepos.domain.model.value_objects import Money
from cafepos.domain.repository.order_repository import OrderRepository
from cafepos.domain.repository.order_sequence import OrderSequence
from cafepos.domain.repository.product_repository import ProductRepository
from cafepos.domain.repository.settings_repository import SettingsRepository
from cafepos.domain.service.order_number import OrderNumberGenerator
from cafepos.domain.service.order_pricer import OrderPricer, settle_payment
from cafepos.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)

MoneyInput = str | int | float | Decimal
MAX_NUMBER_ATTEMPTS = 2


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        settings_repo: SettingsRepository,
        sequence: OrderSequence,
        publisher: NotificationPublisher,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._settings_repo = settings_repo
        self._numbers = OrderNumberGenerator(sequence, order_repo)
        self._publisher = publisher
        self._clock = clock

    def handle(
        self,
        items: Sequence[OrderItemSpec],
        order_type: str | None,
        payment_method: str | None,
        customer_name: str = "",
        table_number: str = "",
        cash_received: MoneyInput | None = None,
        change_given: MoneyInput | None = None,
        discount: MoneyInput | None = None,
        created_by: str | None = None,
    ) -> OrderDTO:
        """Create, persist and announce a new order."""
        if not items:
            raise ValidationError("Order must contain at least one item")
        kind = OrderType.parse(order_type)
        method = PaymentMethod.parse(payment_method)

        # Tax settings are read per order so changes apply immediately.
        settings = self._settings_repo.get()
        priced = OrderPricer(
            self._product_repo, settings.tax_policy, currency=settings.currency
        ).price(items)

        currency = priced.total.currency
        cash, change = settle_payment(
            method,
            priced.total,
            cash_received=_money_or_none(cash_received, currency),
            change_given=_money_or_none(change_given, currency),
        )

        discount_money = _money_or_none(discount, currency)

        def build(order_number: str, now: datetime) -> Order:
            return Order.create(
                order_number=order_number,
                items=list(priced.items),
                subtotal=priced.subtotal,
                tax=priced.tax,
                total=priced.total,
                payment_method=method,
                order_type=kind,
                cash_received=cash,
                change_given=change,
                discount=discount_money,
                customer_name=customer_name,
                table_number=table_number,
                created_by=created_by,
                created_at=now,
            )

        order = self._persist(build)

        try:
            affected = StockLedger(self._product_repo).decrement_for_order(order)
        except (InsufficientStockError, EntityNotFoundError):
            # Stock ran out between pricing and decrement.  The number is
            # spent, so keep the record but take it out of the queue.
            self._void(order)
            raise

        logger.info(
            "order_created",
            order_id=order.id,
            order_number=order.order_number,
            total=str(order.total.amount),
            items=len(order.items),
        )

        publish_safely(self._publisher, NEW_ORDER, new_order_payload(order))
        publish_safely(self._publisher, PRODUCT_STOCK_CHANGED, stock_changed_payload(affected))

        return order_to_dto(order)

    def _persist(self, build: Callable[[str, datetime], Order]) -> Order:
        """Number and insert the order, retrying once on a number collision."""
        attempt = 0
        while True:
            attempt += 1
            now = self._clock()
            order = build(self._numbers.next_number(now.date()), now)
            try:
                self._order_repo.add(order)
                return order
            except DuplicateOrderNumberError as exc:
                logger.warning(
                    "order_number_conflict",
                    order_number=order.order_number,
                    attempt=attempt,
                )
                if attempt >= MAX_NUMBER_ATTEMPTS:
                    raise ConflictError(
                        f"Could not assign a unique order number ({order.order_number})"
                    ) from exc

    def _void(self, order: Order) -> None:
        """Cancel an inserted order whose stock could not be taken.

        The order held no stock, so nothing is restored.  If a concurrent
        cancel got there first it has already put the order's quantities
        back; those are taken out again.
        """
        order.transition_to(OrderStatus.CANCELLED, self._clock())
        try:
            self._order_repo.save(order, expected_status=OrderStatus.PENDING)
        except ConflictError:
            current = self._order_repo.get_by_id(order.id)  # type: ignore[arg-type]
            if current is not None and current.status == OrderStatus.CANCELLED:
                StockLedger(self._product_repo).reclaim_for_order(current)
            else:
                logger.error(
                    "order_void_conflict",
                    order_id=order.id,
                    order_number=order.order_number,
                    status=current.status.value if current else None,
                )
        logger.warning(
            "order_voided_late_stock_failure",
            order_id=order.id,
            order_number=order.order_number,
        )


def _money_or_none(value: MoneyInput | None, currency: str) -> Money | None:
    if value is None or value == "":
        return None
    return Money.of(value, currency)
