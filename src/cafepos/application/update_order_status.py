"""Application service: Update Order Status use case.

Drives the order status machine.  Cancelling an order that still holds
stock puts that stock back; completing an order stamps ``completed_at``
the first time only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import structlog

from cafepos.application.dto import OrderDTO, order_to_dto
from cafepos.application.notifications import (
    ORDER_STATUS_UPDATED,
    PRODUCT_STOCK_CHANGED,
    NotificationPublisher,
    publish_safely,
    status_update_payload,
    stock_changed_payload,
)
from cafepos.domain.exceptions import EntityNotFoundError
from cafepos.domain.model.order import OrderStatus
from cafepos.domain.repository.order_repository import OrderRepository
from cafepos.domain.repository.product_repository import ProductRepository
from cafepos.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        publisher: NotificationPublisher,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._publisher = publisher
        self._clock = clock

    def handle(self, order_id: int, new_status: str) -> OrderDTO:
        # Unknown statuses are rejected before anything is loaded.
        status = OrderStatus.parse(new_status)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        now = self._clock()
        previous = order.transition_to(status, now)

        # Compare-and-set on the old status: a concurrent update of the
        # same order loses with ConflictError instead of restoring twice.
        self._order_repo.save(order, expected_status=previous)

        restored: list[str] = []
        if status == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED:
            restored = StockLedger(self._product_repo).restore_for_order(order)

        logger.info(
            "order_status_changed",
            order_id=order.id,
            order_number=order.order_number,
            from_status=previous.value,
            to_status=status.value,
        )

        publish_safely(self._publisher, ORDER_STATUS_UPDATED, status_update_payload(order, now))
        if restored:
            publish_safely(
                self._publisher, PRODUCT_STOCK_CHANGED, stock_changed_payload(restored)
            )

        return order_to_dto(order)
