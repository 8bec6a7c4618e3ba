"""Application service: List Orders use case (query)."""

from __future__ import annotations

from datetime import date

from cafepos.application.dto import OrderDTO, order_to_dto
from cafepos.domain.model.order import Order, OrderStatus, PaymentMethod
from cafepos.domain.repository.order_repository import OrderRepository


def created_within(order: Order, start_date: date | None, end_date: date | None) -> bool:
    """True if the order was created on a day in ``[start_date, end_date]``."""
    day = order.created_at.date()
    if start_date is not None and day < start_date:
        return False
    if end_date is not None and day > end_date:
        return False
    return True


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        status: str | None = None,
        payment_method: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[OrderDTO]:
        """Return matching orders, newest first."""
        wanted_status = OrderStatus.parse(status) if status else None
        wanted_method = PaymentMethod.parse(payment_method) if payment_method else None

        return [
            order_to_dto(order)
            for order in self._order_repo.list_all()
            if (wanted_status is None or order.status == wanted_status)
            and (wanted_method is None or order.payment_method == wanted_method)
            and created_within(order, start_date, end_date)
        ]
