"""Domain service: daily order numbers (``ORD-YYYYMMDD-NNNN``).

Numbers come from an atomic per-day counter rather than from scanning
the orders and adding one, so two orders created at the same time can
never be given the same number.  The counter is floored at the greatest
number already stored for the day, which keeps the sequence increasing
even if the counter record is lost.
"""

from __future__ import annotations

from datetime import date

from cafepos.domain.exceptions import ConflictError
from cafepos.domain.model.order import (
    MAX_DAILY_SEQUENCE,
    format_order_number,
    order_number_prefix,
    parse_order_sequence,
)
from cafepos.domain.repository.order_repository import OrderRepository
from cafepos.domain.repository.order_sequence import OrderSequence


class OrderNumberGenerator:

    def __init__(self, sequence: OrderSequence, order_repo: OrderRepository) -> None:
        self._sequence = sequence
        self._order_repo = order_repo

    def next_number(self, day: date) -> str:
        latest = self._order_repo.latest_order_number(order_number_prefix(day))
        floor = parse_order_sequence(latest) if latest else 0

        value = self._sequence.next_value(day.strftime("%Y%m%d"), floor=floor)
        if value > MAX_DAILY_SEQUENCE:
            raise ConflictError(f"Order numbers for {day.isoformat()} are exhausted")
        return format_order_number(day, value)
