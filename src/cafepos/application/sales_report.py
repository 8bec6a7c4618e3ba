"""Application service: Sales Report use case (query).

Only completed orders count towards revenue.  Best sellers are grouped
by the product name captured at the time of sale, so renamed or deleted
products still show up under the name they were sold as.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from cafepos.application.list_orders import created_within
from cafepos.domain.model.order import OrderStatus
from cafepos.domain.model.value_objects import CENT
from cafepos.domain.repository.order_repository import OrderRepository

TOP_PRODUCTS_LIMIT = 10


@dataclass(frozen=True)
class TopProductDTO:
    product_name: str
    total_quantity: int
    total_revenue: str


@dataclass(frozen=True)
class SalesReportDTO:
    total_revenue: str
    order_count: int
    average_order_value: str
    top_products: list[TopProductDTO]
    start_date: str | None
    end_date: str | None


class SalesReportHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> SalesReportDTO:
        orders = [
            order
            for order in self._order_repo.list_all()
            if order.status == OrderStatus.COMPLETED
            and created_within(order, start_date, end_date)
        ]

        revenue = sum((o.total.amount for o in orders), Decimal("0"))
        average = revenue / len(orders) if orders else Decimal("0")

        quantities: dict[str, int] = {}
        revenues: dict[str, Decimal] = {}
        for order in orders:
            for item in order.items:
                name = item.product_name
                quantities[name] = quantities.get(name, 0) + item.quantity.value
                revenues[name] = revenues.get(name, Decimal("0")) + item.item_total.amount

        ranked = sorted(quantities, key=lambda name: (-quantities[name], name))
        top = [
            TopProductDTO(
                product_name=name,
                total_quantity=quantities[name],
                total_revenue=f"{revenues[name]:.2f}",
            )
            for name in ranked[:TOP_PRODUCTS_LIMIT]
        ]

        return SalesReportDTO(
            total_revenue=f"{revenue:.2f}",
            order_count=len(orders),
            average_order_value=f"{average.quantize(CENT, rounding=ROUND_HALF_UP):.2f}",
            top_products=top,
            start_date=start_date.isoformat() if start_date else None,
            end_date=end_date.isoformat() if end_date else None,
        )
