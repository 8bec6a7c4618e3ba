"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from cafepos.domain.exceptions import (
    ConflictError,
    DuplicateOrderNumberError,
    EntityNotFoundError,
)
from cafepos.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    OrderType,
    PaymentMethod,
    ProductSnapshot,
    SelectedOption,
    SelectedOptionValue,
)
from cafepos.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity
from cafepos.domain.repository.order_repository import OrderRepository
from cafepos.infrastructure.persistence.json_store import JsonFileStore


class JsonOrderRepository(JsonFileStore, OrderRepository):

    def __init__(self, file_path: Path) -> None:
        super().__init__(file_path, empty=[])

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_number(self, order_number: str) -> Order | None:
        for raw in self._load_raw():
            if raw["order_number"] == order_number:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        orders = [self._to_domain(raw) for raw in self._load_raw()]
        return sorted(orders, key=lambda o: (o.created_at, o.id or 0), reverse=True)

    def latest_order_number(self, prefix: str) -> str | None:
        numbers = [
            raw["order_number"]
            for raw in self._load_raw()
            if raw["order_number"].startswith(prefix)
        ]
        return max(numbers) if numbers else None

    def add(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()
            if any(raw["order_number"] == order.order_number for raw in orders):
                raise DuplicateOrderNumberError(
                    f"Order number {order.order_number} already exists"
                )
            order.id = max((raw["id"] for raw in orders), default=0) + 1
            orders.append(self._to_raw(order))
            self._persist_raw(orders)

    def save(self, order: Order, expected_status: OrderStatus | None = None) -> None:
        with self._lock:
            orders = self._load_raw()
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    if expected_status is not None and raw["status"] != expected_status.value:
                        raise ConflictError(
                            f"Order {order.order_number} was changed concurrently "
                            f"(now {raw['status']})"
                        )
                    orders[i] = self._to_raw(order)
                    self._persist_raw(orders)
                    return
            raise EntityNotFoundError(f"Order #{order.id} not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status.value,
            "order_type": order.order_type.value,
            "payment_method": order.payment_method.value,
            "currency": order.total.currency,
            "subtotal": str(order.subtotal.amount),
            "tax": str(order.tax.amount),
            "discount": str(order.discount.amount),
            "total": str(order.total.amount),
            "cash_received": str(order.cash_received.amount),
            "change_given": str(order.change_given.amount),
            "customer_name": order.customer_name,
            "table_number": order.table_number,
            "created_by": order.created_by,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat() if order.updated_at else None,
            "completed_at": order.completed_at.isoformat() if order.completed_at else None,
            "items": [
                {
                    "product_id": item.product_id,
                    "product_snapshot": {
                        "name": item.product_snapshot.name,
                        "price": str(item.product_snapshot.price.amount),
                        "image_url": item.product_snapshot.image_url,
                    },
                    "quantity": item.quantity.value,
                    "customization_notes": item.customization_notes,
                    "selected_options": [
                        {
                            "group_name": group.group_name,
                            "values": [
                                {"name": v.name, "price_modifier": str(v.price_modifier)}
                                for v in group.values
                            ],
                        }
                        for group in item.selected_options
                    ],
                    "base_price": str(item.base_price.amount),
                    "options_total": str(item.options_total),
                    "item_price": str(item.item_price.amount),
                    "item_total": str(item.item_total.amount),
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", DEFAULT_CURRENCY)

        def money(value: str) -> Money:
            return Money(Decimal(value), currency)

        def when(value: str | None) -> datetime | None:
            return datetime.fromisoformat(value) if value else None

        items = [
            OrderLineItem(
                product_id=i["product_id"],
                product_snapshot=ProductSnapshot(
                    name=i["product_snapshot"]["name"],
                    price=money(i["product_snapshot"]["price"]),
                    image_url=i["product_snapshot"].get("image_url", ""),
                ),
                quantity=Quantity(i["quantity"]),
                base_price=money(i["base_price"]),
                options_total=Decimal(i.get("options_total", "0")),
                item_price=money(i["item_price"]),
                item_total=money(i["item_total"]),
                selected_options=tuple(
                    SelectedOption(
                        group_name=g["group_name"],
                        values=tuple(
                            SelectedOptionValue(
                                name=v["name"],
                                price_modifier=Decimal(v["price_modifier"]),
                            )
                            for v in g["values"]
                        ),
                    )
                    for g in i.get("selected_options", [])
                ),
                customization_notes=i.get("customization_notes", ""),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            items=items,
            subtotal=money(raw["subtotal"]),
            tax=money(raw["tax"]),
            total=money(raw["total"]),
            payment_method=PaymentMethod(raw["payment_method"]),
            order_type=OrderType(raw["order_type"]),
            discount=money(raw.get("discount", "0")),
            cash_received=money(raw.get("cash_received", "0")),
            change_given=money(raw.get("change_given", "0")),
            status=OrderStatus(raw["status"]),
            customer_name=raw.get("customer_name", ""),
            table_number=raw.get("table_number", ""),
            created_by=raw.get("created_by"),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=when(raw.get("updated_at")),
            completed_at=when(raw.get("completed_at")),
        )
