"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.  Stored
aggregates are deep-copied in and out, like a real store would.
"""

from __future__ import annotations

import copy
from decimal import Decimal
from typing import Any

from cafepos.application.notifications import NotificationPublisher
from cafepos.domain.exceptions import (
    ConflictError,
    DuplicateOrderNumberError,
    EntityNotFoundError,
)
from cafepos.domain.model.order import Order, OrderStatus
from cafepos.domain.model.product import OptionGroup, OptionValue, Product, SelectionMode
from cafepos.domain.model.settings import StoreSettings
from cafepos.domain.model.value_objects import Money
from cafepos.domain.repository.order_repository import OrderRepository
from cafepos.domain.repository.order_sequence import OrderSequence
from cafepos.domain.repository.product_repository import ProductRepository
from cafepos.domain.repository.settings_repository import SettingsRepository


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1

    def get_by_id(self, order_id: int) -> Order | None:
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    def get_by_number(self, order_number: str) -> Order | None:
        for order in self._store.values():
            if order.order_number == order_number:
                return copy.deepcopy(order)
        return None

    def list_all(self) -> list[Order]:
        orders = [copy.deepcopy(o) for o in self._store.values()]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)

    def latest_order_number(self, prefix: str) -> str | None:
        numbers = [o.order_number for o in self._store.values() if o.order_number.startswith(prefix)]
        return max(numbers) if numbers else None

    def add(self, order: Order) -> None:
        if any(o.order_number == order.order_number for o in self._store.values()):
            raise DuplicateOrderNumberError(f"Order number {order.order_number} already exists")
        order.id = self._next_id
        self._next_id += 1
        self._store[order.id] = copy.deepcopy(order)

    def save(self, order: Order, expected_status: OrderStatus | None = None) -> None:
        stored = self._store.get(order.id)  # type: ignore[arg-type]
        if stored is None:
            raise EntityNotFoundError(f"Order #{order.id} not found")
        if expected_status is not None and stored.status != expected_status:
            raise ConflictError(f"Order {order.order_number} was changed concurrently")
        self._store[order.id] = copy.deepcopy(order)  # type: ignore[index]


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = copy.deepcopy(p)

    def get_by_id(self, product_id: str) -> Product | None:
        product = self._store.get(product_id)
        return copy.deepcopy(product) if product is not None else None

    def list_all(self) -> list[Product]:
        return [copy.deepcopy(p) for p in self._store.values()]

    def save(self, product: Product) -> None:
        self._store[product.id] = copy.deepcopy(product)

    def adjust_stock(self, product_id: str, delta: int) -> Product | None:
        product = self._store.get(product_id)
        if product is None:
            return None
        product.adjust_stock(delta)
        return copy.deepcopy(product)

    def delete(self, product_id: str) -> None:
        del self._store[product_id]

    def stock_of(self, product_id: str) -> int:
        return self._store[product_id].stock_count


class FakeSettingsRepository(SettingsRepository):

    def __init__(self, settings: StoreSettings | None = None) -> None:
        self._settings = settings

    def get(self) -> StoreSettings:
        if self._settings is None:
            self._settings = StoreSettings()
        return copy.deepcopy(self._settings)

    def save(self, settings: StoreSettings) -> None:
        self._settings = copy.deepcopy(settings)


class FakeOrderSequence(OrderSequence):

    def __init__(self) -> None:
        self.counters: dict[str, int] = {}

    def next_value(self, key: str, floor: int = 0) -> int:
        value = max(self.counters.get(key, 0), floor) + 1
        self.counters[key] = value
        return value


class RecordingPublisher(NotificationPublisher):

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        self.events.append((event_name, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def last(self, event_name: str) -> dict[str, Any]:
        for name, payload in reversed(self.events):
            if name == event_name:
                return payload
        raise AssertionError(f"No {event_name!r} event published")


class BrokenPublisher(NotificationPublisher):

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        raise ConnectionError("socket relay is down")


# ---------------------------------------------------------------------------
# Catalog builders
# ---------------------------------------------------------------------------


def size_group(required: bool = True) -> OptionGroup:
    return OptionGroup(
        name="Size",
        values=(
            OptionValue("Small", Decimal("0")),
            OptionValue("Large", Decimal("20")),
        ),
        mode=SelectionMode.SINGLE,
        required=required,
    )


def extras_group() -> OptionGroup:
    return OptionGroup(
        name="Extras",
        values=(
            OptionValue("Extra Shot", Decimal("15")),
            OptionValue("Oat Milk", Decimal("10")),
            OptionValue("No Whip", Decimal("-5")),
        ),
        mode=SelectionMode.MULTIPLE,
        required=False,
    )


def make_product(
    product_id: str = "1",
    name: str = "Latte",
    price: str = "100",
    stock: int = 50,
    available: bool = True,
    groups: list[OptionGroup] | None = None,
) -> Product:
    return Product(
        id=product_id,
        name=name,
        price=Money.of(price),
        stock_count=stock,
        is_available=available,
        image_url=f"/img/{product_id}.png",
        option_groups=list(groups or []),
    )
