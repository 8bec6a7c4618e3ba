"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from cafepos.domain.model.product import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    OptionGroup,
    OptionValue,
    Product,
    SelectionMode,
)
from cafepos.domain.model.value_objects import DEFAULT_CURRENCY, Money
from cafepos.domain.repository.product_repository import ProductRepository
from cafepos.infrastructure.persistence.json_store import JsonFileStore


class JsonProductRepository(JsonFileStore, ProductRepository):

    def __init__(self, file_path: Path) -> None:
        super().__init__(file_path, empty=[])

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._load_raw():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, product: Product) -> None:
        with self._lock:
            records = self._load_raw()
            for i, raw in enumerate(records):
                if raw["id"] == product.id:
                    records[i] = self._to_raw(product)
                    break
            else:
                records.append(self._to_raw(product))
            self._persist_raw(records)

    def adjust_stock(self, product_id: str, delta: int) -> Product | None:
        with self._lock:
            records = self._load_raw()
            for i, raw in enumerate(records):
                if raw["id"] == product_id:
                    product = self._to_domain(raw)
                    product.adjust_stock(delta)  # raises before anything is written
                    records[i] = self._to_raw(product)
                    self._persist_raw(records)
                    return product
            return None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "stock_count": product.stock_count,
            "low_stock_threshold": product.low_stock_threshold,
            "is_available": product.is_available,
            "image_url": product.image_url,
            "options": [
                {
                    "group_name": group.name,
                    "type": group.mode.value,
                    "required": group.required,
                    "values": [
                        {"name": v.name, "price_modifier": str(v.price_modifier)}
                        for v in group.values
                    ],
                }
                for group in product.option_groups
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(str(raw["price"])), raw.get("currency", DEFAULT_CURRENCY)),
            stock_count=raw.get("stock_count", 0),
            low_stock_threshold=raw.get("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD),
            is_available=raw.get("is_available", True),
            image_url=raw.get("image_url", ""),
            option_groups=[
                OptionGroup(
                    name=g["group_name"],
                    mode=SelectionMode(g.get("type", "single")),
                    required=g.get("required", False),
                    values=tuple(
                        OptionValue(
                            name=v["name"],
                            price_modifier=Decimal(str(v.get("price_modifier", "0"))),
                        )
                        for v in g.get("values", [])
                    ),
                )
                for g in raw.get("options", [])
            ],
        )
