"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cafepos.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return the current product record, or None if not found.

        Must read current state; callers rely on fresh stock and price.
        """

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def adjust_stock(self, product_id: str, delta: int) -> Product | None:
        """Atomically apply a signed stock movement.

        Returns the updated product, or None if it does not exist.
        Raises InsufficientStockError, leaving stock untouched, when a
        negative *delta* would take the count below zero.
        """
