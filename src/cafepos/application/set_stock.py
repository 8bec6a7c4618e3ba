"""Application service: Set Stock use case.

Used for deliveries and stock counts.  Absolute, unlike the relative
movements the stock ledger applies for orders.
"""

from __future__ import annotations

import structlog

from cafepos.application.notifications import (
    PRODUCT_STOCK_CHANGED,
    NotificationPublisher,
    publish_safely,
    stock_changed_payload,
)
from cafepos.domain.exceptions import EntityNotFoundError
from cafepos.domain.model.product import Product
from cafepos.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class SetStockHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        publisher: NotificationPublisher,
    ) -> None:
        self._product_repo = product_repo
        self._publisher = publisher

    def handle(self, product_id: str, stock_count: int) -> Product:
        """Set the stock count for a product."""
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID {product_id} not found")

        previous = product.stock_count
        product.set_stock(stock_count)
        self._product_repo.save(product)

        logger.info(
            "stock_set",
            product_id=product.id,
            previous=previous,
            stock_count=product.stock_count,
            low_stock=product.is_low_stock,
        )
        publish_safely(self._publisher, PRODUCT_STOCK_CHANGED, stock_changed_payload([product.id]))
        return product
