"""Domain service: Stock Ledger.

Applies the stock movements that follow the order lifecycle: a
decrement when an order is created and a restoration when it is
cancelled.

Decrements are conditional (decrement-if-sufficient) at the storage
layer.  If one fails part way through an order, the decrements already
applied are reversed before the error propagates, so stock never
diverges from the set of live orders.
"""

from __future__ import annotations

import structlog

from cafepos.domain.exceptions import EntityNotFoundError
from cafepos.domain.model.order import Order
from cafepos.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class StockLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def decrement_for_order(self, order: Order) -> list[str]:
        """Take every line item's quantity out of stock.

        Returns the affected product IDs.  Raises InsufficientStockError
        or EntityNotFoundError after compensating earlier decrements.
        """
        applied: list[tuple[str, int]] = []

        for product_id, qty in order.quantities_by_product.items():
            try:
                product = self._product_repo.adjust_stock(product_id, -qty)
            except Exception:
                self._compensate(order, applied)
                raise
            if product is None:
                self._compensate(order, applied)
                raise EntityNotFoundError(f"Product with ID {product_id} not found")

            applied.append((product_id, qty))
            logger.info(
                "stock_decremented",
                order_number=order.order_number,
                product_id=product_id,
                quantity=qty,
                stock_count=product.stock_count,
            )

        return [product_id for product_id, _ in applied]

    def restore_for_order(self, order: Order) -> list[str]:
        """Put every line item's quantity back into stock.

        Best-effort: products that no longer exist, or whose store update
        fails, are logged and skipped.  A cancellation that has already been
        saved is never turned into an error by stock bookkeeping.
        """
        restored: list[str] = []
        for product_id, qty in order.quantities_by_product.items():
            try:
                product = self._product_repo.adjust_stock(product_id, qty)
            except Exception:
                logger.exception(
                    "stock_restore_failed",
                    order_number=order.order_number,
                    product_id=product_id,
                    quantity=qty,
                )
                continue
            if product is None:
                logger.warning(
                    "stock_restore_skipped",
                    order_number=order.order_number,
                    product_id=product_id,
                    quantity=qty,
                    reason="product not found",
                )
                continue
            restored.append(product_id)
            logger.info(
                "stock_restored",
                order_number=order.order_number,
                product_id=product_id,
                quantity=qty,
                stock_count=product.stock_count,
            )
        return restored

    def reclaim_for_order(self, order: Order) -> list[str]:
        """Take back a restoration made for an order that never held stock.

        Best-effort like ``restore_for_order``; a product that cannot give
        the quantity back is logged for a manual count.
        """
        reclaimed: list[str] = []
        for product_id, qty in order.quantities_by_product.items():
            try:
                product = self._product_repo.adjust_stock(product_id, -qty)
            except Exception:
                logger.exception(
                    "stock_reclaim_failed",
                    order_number=order.order_number,
                    product_id=product_id,
                    quantity=qty,
                )
                continue
            if product is not None:
                reclaimed.append(product_id)
        return reclaimed

    def _compensate(self, order: Order, applied: list[tuple[str, int]]) -> None:
        for product_id, qty in applied:
            if self._product_repo.adjust_stock(product_id, qty) is None:
                logger.error(
                    "stock_compensation_failed",
                    order_number=order.order_number,
                    product_id=product_id,
                    quantity=qty,
                )
