"""Notification port and event payloads.

Subscribers (kitchen queue, cashier screens, manager dashboard) join
role rooms on the real-time channel.  This module decides *what* is
published and to *whom*; the transport behind ``NotificationPublisher``
decides how it is delivered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

import structlog

from cafepos.application.dto import money_str
from cafepos.domain.model.order import Order

logger = structlog.get_logger(__name__)

NEW_ORDER = "new_order"
ORDER_STATUS_UPDATED = "update_order_status"
PRODUCT_STOCK_CHANGED = "product_stock_changed"

# Rooms that receive each event; an empty tuple means every connection.
EVENT_AUDIENCES: dict[str, tuple[str, ...]] = {
    NEW_ORDER: ("role_barista", "role_manager"),
    ORDER_STATUS_UPDATED: ("role_barista", "role_cashier", "role_manager"),
    PRODUCT_STOCK_CHANGED: (),
}


class NotificationPublisher(ABC):

    @abstractmethod
    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        """Hand an event to the transport. Fire-and-forget."""


def publish_safely(
    publisher: NotificationPublisher,
    event_name: str,
    payload: dict[str, Any],
) -> None:
    """Publish, logging rather than raising on transport failure.

    Called after the state change is persisted; a broken transport must
    not turn a committed order into a reported failure.
    """
    try:
        publisher.publish(event_name, payload)
    except Exception:
        logger.exception("notification_failed", event_name=event_name)


def new_order_payload(order: Order) -> dict[str, Any]:
    return {
        "orderId": str(order.id),
        "orderNumber": order.order_number,
        "items": [
            {
                "productName": item.product_name,
                "quantity": item.quantity.value,
                "customizationNotes": item.customization_notes,
                "itemTotal": money_str(item.item_total),
            }
            for item in order.items
        ],
        "orderType": order.order_type.value,
        "customerName": order.customer_name,
        "tableNumber": order.table_number,
        "status": order.status.value,
        "total": money_str(order.total),
        "createdAt": order.created_at.isoformat(),
    }


def status_update_payload(order: Order, updated_at: datetime) -> dict[str, Any]:
    return {
        "orderId": str(order.id),
        "orderNumber": order.order_number,
        "status": order.status.value,
        "completedAt": order.completed_at.isoformat() if order.completed_at else None,
        "updatedAt": updated_at.isoformat(),
    }


def stock_changed_payload(product_ids: list[str]) -> dict[str, Any]:
    return {"products": list(product_ids)}
