"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable
from zoneinfo import ZoneInfo

from cafepos.infrastructure.config import load_config
from cafepos.infrastructure.notifications.outbox_publisher import (
    OutboxNotificationPublisher,
)
from cafepos.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from cafepos.infrastructure.persistence.json_order_sequence import JsonOrderSequence
from cafepos.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from cafepos.infrastructure.persistence.json_settings_repository import (
    JsonSettingsRepository,
)


def _data_dir() -> Path:
    return load_config().data_dir


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(_data_dir() / "products.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(_data_dir() / "orders.json")


def settings_repository() -> JsonSettingsRepository:
    return JsonSettingsRepository(_data_dir() / "settings.json")


def order_sequence() -> JsonOrderSequence:
    return JsonOrderSequence(_data_dir() / "counters.json")


def notification_publisher() -> OutboxNotificationPublisher:
    return OutboxNotificationPublisher(_data_dir() / "outbox.jsonl")


def clock() -> Callable[[], datetime]:
    """Current time in the configured store timezone."""
    zone = ZoneInfo(load_config().timezone)
    return lambda: datetime.now(zone)
