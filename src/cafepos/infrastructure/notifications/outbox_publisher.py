"""Outbox notification publisher.

Appends each event as one JSON line to an outbox file.  The socket relay
that pushes events to connected screens tails this file; it joins each
line's ``rooms`` to decide who receives it.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from cafepos.application.notifications import EVENT_AUDIENCES, NotificationPublisher

logger = structlog.get_logger(__name__)


class OutboxNotificationPublisher(NotificationPublisher):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        rooms = list(EVENT_AUDIENCES.get(event_name, ()))
        line = json.dumps(
            {
                "event": event_name,
                "rooms": rooms,
                "payload": payload,
                "published_at": datetime.now(timezone.utc).isoformat(),
            },
            ensure_ascii=False,
        )
        with self._lock:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._file_path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")

        logger.info("notification_published", event_name=event_name, rooms=rooms or "all")
