"""JSON-file-backed daily order counters: ``{"20261019": 42, ...}``."""

from __future__ import annotations

from pathlib import Path

from cafepos.domain.repository.order_sequence import OrderSequence
from cafepos.infrastructure.persistence.json_store import JsonFileStore


class JsonOrderSequence(JsonFileStore, OrderSequence):

    def __init__(self, file_path: Path) -> None:
        super().__init__(file_path, empty={})

    def next_value(self, key: str, floor: int = 0) -> int:
        with self._lock:
            counters = self._load_raw()
            value = max(counters.get(key, 0), floor) + 1
            counters[key] = value
            self._persist_raw(counters)
            return value
