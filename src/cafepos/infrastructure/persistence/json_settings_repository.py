"""JSON-file-backed implementation of SettingsRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from cafepos.domain.model.settings import (
    DEFAULT_STORE_NAME,
    DEFAULT_TAX_RATE,
    StoreSettings,
)
from cafepos.domain.model.value_objects import DEFAULT_CURRENCY
from cafepos.domain.repository.settings_repository import SettingsRepository
from cafepos.infrastructure.persistence.json_store import JsonFileStore


class JsonSettingsRepository(JsonFileStore, SettingsRepository):

    def __init__(self, file_path: Path) -> None:
        super().__init__(file_path, empty={})

    def get(self) -> StoreSettings:
        with self._lock:
            raw = self._load_raw()
            if not raw:
                settings = StoreSettings()
                self._persist_raw(self._to_raw(settings))
                return settings
            return self._to_domain(raw)

    def save(self, settings: StoreSettings) -> None:
        self._persist_raw(self._to_raw(settings))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(settings: StoreSettings) -> dict:
        return {
            "store_name": settings.store_name,
            "tax_rate": str(settings.tax_rate),
            "tax_included_in_price": settings.tax_included_in_price,
            "currency": settings.currency,
            "updated_at": settings.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StoreSettings:
        settings = StoreSettings(
            store_name=raw.get("store_name", DEFAULT_STORE_NAME),
            tax_rate=Decimal(str(raw.get("tax_rate", DEFAULT_TAX_RATE))),
            tax_included_in_price=raw.get("tax_included_in_price", False),
            currency=raw.get("currency", DEFAULT_CURRENCY),
        )
        if raw.get("updated_at"):
            settings.updated_at = datetime.fromisoformat(raw["updated_at"])
        return settings
