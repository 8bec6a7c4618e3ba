"""Abstract repository for the store settings record."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cafepos.domain.model.settings import StoreSettings


class SettingsRepository(ABC):

    @abstractmethod
    def get(self) -> StoreSettings:
        """Return the settings, creating and persisting defaults if absent."""

    @abstractmethod
    def save(self, settings: StoreSettings) -> None:
        """Persist the settings record."""
