"""Application service: Update Tax Settings use case."""

from __future__ import annotations

import structlog

from cafepos.domain.model.settings import StoreSettings
from cafepos.domain.model.value_objects import to_decimal
from cafepos.domain.repository.settings_repository import SettingsRepository

logger = structlog.get_logger(__name__)


class UpdateTaxSettingsHandler:

    def __init__(self, settings_repo: SettingsRepository) -> None:
        self._settings_repo = settings_repo

    def handle(
        self,
        tax_rate: str | None = None,
        included_in_price: bool | None = None,
    ) -> StoreSettings:
        """Change the tax rate and/or tax-inclusive pricing.

        Existing orders keep the tax they were created with.
        """
        settings = self._settings_repo.get()
        settings.update_tax(
            tax_rate=to_decimal(tax_rate, "tax rate") if tax_rate is not None else None,
            included_in_price=included_in_price,
        )
        self._settings_repo.save(settings)

        logger.info(
            "tax_settings_updated",
            tax_rate=str(settings.tax_rate),
            tax_included_in_price=settings.tax_included_in_price,
        )
        return settings
