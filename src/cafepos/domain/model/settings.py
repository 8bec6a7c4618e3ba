"""Store-wide settings that affect pricing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from cafepos.domain.exceptions import ValidationError
from cafepos.domain.model.value_objects import DEFAULT_CURRENCY, TaxPolicy

DEFAULT_STORE_NAME = "My Café"
DEFAULT_TAX_RATE = Decimal("7")


@dataclass
class StoreSettings:
    store_name: str = DEFAULT_STORE_NAME
    tax_rate: Decimal = DEFAULT_TAX_RATE
    tax_included_in_price: bool = False
    currency: str = DEFAULT_CURRENCY
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def tax_policy(self) -> TaxPolicy:
        return TaxPolicy(rate=self.tax_rate, included_in_price=self.tax_included_in_price)

    def update_tax(
        self,
        tax_rate: Decimal | None = None,
        included_in_price: bool | None = None,
    ) -> None:
        """Change the tax configuration.

        Only affects orders created afterwards; existing orders keep the
        tax they were priced with.
        """
        if tax_rate is not None:
            if tax_rate < 0 or tax_rate > 100:
                raise ValidationError("Tax rate must be between 0 and 100")
            self.tax_rate = tax_rate
        if included_in_price is not None:
            self.tax_included_in_price = included_in_price
        self.updated_at = datetime.now(timezone.utc)
