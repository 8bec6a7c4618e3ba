"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, stock moves, products are enabled and disabled for sale.
Orders read them at creation time and keep a snapshot of what was sold.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from cafepos.domain.exceptions import InsufficientStockError, ValidationError
from cafepos.domain.model.value_objects import Money

DEFAULT_LOW_STOCK_THRESHOLD = 10


class SelectionMode(Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class OptionValue:
    """One choice inside an option group, e.g. ``Large (+20)``.

    ``price_modifier`` is signed: a value may make the item cheaper.
    """

    name: str
    price_modifier: Decimal = Decimal("0")


@dataclass(frozen=True)
class OptionGroup:
    name: str
    values: tuple[OptionValue, ...]
    mode: SelectionMode = SelectionMode.SINGLE
    required: bool = False

    def find_value(self, name: str) -> OptionValue | None:
        for value in self.values:
            if value.name == name:
                return value
        return None


@dataclass
class Product:
    """A product in the catalog.

    This is an aggregate root. Stock is tracked directly on the product;
    the invariant is that ``stock_count`` never drops below zero.
    """

    id: str
    name: str
    price: Money
    stock_count: int = 0
    is_available: bool = True
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    image_url: str = ""
    option_groups: list[OptionGroup] = field(default_factory=list)

    @property
    def is_low_stock(self) -> bool:
        return self.stock_count <= self.low_stock_threshold

    def find_option_group(self, name: str) -> OptionGroup | None:
        for group in self.option_groups:
            if group.name == name:
                return group
        return None

    def has_stock_for(self, quantity: int) -> bool:
        return self.stock_count >= quantity

    def adjust_stock(self, delta: int) -> None:
        """Apply a signed stock movement.

        Raises InsufficientStockError if the result would be negative.
        """
        if self.stock_count + delta < 0:
            raise InsufficientStockError(
                f'Insufficient stock for "{self.name}". '
                f"Available: {self.stock_count}, Requested: {-delta}"
            )
        self.stock_count += delta

    def set_stock(self, stock_count: int) -> None:
        if stock_count < 0:
            raise ValidationError("Stock count cannot be negative")
        self.stock_count = stock_count
