"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from cafepos.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "THB"
CENT = Decimal("0.01")


def to_decimal(value: str | float | int | Decimal, what: str = "amount") -> Decimal:
    """Coerce user input to Decimal, going through ``str`` for floats."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {what}: {value!r}")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {what}: {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"Invalid {what}: {value!r}")
    return result


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Amounts are exact Decimals.  Only derived values (tax) are rounded
    to cents, via ``rounded()``.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic -----------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError(f"{self} - {other} would be a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def rounded(self) -> Money:
        """Round half-up to the minor currency unit."""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        return Money(to_decimal(amount, "money amount"), currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be at least 1")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TaxPolicy:
    """How tax is applied to an order subtotal.

    ``rate`` is a percentage (7 means 7%).  When ``included_in_price`` is
    set, catalog prices already contain tax and the tax portion is
    back-calculated from the subtotal instead of added on top.
    """

    rate: Decimal
    included_in_price: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.rate, Decimal):
            raise ValidationError(
                f"Tax rate must be a Decimal, got {type(self.rate).__name__}"
            )
        if self.rate < 0 or self.rate > 100:
            raise ValidationError("Tax rate must be between 0 and 100")

    def apply(self, subtotal: Money) -> tuple[Money, Money]:
        """Return ``(tax, total)`` for *subtotal*."""
        factor = self.rate / Decimal("100")
        if self.included_in_price:
            base = subtotal.amount / (Decimal("1") + factor)
            tax = Money(subtotal.amount - base, subtotal.currency).rounded()
            return tax, subtotal
        tax = Money(subtotal.amount * factor, subtotal.currency).rounded()
        return tax, subtotal + tax
