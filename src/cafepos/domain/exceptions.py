"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Every exception class carries a stable ``code`` so clients can tell
"out of stock" from "bad option" from "payment short" without parsing
the message text.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "DOMAIN_ERROR"

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": str(self)}


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "VALIDATION_ERROR"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NOT_FOUND"


class ProductUnavailableError(ValidationError):
    """The product is disabled for sale."""

    code = "PRODUCT_UNAVAILABLE"


class InsufficientStockError(ValidationError):
    code = "INSUFFICIENT_STOCK"


class InvalidOptionError(ValidationError):
    """A selected option group or value does not exist on the product."""

    code = "INVALID_OPTION"


class MissingRequiredOptionError(ValidationError):
    code = "MISSING_REQUIRED_OPTION"


class InsufficientPaymentError(ValidationError):
    """Cash received does not cover the order total."""

    code = "INSUFFICIENT_PAYMENT"


class InvalidStatusError(ValidationError):
    code = "INVALID_STATUS"


class InvalidTransitionError(ValidationError):
    """The requested status change is not allowed from the current status."""

    code = "INVALID_TRANSITION"


class ConflictError(DomainException):
    code = "CONFLICT"


class DuplicateOrderNumberError(ConflictError):
    """Raised by the order store when an order number is already taken."""
