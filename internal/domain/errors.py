"""
Domain-specific exceptions.

Database driver errors are not wrapped: they reach the caller unchanged.
"""
from typing import Any


class DomainError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize domain error.

        Args:
            message: Error message describing the issue.
        """
        self.message = message
        super().__init__(self.message)


class DomainValidationError(DomainError):
    """Exception raised when domain validation fails."""
    pass


class InvalidFilterValueError(DomainValidationError):
    """
    A filter parameter could not be parsed.

    Raised while the query plan is being built, so no catalog query has
    been executed when it surfaces.
    """

    def __init__(self, parameter: str, value: Any, reason: str) -> None:
        """
        Initialize invalid filter value error.

        Args:
            parameter: Name of the request parameter.
            value: The offending raw value.
            reason: Why the value was rejected.
        """
        super().__init__(f"Invalid value {value!r} for '{parameter}': {reason}")
        self.parameter = parameter
        self.value = value
        self.reason = reason


class ProductNotFoundError(DomainError):
    """Exception raised when a product lookup yields no row."""

    def __init__(self, identifier: Any) -> None:
        """
        Initialize product not found error.

        Args:
            identifier: Slug or id that was looked up.
        """
        super().__init__(f"Product {identifier} not found")
        self.identifier = identifier


class ConflictingStateError(DomainError):
    """Exception raised when an operation is not allowed in the product's current state."""
    pass


class UnsupportedProductTypeError(DomainError):
    """Exception raised when no type strategy handles a product type."""

    def __init__(self, product_type: str) -> None:
        super().__init__(f"No type strategy registered for product type '{product_type}'")
        self.product_type = product_type
