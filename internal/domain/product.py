"""
Domain model for catalog products and result pages.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import ConflictingStateError, DomainValidationError


@dataclass
class Product:
    """
    Catalog product (the ``products`` table, not the flat projection).

    Attributes:
        id: Product identifier.
        type: Product type code (simple, configurable, grouped, ...).
        sku: Stock keeping unit.
        parent_id: Parent product for variants, None for base products.
    """
    id: int
    type: str
    sku: str = ""
    parent_id: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate domain invariants after initialization."""
        if self.id <= 0:
            raise DomainValidationError("id must be positive")
        if not self.type:
            raise DomainValidationError("type is required")

    @property
    def is_variant(self) -> bool:
        return self.parent_id is not None

    def ensure_copyable(self) -> None:
        """
        Raises:
            ConflictingStateError: If the product is a variant.
        """
        if self.is_variant:
            raise ConflictingStateError(
                f"Product {self.id} is a variant of product {self.parent_id} and cannot be copied"
            )


@dataclass
class Page:
    """
    One page of a result set.

    Attributes:
        items: Product projection records of the page, in order.
        total: Size of the whole result set.
        page: 1-based page number.
        per_page: Page size used for the window.
    """
    items: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 9

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page
