"""Collaborator interfaces consumed by the catalog core."""
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol

from .attribute import AttributeDefinition
from .product import Page, Product
from .value_objects import CatalogContext


class AttributeCatalog(Protocol):
    """Attribute metadata lookups."""

    async def filterable_attributes(
        self, codes: Iterable[str]
    ) -> list[AttributeDefinition]:
        """Return the definitions of those codes that are filterable attributes."""
        ...

    async def by_code(self, code: str) -> Optional[AttributeDefinition]:
        ...


class AttributeSource(AttributeCatalog, Protocol):
    """Attribute catalog able to list the whole attribute table."""

    async def all_attributes(self) -> list[AttributeDefinition]:
        ...


class PriceConverter(Protocol):
    """Converts display-currency prices to the base currency of the indices."""

    def to_base(self, raw_price: str) -> Decimal:
        ...


class ContextResolver(Protocol):
    """Supplies the storefront scope of the active request."""

    def channel(self) -> str:
        ...

    def locale(self) -> str:
        ...

    def customer_group_id(self) -> int:
        ...


def resolve_context(resolver: ContextResolver) -> CatalogContext:
    """Freeze a resolver's answers into an explicit context value."""
    return CatalogContext(
        channel=resolver.channel(),
        locale=resolver.locale(),
        customer_group_id=resolver.customer_group_id(),
    )


class SearchStrategy(Protocol):
    """A full-text search backend."""

    name: str

    async def search(self, term: str, context: CatalogContext, page: int) -> Page:
        ...


class ProductTypeStrategy(Protocol):
    """Type-specific product behaviour (copy, for now)."""

    async def copy(self, conn: Any, product: Product) -> Product:
        """Copy the product using ``conn``; runs inside the caller's transaction."""
        ...
