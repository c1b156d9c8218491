"""
Pytest configuration and fixtures.
"""
from decimal import Decimal
from typing import Iterable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from internal.domain.attribute import AttributeDefinition
from internal.domain.value_objects import CatalogContext


class InMemoryAttributeCatalog:
    """Attribute catalog over a fixed list of definitions."""

    def __init__(self, definitions: Iterable[AttributeDefinition]) -> None:
        self._definitions = {definition.code: definition for definition in definitions}
        self.filterable_calls: list[list[str]] = []

    async def filterable_attributes(self, codes: Iterable[str]) -> list[AttributeDefinition]:
        codes = list(codes)
        self.filterable_calls.append(codes)
        return [self._definitions[code] for code in sorted(codes) if code in self._definitions]

    async def by_code(self, code: str) -> Optional[AttributeDefinition]:
        return self._definitions.get(code)

    async def all_attributes(self) -> list[AttributeDefinition]:
        return [self._definitions[code] for code in sorted(self._definitions)]


class IdentityPriceConverter:
    """Display currency equals base currency."""

    def to_base(self, raw_price: str) -> Decimal:
        return Decimal(raw_price)


def make_pool(conn: MagicMock) -> MagicMock:
    """Pool whose ``acquire()`` context yields ``conn``."""
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = conn
    pool.acquire.return_value.__aexit__.return_value = False
    return pool


def make_connection(total: int = 0, rows: Optional[list] = None) -> MagicMock:
    """Connection answering one count and one fetch."""
    conn = MagicMock()
    conn.fetchval = AsyncMock(return_value=total)
    conn.fetch = AsyncMock(return_value=rows or [])
    conn.fetchrow = AsyncMock(return_value=None)
    return conn


@pytest.fixture
def connection():
    """Mocked asyncpg connection; count 0 and no rows until configured."""
    return make_connection()


@pytest.fixture
def pool(connection):
    """Mocked asyncpg pool handing out ``connection``."""
    return make_pool(connection)


@pytest.fixture
def context():
    """Storefront scope used by most tests."""
    return CatalogContext(channel="default", locale="en", customer_group_id=1)


@pytest.fixture
def color_attribute():
    return AttributeDefinition.from_type(id=23, code="color", type="select", is_filterable=True)


@pytest.fixture
def size_attribute():
    return AttributeDefinition.from_type(id=24, code="size", type="select", is_filterable=True)


@pytest.fixture
def name_attribute():
    return AttributeDefinition.from_type(id=2, code="name", type="text", is_filterable=True)


@pytest.fixture
def cost_attribute():
    return AttributeDefinition.from_type(id=12, code="cost", type="price", is_filterable=True)


@pytest.fixture
def attribute_catalog(color_attribute, size_attribute, name_attribute, cost_attribute):
    """Catalog knowing color, size, name, cost and price."""
    price_attribute = AttributeDefinition.from_type(
        id=11, code="price", type="price", is_filterable=True
    )
    return InMemoryAttributeCatalog(
        [color_attribute, size_attribute, name_attribute, cost_attribute, price_attribute]
    )


@pytest.fixture
def price_converter():
    return IdentityPriceConverter()


@pytest.fixture
def flat_row():
    """Sample product_flat row."""
    return {
        "id": 12,
        "product_id": 7,
        "sku": "TSHIRT-RED",
        "type": "simple",
        "name": "Red T-Shirt",
        "url_key": "red-t-shirt",
        "channel": "default",
        "locale": "en",
        "indexed_min_price": Decimal("19.9900"),
        "indexed_max_price": Decimal("24.9900"),
    }
