"""
Sort key resolution for catalog listings.
"""
import re
from dataclasses import dataclass

from internal.domain.ports import AttributeCatalog
from internal.domain.value_objects import SortDirection
from internal.infrastructure.postgres.query_plan import FLAT, PRICE_INDEX
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


PRICE_CODE = "price"
CREATED_AT = f"{FLAT}.created_at"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class OrderBySpec:
    """
    Resolved ordering target.

    Attributes:
        column: Qualified SQL column expression.
        direction: Ordering direction.
    """
    column: str
    direction: SortDirection

    def to_sql(self) -> list[str]:
        """ORDER BY items, with the flat id as tiebreak so paging is stable."""
        return [
            f"{self.column} {self.direction.value} NULLS LAST",
            f"{FLAT}.id {self.direction.value}",
        ]


class SortResolver:
    """
    Maps a sort key to an order-by target.

    ``price`` orders by the indexed minimal price, any other attribute by
    its flat column, anything else by creation time.
    """

    def __init__(self, attribute_catalog: AttributeCatalog) -> None:
        """
        Initialize the resolver.

        Args:
            attribute_catalog: Attribute metadata lookups.
        """
        self._attribute_catalog = attribute_catalog

    async def resolve(self, sort_key: str, direction: SortDirection) -> OrderBySpec:
        """
        Resolve a sort key.

        Args:
            sort_key: Requested key.
            direction: Normalized direction.

        Returns:
            OrderBySpec for the key.
        """
        attribute = await self._attribute_catalog.by_code(sort_key) if sort_key else None

        if attribute is None:
            return OrderBySpec(column=CREATED_AT, direction=direction)

        if attribute.code == PRICE_CODE:
            return OrderBySpec(column=f"{PRICE_INDEX}.min_price", direction=direction)

        if not _IDENTIFIER_RE.match(attribute.code):
            logger.warning(
                "Attribute code is not a column name, sorting by creation time",
                code=attribute.code,
            )
            return OrderBySpec(column=CREATED_AT, direction=direction)

        return OrderBySpec(column=f'{FLAT}."{attribute.code}"', direction=direction)
