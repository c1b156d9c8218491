"""
PostgreSQL Attribute Catalog.

Reads attribute definitions from the ``attributes`` table.
"""
from typing import Iterable, Optional

import asyncpg
from asyncpg import Pool

from internal.domain.attribute import AttributeDefinition
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


class PostgresAttributeCatalog:
    """
    PostgreSQL implementation of the AttributeCatalog.

    Definitions with a type the catalog does not know are skipped.
    """

    def __init__(self, pool: Pool) -> None:
        """
        Initialize the catalog.

        Args:
            pool: asyncpg connection pool.
        """
        self._pool = pool

    async def filterable_attributes(
        self, codes: Iterable[str]
    ) -> list[AttributeDefinition]:
        """
        Get the filterable attributes among the given codes.

        Args:
            codes: Candidate attribute codes.

        Returns:
            Definitions of the filterable ones, ordered by code.
        """
        codes = sorted(set(codes))
        if not codes:
            return []

        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, code, type, is_filterable
                FROM attributes
                WHERE is_filterable = TRUE
                  AND code = ANY($1::text[])
                ORDER BY code
                """,
                codes,
            )

        return [d for d in (self._row_to_definition(row) for row in rows) if d]

    async def all_attributes(self) -> list[AttributeDefinition]:
        """
        Get every attribute definition.

        Returns:
            Definitions ordered by code.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, code, type, is_filterable
                FROM attributes
                ORDER BY code
                """
            )

        return [d for d in (self._row_to_definition(row) for row in rows) if d]

    async def by_code(self, code: str) -> Optional[AttributeDefinition]:
        """
        Get an attribute by code.

        Args:
            code: Attribute code.

        Returns:
            AttributeDefinition if found, None otherwise.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, code, type, is_filterable
                FROM attributes
                WHERE code = $1
                """,
                code,
            )

        if not row:
            return None

        return self._row_to_definition(row)

    def _row_to_definition(self, row: asyncpg.Record) -> Optional[AttributeDefinition]:
        try:
            return AttributeDefinition.from_type(
                id=row["id"],
                code=row["code"],
                type=row["type"],
                is_filterable=row["is_filterable"],
            )
        except ValueError:
            logger.warning(
                "Skipping attribute with unknown type",
                code=row["code"],
                type=row["type"],
            )
            return None
