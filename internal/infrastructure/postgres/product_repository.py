"""
PostgreSQL Product Repository.

Single-row lookups, storefront helper queries and the transaction
boundary of the product copy. Faceted listings go through the
QueryPlanBuilder instead.
"""
from decimal import Decimal
from typing import Optional, Sequence

import asyncpg
from asyncpg import Pool

from internal.domain.ports import ProductTypeStrategy
from internal.domain.product import Product
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.postgres.query_plan import contains_pattern
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


class PostgresProductRepository:
    """
    PostgreSQL implementation of the Product Repository.

    Uses asyncpg for async database operations.
    """

    def __init__(self, pool: Pool) -> None:
        """
        Initialize the repository.

        Args:
            pool: asyncpg connection pool.
        """
        self._pool = pool

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        """
        Get a product by id.

        Args:
            product_id: Product identifier.

        Returns:
            Product if found, None otherwise.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, type, sku, parent_id
                FROM products
                WHERE id = $1
                """,
                product_id,
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def find_by_slug(
        self,
        url_key: str,
        context: CatalogContext,
    ) -> Optional[dict]:
        """
        Get the flat row of a product by url key.

        Args:
            url_key: Product url key.
            context: Storefront scope.

        Returns:
            Flat row as dict if found, None otherwise.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT *
                FROM product_flat
                WHERE url_key = $1
                  AND locale = $2
                  AND channel = $3
                """,
                url_key,
                context.locale,
                context.channel,
            )

            return dict(row) if row else None

    async def get_flat_by_product_ids(
        self,
        product_ids: Sequence[int],
        context: CatalogContext,
    ) -> list[dict]:
        """
        Load storefront-visible flat rows for the given products.

        Rows come back in the order of ``product_ids``; ids without a
        visible row are dropped.

        Args:
            product_ids: Product identifiers, in the wanted order.
            context: Storefront scope.

        Returns:
            List of flat rows as dicts.
        """
        if not product_ids:
            return []

        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT *
                FROM product_flat
                WHERE product_id = ANY($1::int[])
                  AND channel = $2
                  AND locale = $3
                  AND status = TRUE
                  AND visible_individually = TRUE
                  AND url_key IS NOT NULL
                """,
                list(product_ids),
                context.channel,
                context.locale,
            )

        by_product = {row["product_id"]: dict(row) for row in rows}
        return [by_product[pid] for pid in product_ids if pid in by_product]

    async def list_by_category(self, category_id: Optional[int] = None) -> list[Product]:
        """
        List products linked to a category, or all products.

        Args:
            category_id: Category to filter by.

        Returns:
            List of products.
        """
        async with self._pool.acquire() as conn:
            if category_id:
                rows = await conn.fetch(
                    """
                    SELECT DISTINCT products.id, products.type, products.sku, products.parent_id
                    FROM products
                    JOIN product_categories ON product_categories.product_id = products.id
                    WHERE product_categories.category_id = $1
                    ORDER BY products.id
                    """,
                    category_id,
                )
            else:
                rows = await conn.fetch(
                    """
                    SELECT id, type, sku, parent_id
                    FROM products
                    ORDER BY id
                    """
                )

            return [self._row_to_entity(row) for row in rows]

    async def search_simple_products(
        self,
        term: str,
        context: CatalogContext,
    ) -> list[dict]:
        """
        Find in-stock simple products by name.

        Used to pick members of grouped products.

        Args:
            term: Substring of the product name.
            context: Storefront scope.

        Returns:
            Flat rows as dicts, newest product first.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT product_flat.*
                FROM product_flat
                JOIN products ON products.id = product_flat.product_id
                WHERE products.type = 'simple'
                  AND product_flat.channel = $1
                  AND product_flat.locale = $2
                  AND product_flat.status = TRUE
                  AND product_flat.name ILIKE $3
                  AND EXISTS (
                      SELECT 1
                      FROM product_inventories
                      WHERE product_inventories.product_id = product_flat.product_id
                        AND product_inventories.qty > 0
                  )
                ORDER BY product_flat.product_id DESC
                """,
                context.channel,
                context.locale,
                contains_pattern(term),
            )

            return [dict(row) for row in rows]

    async def get_category_max_price(
        self,
        category_id: int,
        customer_group_id: int,
    ) -> Optional[Decimal]:
        """
        Get the highest indexed price in a category.

        Args:
            category_id: Category identifier.
            customer_group_id: Customer group of the price index rows.

        Returns:
            Maximum ``max_price``, None when the category has no priced product.
        """
        async with self._pool.acquire() as conn:
            return await conn.fetchval(
                """
                SELECT MAX(product_price_indices.max_price)
                FROM products
                JOIN product_price_indices ON product_price_indices.product_id = products.id
                JOIN product_categories ON product_categories.product_id = products.id
                WHERE product_price_indices.customer_group_id = $1
                  AND product_categories.category_id = $2
                """,
                customer_group_id,
                category_id,
            )

    async def get_super_attributes(self, product_id: int) -> list[dict]:
        """
        Get the configurable attributes of a product with their options.

        Args:
            product_id: Configurable product identifier.

        Returns:
            List of attribute dicts, each with an ``options`` list.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT attributes.id, attributes.code, attributes.admin_name,
                       attributes.type,
                       attribute_options.id AS option_id,
                       attribute_options.admin_name AS option_admin_name,
                       attribute_options.sort_order AS option_sort_order,
                       attribute_options.swatch_value AS option_swatch_value
                FROM product_super_attributes
                JOIN attributes ON attributes.id = product_super_attributes.attribute_id
                LEFT JOIN attribute_options ON attribute_options.attribute_id = attributes.id
                WHERE product_super_attributes.product_id = $1
                ORDER BY attributes.id, attribute_options.sort_order, attribute_options.id
                """,
                product_id,
            )

        attributes: dict[int, dict] = {}
        for row in rows:
            attribute = attributes.setdefault(
                row["id"],
                {
                    "id": row["id"],
                    "code": row["code"],
                    "admin_name": row["admin_name"],
                    "type": row["type"],
                    "options": [],
                },
            )
            if row["option_id"] is not None:
                attribute["options"].append(
                    {
                        "id": row["option_id"],
                        "admin_name": row["option_admin_name"],
                        "sort_order": row["option_sort_order"],
                        "swatch_value": row["option_swatch_value"],
                    }
                )

        return list(attributes.values())

    async def copy(self, product: Product, strategy: ProductTypeStrategy) -> Product:
        """
        Copy a product inside one transaction.

        Any failure of the type strategy rolls back everything it wrote.

        Args:
            product: Product to copy.
            strategy: Type strategy performing the copy.

        Returns:
            The copied product.
        """
        async with self._pool.acquire() as conn:
            try:
                async with conn.transaction():
                    return await strategy.copy(conn, product)
            except Exception as e:
                logger.error(
                    "Product copy rolled back",
                    product_id=product.id,
                    error=str(e),
                )
                raise

    def _row_to_entity(self, row: asyncpg.Record) -> Product:
        """
        Convert a database row to a Product entity.

        Args:
            row: Database row.

        Returns:
            Product entity.
        """
        return Product(
            id=row["id"],
            type=row["type"],
            sku=row["sku"] or "",
            parent_id=row["parent_id"],
        )
