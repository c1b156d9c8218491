"""
Storefront product lookups.

Single-product and widget queries used around the catalog listing: slug
lookup, new and featured products, grouped-product member search, the
category price ceiling and configurable attributes.
"""
from decimal import Decimal
from typing import Optional

from internal.domain.errors import ProductNotFoundError
from internal.domain.product import Page, Product
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.postgres.paginator import PaginationExecutor
from internal.infrastructure.postgres.product_repository import PostgresProductRepository
from internal.infrastructure.postgres.query_plan import highlighted_plan
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


# Widget size when nothing is configured
DEFAULT_HIGHLIGHT_COUNT = 4


class StorefrontProductsUseCase:
    """Read-only product queries for storefront pages."""

    def __init__(
        self,
        repository: PostgresProductRepository,
        executor: PaginationExecutor,
        new_products_count: Optional[int] = None,
        featured_products_count: Optional[int] = None,
    ) -> None:
        """
        Initialize the use case.

        Args:
            repository: Product repository.
            executor: Two-phase plan executor.
            new_products_count: Configured size of the new products widget.
            featured_products_count: Configured size of the featured products widget.
        """
        self._repository = repository
        self._executor = executor
        self._new_products_count = new_products_count
        self._featured_products_count = featured_products_count

    async def get_new_products(
        self,
        context: CatalogContext,
        count: Optional[int] = None,
    ) -> Page:
        """Random page of products flagged as new."""
        return await self._highlighted(
            context,
            "new",
            count or self._new_products_count or DEFAULT_HIGHLIGHT_COUNT,
        )

    async def get_featured_products(
        self,
        context: CatalogContext,
        count: Optional[int] = None,
    ) -> Page:
        """Random page of products flagged as featured."""
        return await self._highlighted(
            context,
            "featured",
            count or self._featured_products_count or DEFAULT_HIGHLIGHT_COUNT,
        )

    async def _highlighted(self, context: CatalogContext, flag: str, count: int) -> Page:
        plan = highlighted_plan(context, flag)
        result = await self._executor.execute(plan, page=1, per_page=count)
        logger.info("Highlighted products loaded", flag=flag, returned=len(result.items))
        return result

    async def find_by_slug(self, url_key: str, context: CatalogContext) -> Optional[dict]:
        return await self._repository.find_by_slug(url_key, context)

    async def find_by_slug_or_fail(self, url_key: str, context: CatalogContext) -> dict:
        """
        Get a flat row by url key.

        Raises:
            ProductNotFoundError: If no row has this url key in the context.
        """
        product = await self._repository.find_by_slug(url_key, context)
        if product is None:
            raise ProductNotFoundError(url_key)
        return product

    async def search_simple_products(self, term: str, context: CatalogContext) -> list[dict]:
        """In-stock simple products whose name contains ``term``."""
        return await self._repository.search_simple_products(term, context)

    async def get_category_max_price(
        self,
        category_id: int,
        context: CatalogContext,
    ) -> Decimal:
        """
        Highest indexed price in a category for the context's customer group.

        Returns:
            The price, zero when the category has no priced product.
        """
        max_price = await self._repository.get_category_max_price(
            category_id,
            context.customer_group_id,
        )
        return max_price if max_price is not None else Decimal("0")

    async def get_products_related_to_category(
        self,
        category_id: Optional[int] = None,
    ) -> list[Product]:
        """Products linked to a category, every product when none is given."""
        return await self._repository.list_by_category(category_id)

    async def get_super_attributes(self, product_id: int) -> list[dict]:
        """
        Configurable attributes of a product, with their options.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        product = await self._repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return await self._repository.get_super_attributes(product.id)
