"""
PostgreSQL infrastructure package.
"""
import asyncpg
from asyncpg import Pool

from .attribute_repository import PostgresAttributeCatalog
from .paginator import PaginationExecutor, resolve_page, resolve_per_page
from .plan_builder import QueryPlanBuilder
from .product_repository import PostgresProductRepository
from .query_plan import QueryPlan
from .sort_resolver import OrderBySpec, SortResolver


async def create_pool(dsn: str, min_size: int = 5, max_size: int = 20) -> Pool:
    """
    Create an asyncpg connection pool.

    Args:
        dsn: Database connection string.
        min_size: Minimum pool size.
        max_size: Maximum pool size.

    Returns:
        asyncpg connection pool.
    """
    return await asyncpg.create_pool(
        dsn=dsn,
        min_size=min_size,
        max_size=max_size,
    )


__all__ = [
    "OrderBySpec",
    "PaginationExecutor",
    "PostgresAttributeCatalog",
    "PostgresProductRepository",
    "QueryPlan",
    "QueryPlanBuilder",
    "SortResolver",
    "create_pool",
    "resolve_page",
    "resolve_per_page",
]
