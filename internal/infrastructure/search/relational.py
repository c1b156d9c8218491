"""
Search over the flat product projection.
"""
from internal.domain.product import Page
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.postgres.paginator import PaginationExecutor
from internal.infrastructure.postgres.query_plan import (
    FLAT,
    contains_pattern,
    storefront_plan,
)
from internal.infrastructure.search.base import SEARCH_PAGE_SIZE, search_tokens


SEARCHED_COLUMNS = ("name", "short_description")


class DatabaseSearchStrategy:
    """
    Substring search in PostgreSQL.

    A row matches when any token occurs in any searched column. Always
    available, so it also serves as the fallback of external backends.
    """

    name = "database"

    def __init__(self, executor: PaginationExecutor) -> None:
        """
        Initialize the strategy.

        Args:
            executor: Executor running the search plan.
        """
        self._executor = executor

    async def search(self, term: str, context: CatalogContext, page: int = 1) -> Page:
        plan = storefront_plan(context)

        conditions = [
            f"{FLAT}.{column} ILIKE {plan.bind(contains_pattern(token))}"
            for token in search_tokens(term)
            for column in SEARCHED_COLUMNS
        ]
        if conditions:
            plan.where.append("(" + " OR ".join(conditions) + ")")

        plan.order_by = [f"{FLAT}.product_id DESC", f"{FLAT}.id DESC"]

        return await self._executor.execute(plan, page=page, per_page=SEARCH_PAGE_SIZE)
