"""
Two-phase paginated execution of query plans.
"""
from contextlib import nullcontext
from typing import Optional, Sequence, Union

from asyncpg import Pool

from internal.domain.errors import InvalidFilterValueError
from internal.domain.product import Page
from internal.infrastructure.metrics import CATALOG_EMPTY_RESULTS, CATALOG_QUERY_DURATION
from internal.infrastructure.postgres.query_plan import QueryPlan
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


DEFAULT_PER_PAGE = 9


def _positive_int(parameter: str, raw: Union[str, int]) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise InvalidFilterValueError(parameter, raw, "not an integer")
    if value < 1:
        raise InvalidFilterValueError(parameter, raw, "must be positive")
    return value


def resolve_per_page(
    limit: Optional[Union[str, int]],
    page_sizes: Sequence[int] = (),
) -> int:
    """
    Resolve the page size.

    The request ``limit`` wins, then the first configured page size,
    then 9.
    """
    if limit is not None and str(limit).strip():
        return _positive_int("limit", limit)
    if page_sizes:
        return page_sizes[0]
    return DEFAULT_PER_PAGE


def resolve_page(raw: Optional[Union[str, int]]) -> int:
    """Resolve the 1-based page number, defaulting to 1."""
    if raw is None or not str(raw).strip():
        return 1
    return _positive_int("page", raw)


class PaginationExecutor:
    """
    Runs a plan as a count followed by one windowed fetch.

    The fetch is skipped when the count is zero. Both statements use the
    same connection; with ``snapshot_reads`` they also share one read-only
    REPEATABLE READ transaction, otherwise a write committed between them
    may make the count disagree with the page.
    """

    def __init__(self, pool: Pool, snapshot_reads: bool = False) -> None:
        """
        Initialize the executor.

        Args:
            pool: asyncpg connection pool.
            snapshot_reads: Run count and fetch in one snapshot.
        """
        self._pool = pool
        self._snapshot_reads = snapshot_reads

    async def execute(self, plan: QueryPlan, page: int, per_page: int) -> Page:
        """
        Execute a plan for one page.

        Args:
            plan: Query plan.
            page: 1-based page number.
            per_page: Page size.

        Returns:
            Page with the rows of the window and the total count.
        """
        count_sql, count_params = plan.count_query()
        items: list[dict] = []

        async with self._pool.acquire() as conn:
            read_scope = (
                conn.transaction(isolation="repeatable_read", readonly=True)
                if self._snapshot_reads
                else nullcontext()
            )
            async with read_scope:
                logger.debug("Counting catalog rows", sql=count_sql)
                with CATALOG_QUERY_DURATION.labels(phase="count").time():
                    total = await conn.fetchval(count_sql, *count_params) or 0

                if total > 0:
                    page_sql, page_params = plan.page_query(
                        limit=per_page,
                        offset=(page - 1) * per_page,
                    )
                    logger.debug("Fetching catalog page", sql=page_sql, page=page)
                    with CATALOG_QUERY_DURATION.labels(phase="fetch").time():
                        rows = await conn.fetch(page_sql, *page_params)
                    items = [dict(row) for row in rows]
                else:
                    CATALOG_EMPTY_RESULTS.inc()

        return Page(items=items, total=total, page=page, per_page=per_page)
