"""
Unit tests for two-phase paginated execution.
"""
import pytest

from internal.domain.errors import InvalidFilterValueError
from internal.infrastructure.postgres.paginator import (
    PaginationExecutor,
    resolve_page,
    resolve_per_page,
)
from internal.infrastructure.postgres.query_plan import storefront_plan


class TestPageParameters:
    """Tests for page and page size resolution."""

    def test_limit_wins(self):
        assert resolve_per_page("12", [9, 15]) == 12

    def test_first_configured_size_is_default(self):
        assert resolve_per_page(None, [15, 30]) == 15

    def test_nine_when_nothing_configured(self):
        assert resolve_per_page(None) == 9
        assert resolve_per_page("") == 9

    @pytest.mark.parametrize("raw", ["0", "-3", "ten", "1.5"])
    def test_invalid_limit_raises_error(self, raw):
        with pytest.raises(InvalidFilterValueError) as exc_info:
            resolve_per_page(raw)
        assert exc_info.value.parameter == "limit"

    def test_page_defaults_to_first(self):
        assert resolve_page(None) == 1
        assert resolve_page("3") == 3

    def test_invalid_page_raises_error(self):
        with pytest.raises(InvalidFilterValueError):
            resolve_page("0")


class TestPaginationExecutor:
    """Tests for PaginationExecutor."""

    @pytest.mark.asyncio
    async def test_empty_count_skips_fetch(self, pool, connection, context):
        connection.fetchval.return_value = 0
        executor = PaginationExecutor(pool)

        page = await executor.execute(storefront_plan(context), page=1, per_page=9)

        assert page.total == 0
        assert page.items == []
        connection.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_count_then_fetch_on_one_connection(self, pool, connection, context):
        connection.fetchval.return_value = 5
        connection.fetch.return_value = [{"id": 5}, {"id": 6}]
        executor = PaginationExecutor(pool)

        page = await executor.execute(storefront_plan(context), page=3, per_page=2)

        pool.acquire.assert_called_once()
        count_sql = connection.fetchval.call_args.args[0]
        page_sql = connection.fetch.call_args.args[0]
        assert "ORDER BY" not in count_sql
        assert "LIMIT $3 OFFSET $4" in page_sql
        assert connection.fetch.call_args.args[1:] == ("default", "en", 2, 4)
        assert page.items == [{"id": 5}, {"id": 6}]
        assert page.total == 5
        assert page.total_pages == 3

    @pytest.mark.asyncio
    async def test_pages_cover_the_result_set_exactly_once(self, pool, connection, context):
        rows = [{"id": i} for i in range(1, 6)]
        connection.fetchval.return_value = len(rows)

        async def fetch_window(sql, *params):
            limit, offset = params[-2], params[-1]
            return rows[offset:offset + limit]

        connection.fetch.side_effect = fetch_window
        executor = PaginationExecutor(pool)
        plan = storefront_plan(context)

        pages = [await executor.execute(plan, page=n, per_page=2) for n in (1, 2, 3)]

        assert [[row["id"] for row in page.items] for page in pages] == [[1, 2], [3, 4], [5]]
        assert all(page.total == 5 for page in pages)

    @pytest.mark.asyncio
    async def test_snapshot_reads_open_a_read_only_transaction(self, pool, connection, context):
        connection.fetchval.return_value = 1
        executor = PaginationExecutor(pool, snapshot_reads=True)

        await executor.execute(storefront_plan(context), page=1, per_page=9)

        connection.transaction.assert_called_once_with(
            isolation="repeatable_read",
            readonly=True,
        )

    @pytest.mark.asyncio
    async def test_no_transaction_without_snapshot_reads(self, pool, connection, context):
        await PaginationExecutor(pool).execute(storefront_plan(context), page=1, per_page=9)
        connection.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_errors_propagate(self, pool, connection, context):
        connection.fetchval.side_effect = ConnectionError("connection reset")

        with pytest.raises(ConnectionError):
            await PaginationExecutor(pool).execute(storefront_plan(context), page=1, per_page=9)
