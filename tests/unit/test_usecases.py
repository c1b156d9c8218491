"""
Unit tests for catalog use cases.
"""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from internal.domain.errors import (
    ConflictingStateError,
    InvalidFilterValueError,
    ProductNotFoundError,
    UnsupportedProductTypeError,
)
from internal.domain.product import Page, Product
from internal.domain.value_objects import SortDirection
from internal.infrastructure.postgres.paginator import PaginationExecutor
from internal.infrastructure.postgres.plan_builder import QueryPlanBuilder
from internal.infrastructure.postgres.sort_resolver import SortResolver
from internal.usecase.copy_product import CopyProductUseCase
from internal.usecase.list_products import ListProductsInput, ListProductsUseCase
from internal.usecase.search_products import SearchProductsInput, SearchProductsUseCase
from internal.usecase.storefront_products import StorefrontProductsUseCase


@pytest.fixture
def list_use_case(attribute_catalog, price_converter, pool):
    builder = QueryPlanBuilder(
        attribute_catalog=attribute_catalog,
        price_converter=price_converter,
        sort_resolver=SortResolver(attribute_catalog),
    )
    return ListProductsUseCase(
        builder=builder,
        executor=PaginationExecutor(pool),
        default_sort="price-asc",
        page_sizes=[12, 24],
    )


class TestListProductsUseCase:
    """Tests for ListProductsUseCase."""

    @pytest.mark.asyncio
    async def test_configured_defaults(self, list_use_case, connection, context, flat_row):
        connection.fetchval.return_value = 1
        connection.fetch.return_value = [flat_row]

        page = await list_use_case.execute(ListProductsInput(context=context))

        assert page.items == [flat_row]
        assert page.per_page == 12
        page_sql = connection.fetch.call_args.args[0]
        assert "ORDER BY product_price_indices.min_price ASC NULLS LAST" in page_sql
        assert connection.fetch.call_args.args[-2:] == (12, 0)

    @pytest.mark.asyncio
    async def test_request_page_and_limit(self, list_use_case, connection, context):
        connection.fetchval.return_value = 50

        page = await list_use_case.execute(
            ListProductsInput(context=context, params={"page": "3", "limit": "5"})
        )

        assert (page.page, page.per_page) == (3, 5)
        assert connection.fetch.call_args.args[-2:] == (5, 10)

    @pytest.mark.asyncio
    async def test_category_scope_is_passed_through(self, list_use_case, connection, context):
        await list_use_case.execute(
            ListProductsInput(context=context, category_ids=frozenset({4}))
        )
        count_sql = connection.fetchval.call_args.args[0]
        assert "product_categories.category_id = ANY($4)" in count_sql

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [{"price": "cheap"}, {"color": "red"}, {"page": "0"}, {"limit": "x"}],
    )
    async def test_invalid_value_runs_no_query(self, list_use_case, pool, context, params):
        with pytest.raises(InvalidFilterValueError):
            await list_use_case.execute(ListProductsInput(context=context, params=params))
        pool.acquire.assert_not_called()

    @pytest.mark.asyncio
    async def test_unrecognized_order_keeps_default_direction(self, list_use_case, connection, context):
        connection.fetchval.return_value = 1
        await list_use_case.execute(
            ListProductsInput(context=context, params={"order": "upwards"})
        )
        page_sql = connection.fetch.call_args.args[0]
        assert f"min_price {SortDirection.ASC.value} NULLS LAST" in page_sql


class TestSearchProductsUseCase:
    """Tests for SearchProductsUseCase."""

    @pytest.mark.asyncio
    async def test_execute_delegates_to_dispatcher(self, context):
        result = Page(items=[{"id": 1}], total=1, per_page=16)
        dispatcher = MagicMock()
        dispatcher.strategy.name = "database"
        dispatcher.search = AsyncMock(return_value=result)

        use_case = SearchProductsUseCase(dispatcher)
        page = await use_case.execute(SearchProductsInput(term="shirt", context=context, page=2))

        assert page is result
        dispatcher.search.assert_awaited_once_with("shirt", context, 2)


@pytest.fixture
def repository():
    return MagicMock()


@pytest.fixture
def executor():
    executor = MagicMock()
    executor.execute = AsyncMock(return_value=Page())
    return executor


class TestStorefrontProductsUseCase:
    """Tests for StorefrontProductsUseCase."""

    @pytest.mark.asyncio
    async def test_new_products_default_to_four(self, repository, executor, context):
        use_case = StorefrontProductsUseCase(repository, executor)

        await use_case.get_new_products(context)

        plan = executor.execute.call_args.args[0]
        assert "product_flat.new = TRUE" in plan.where
        assert plan.order_by == ["RANDOM()"]
        assert executor.execute.call_args.kwargs == {"page": 1, "per_page": 4}

    @pytest.mark.asyncio
    async def test_featured_products_use_configured_count(self, repository, executor, context):
        use_case = StorefrontProductsUseCase(repository, executor, featured_products_count=8)

        await use_case.get_featured_products(context)
        assert executor.execute.call_args.kwargs["per_page"] == 8

        await use_case.get_featured_products(context, count=2)
        assert executor.execute.call_args.kwargs["per_page"] == 2

    @pytest.mark.asyncio
    async def test_find_by_slug_or_fail(self, repository, executor, context, flat_row):
        repository.find_by_slug = AsyncMock(side_effect=[flat_row, None])
        use_case = StorefrontProductsUseCase(repository, executor)

        assert await use_case.find_by_slug_or_fail("red-t-shirt", context) == flat_row
        with pytest.raises(ProductNotFoundError):
            await use_case.find_by_slug_or_fail("missing", context)

    @pytest.mark.asyncio
    async def test_category_max_price(self, repository, executor, context):
        repository.get_category_max_price = AsyncMock(side_effect=[Decimal("99.5"), None])
        use_case = StorefrontProductsUseCase(repository, executor)

        assert await use_case.get_category_max_price(3, context) == Decimal("99.5")
        assert await use_case.get_category_max_price(3, context) == Decimal("0")
        repository.get_category_max_price.assert_awaited_with(3, 1)

    @pytest.mark.asyncio
    async def test_super_attributes_of_missing_product(self, repository, executor):
        repository.get_by_id = AsyncMock(return_value=None)
        use_case = StorefrontProductsUseCase(repository, executor)

        with pytest.raises(ProductNotFoundError):
            await use_case.get_super_attributes(99)

    @pytest.mark.asyncio
    async def test_products_related_to_category(self, repository, executor):
        products = [Product(id=1, type="simple")]
        repository.list_by_category = AsyncMock(return_value=products)
        use_case = StorefrontProductsUseCase(repository, executor)

        assert await use_case.get_products_related_to_category(5) == products
        repository.list_by_category.assert_awaited_once_with(5)

    @pytest.mark.asyncio
    async def test_search_simple_products(self, repository, executor, context, flat_row):
        repository.search_simple_products = AsyncMock(return_value=[flat_row])
        use_case = StorefrontProductsUseCase(repository, executor)

        assert await use_case.search_simple_products("shirt", context) == [flat_row]


class TestCopyProductUseCase:
    """Tests for CopyProductUseCase."""

    @pytest.mark.asyncio
    async def test_copy_with_type_strategy(self, repository):
        original = Product(id=7, type="simple", sku="A")
        copied = Product(id=30, type="simple", sku="A-copy")
        strategy = MagicMock()
        repository.get_by_id = AsyncMock(return_value=original)
        repository.copy = AsyncMock(return_value=copied)

        use_case = CopyProductUseCase(repository, {"simple": strategy})

        assert await use_case.execute(7) is copied
        repository.copy.assert_awaited_once_with(original, strategy)

    @pytest.mark.asyncio
    async def test_variant_is_rejected_before_any_write(self, repository):
        repository.get_by_id = AsyncMock(return_value=Product(id=8, type="simple", parent_id=7))
        repository.copy = AsyncMock()

        use_case = CopyProductUseCase(repository, {"simple": MagicMock()})

        with pytest.raises(ConflictingStateError):
            await use_case.execute(8)
        repository.copy.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsupported_type(self, repository):
        repository.get_by_id = AsyncMock(return_value=Product(id=7, type="bundle"))
        repository.copy = AsyncMock()

        use_case = CopyProductUseCase(repository, {"simple": MagicMock()})

        with pytest.raises(UnsupportedProductTypeError):
            await use_case.execute(7)
        repository.copy.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_product(self, repository):
        repository.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(ProductNotFoundError):
            await CopyProductUseCase(repository, {}).execute(1)
