"""
Unit tests for currency conversion, the attribute cache and the product repository.
"""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import msgpack
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from internal.domain.attribute import AttributeDefinition
from internal.domain.errors import InvalidFilterValueError
from internal.domain.product import Product
from internal.infrastructure.currency import FixedRatePriceConverter
from internal.infrastructure.postgres.attribute_repository import PostgresAttributeCatalog
from internal.infrastructure.postgres.product_repository import PostgresProductRepository
from internal.infrastructure.redis.cache import CachedAttributeCatalog, RedisCache


class TestFixedRatePriceConverter:
    """Tests for FixedRatePriceConverter."""

    def test_divides_by_rate(self):
        converter = FixedRatePriceConverter(Decimal("1.25"))
        assert converter.to_base("100") == Decimal("80.0000")

    def test_rounds_to_index_precision(self):
        converter = FixedRatePriceConverter(Decimal("3"))
        assert converter.to_base("10") == Decimal("3.3333")

    def test_non_numeric_price_raises_error(self):
        with pytest.raises(InvalidFilterValueError):
            FixedRatePriceConverter().to_base("ten")

    def test_negative_price_raises_error(self):
        with pytest.raises(InvalidFilterValueError):
            FixedRatePriceConverter().to_base("-1")

    def test_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            FixedRatePriceConverter(Decimal("0"))


class TestRedisCache:
    """Tests for RedisCache."""

    @pytest.mark.asyncio
    async def test_get_unpacks_msgpack(self):
        cache = RedisCache("redis://localhost")
        cache._redis = MagicMock()
        cache._redis.get = AsyncMock(return_value=msgpack.packb({"a": 1}, use_bin_type=True))

        assert await cache.get("k") == {"a": 1}

    @pytest.mark.asyncio
    async def test_redis_error_is_a_miss(self):
        cache = RedisCache("redis://localhost")
        cache._redis = MagicMock()
        cache._redis.get = AsyncMock(side_effect=RedisConnectionError("down"))

        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_set_applies_jittered_ttl(self):
        cache = RedisCache("redis://localhost", default_ttl=600, max_jitter=60)
        cache._redis = MagicMock()
        cache._redis.setex = AsyncMock()

        assert await cache.set("k", {"a": 1}) is True

        key, ttl, data = cache._redis.setex.call_args.args
        assert key == "k"
        assert 600 <= ttl <= 660
        assert msgpack.unpackb(data, raw=False) == {"a": 1}

    @pytest.mark.asyncio
    async def test_disconnected_cache_does_nothing(self):
        cache = RedisCache("redis://localhost")
        assert await cache.get("k") is None
        assert await cache.set("k", {}) is False


class TestCachedAttributeCatalog:
    """Tests for CachedAttributeCatalog."""

    @pytest.mark.asyncio
    async def test_miss_loads_and_stores_the_table(self, attribute_catalog, color_attribute):
        cache = MagicMock()
        cache.get = AsyncMock(return_value=None)
        cache.set = AsyncMock(return_value=True)
        cached = CachedAttributeCatalog(attribute_catalog, cache)

        result = await cached.filterable_attributes(["size", "color", "unknown"])

        assert [definition.code for definition in result] == ["color", "size"]
        key, value = cache.set.call_args.args
        assert key == "attribute:all"
        assert color_attribute.to_dict() in value["items"]
        assert len(value["items"]) == 5

    @pytest.mark.asyncio
    async def test_hit_skips_catalog(self, color_attribute):
        inner = MagicMock()
        inner.all_attributes = AsyncMock()
        cache = MagicMock()
        cache.get = AsyncMock(return_value={"items": [color_attribute.to_dict()]})
        cached = CachedAttributeCatalog(inner, cache)

        assert await cached.by_code("color") == color_attribute
        assert await cached.by_code("created_at") is None
        inner.all_attributes.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_filterable_attribute_is_not_a_filter(self, color_attribute):
        sku = AttributeDefinition.from_type(id=1, code="sku", type="text")
        cache = MagicMock()
        cache.get = AsyncMock(return_value={"items": [color_attribute.to_dict(), sku.to_dict()]})
        cached = CachedAttributeCatalog(MagicMock(), cache)

        assert await cached.filterable_attributes(["sku", "color"]) == [color_attribute]
        assert await cached.by_code("sku") == sku

    @pytest.mark.asyncio
    async def test_request_codes_never_become_keys(self, attribute_catalog):
        cache = MagicMock()
        cache.get = AsyncMock(return_value=None)
        cache.set = AsyncMock(return_value=True)
        cached = CachedAttributeCatalog(attribute_catalog, cache)

        await cached.filterable_attributes(["utm_source", "utm_campaign"])
        await cached.by_code("definitely-not-an-attribute")

        keys = {call.args[0] for call in cache.get.call_args_list}
        keys |= {call.args[0] for call in cache.set.call_args_list}
        assert keys == {"attribute:all"}

    @pytest.mark.asyncio
    async def test_no_codes_skips_cache(self):
        cache = MagicMock()
        cache.get = AsyncMock()
        cached = CachedAttributeCatalog(MagicMock(), cache)

        assert await cached.filterable_attributes([]) == []
        cache.get.assert_not_called()


class TestPostgresAttributeCatalog:
    """Tests for PostgresAttributeCatalog."""

    @pytest.mark.asyncio
    async def test_rows_become_definitions(self, pool, connection):
        connection.fetch.return_value = [
            {"id": 23, "code": "color", "type": "select", "is_filterable": True},
            {"id": 99, "code": "legacy", "type": "hologram", "is_filterable": True},
        ]
        catalog = PostgresAttributeCatalog(pool)

        result = await catalog.filterable_attributes(["color", "legacy"])

        assert [definition.code for definition in result] == ["color"]
        assert result[0].column_name == "integer_value"
        assert result[0].is_filterable is True

    @pytest.mark.asyncio
    async def test_all_attributes(self, pool, connection):
        connection.fetch.return_value = [
            {"id": 23, "code": "color", "type": "select", "is_filterable": True},
            {"id": 1, "code": "sku", "type": "text", "is_filterable": False},
        ]
        catalog = PostgresAttributeCatalog(pool)

        result = await catalog.all_attributes()

        assert [(d.code, d.is_filterable) for d in result] == [("color", True), ("sku", False)]
        assert "WHERE" not in connection.fetch.call_args.args[0]


class TestPostgresProductRepository:
    """Tests for PostgresProductRepository."""

    @pytest.mark.asyncio
    async def test_flat_rows_follow_requested_order(self, pool, connection, context):
        connection.fetch.return_value = [
            {"product_id": 1, "name": "a"},
            {"product_id": 3, "name": "c"},
        ]
        repository = PostgresProductRepository(pool)

        rows = await repository.get_flat_by_product_ids([3, 2, 1], context)

        assert [row["product_id"] for row in rows] == [3, 1]

    @pytest.mark.asyncio
    async def test_no_ids_runs_no_query(self, pool, connection, context):
        repository = PostgresProductRepository(pool)
        assert await repository.get_flat_by_product_ids([], context) == []
        connection.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_super_attributes_group_options(self, pool, connection):
        base = {"id": 23, "code": "color", "admin_name": "Color", "type": "select"}
        connection.fetch.return_value = [
            {**base, "option_id": 1, "option_admin_name": "Red",
             "option_sort_order": 1, "option_swatch_value": None},
            {**base, "option_id": 2, "option_admin_name": "Blue",
             "option_sort_order": 2, "option_swatch_value": None},
            {"id": 24, "code": "size", "admin_name": "Size", "type": "select",
             "option_id": None, "option_admin_name": None,
             "option_sort_order": None, "option_swatch_value": None},
        ]
        repository = PostgresProductRepository(pool)

        attributes = await repository.get_super_attributes(7)

        assert [attribute["code"] for attribute in attributes] == ["color", "size"]
        assert [option["admin_name"] for option in attributes[0]["options"]] == ["Red", "Blue"]
        assert attributes[1]["options"] == []

    @pytest.mark.asyncio
    async def test_copy_runs_strategy_in_transaction(self, pool, connection):
        copied = Product(id=8, type="simple")
        strategy = MagicMock()
        strategy.copy = AsyncMock(return_value=copied)
        repository = PostgresProductRepository(pool)

        result = await repository.copy(Product(id=7, type="simple"), strategy)

        assert result is copied
        connection.transaction.assert_called_once_with()
        strategy.copy.assert_awaited_once()
        assert strategy.copy.call_args.args[0] is connection

    @pytest.mark.asyncio
    async def test_copy_failure_propagates_through_transaction(self, pool, connection):
        strategy = MagicMock()
        strategy.copy = AsyncMock(side_effect=RuntimeError("duplicate sku"))
        repository = PostgresProductRepository(pool)

        with pytest.raises(RuntimeError):
            await repository.copy(Product(id=7, type="simple"), strategy)

        transaction = connection.transaction.return_value
        exit_args = transaction.__aexit__.call_args.args
        assert exit_args[0] is RuntimeError
