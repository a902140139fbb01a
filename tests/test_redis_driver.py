"""Tests for the Redis driver."""

from __future__ import annotations

from unittest.mock import AsyncMock, call

import pytest

from dbfixtures.drivers.redis_driver import KeyType, RedisDriver
from dbfixtures.errors import ConfigurationError, InsertFailedError, UndeclaredKeyError

KEY_TYPES = {
    "greeting": KeyType.STRING,
    "queue": KeyType.LIST,
    "tags": KeyType.SET,
    "profile": KeyType.HASH,
    "events": KeyType.STREAM,
}


@pytest.fixture
def driver(redis_client: AsyncMock) -> RedisDriver:
    return RedisDriver(redis_client, KEY_TYPES)


class TestKeyType:
    """Tests for KeyType parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("string", KeyType.STRING),
            ("scalar", KeyType.STRING),
            ("LIST", KeyType.LIST),
            (" hash ", KeyType.HASH),
            (KeyType.STREAM, KeyType.STREAM),
        ],
    )
    def test_parse(self, raw: object, expected: KeyType) -> None:
        assert KeyType.parse(raw) is expected

    def test_parse_rejects_unknown_type(self) -> None:
        with pytest.raises(ConfigurationError, match="zset"):
            KeyType.parse("zset")

    def test_driver_rejects_unknown_declared_type(self, redis_client: AsyncMock) -> None:
        with pytest.raises(ConfigurationError):
            RedisDriver(redis_client, {"scores": "zset"})


class TestRedisDriverInsertString:
    @pytest.mark.asyncio
    async def test_sets_the_key_once(self, driver: RedisDriver, redis_client: AsyncMock) -> None:
        await driver.insert_fixtures("greeting", ["hello"])

        redis_client.set.assert_awaited_once_with("greeting", "hello")

    @pytest.mark.asyncio
    async def test_only_first_fixture_is_stored(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.insert_fixtures("greeting", ["v1", "v2", "v3"])

        redis_client.set.assert_awaited_once_with("greeting", "v1")

    @pytest.mark.asyncio
    async def test_non_string_fixture_is_rendered_with_str(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.insert_fixtures("greeting", [42])

        redis_client.set.assert_awaited_once_with("greeting", "42")

    @pytest.mark.asyncio
    async def test_refused_set_raises_insert_failed(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        redis_client.set.return_value = None

        with pytest.raises(InsertFailedError, match="Failed to insert string key 'greeting'"):
            await driver.insert_fixtures("greeting", ["hello"])

    @pytest.mark.asyncio
    async def test_empty_fixtures_make_no_call(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.insert_fixtures("greeting", [])

        redis_client.set.assert_not_awaited()


class TestRedisDriverInsertCollections:
    @pytest.mark.asyncio
    async def test_list_is_pushed_in_one_call(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.insert_fixtures("queue", ["a", "b", "c"])

        redis_client.lpush.assert_awaited_once_with("queue", "a", "b", "c")

    @pytest.mark.asyncio
    async def test_set_is_added_in_one_call(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.insert_fixtures("tags", ["a", "b", "a"])

        redis_client.sadd.assert_awaited_once_with("tags", "a", "b", "a")

    @pytest.mark.asyncio
    async def test_hash_sets_each_fixture_in_order(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.insert_fixtures("profile", [{"a": 1}, {"a": 2, "b": 3}])

        assert redis_client.hset.await_args_list == [
            call("profile", mapping={"a": "1"}),
            call("profile", mapping={"a": "2", "b": "3"}),
        ]

    @pytest.mark.asyncio
    async def test_stream_adds_one_entry_per_fixture(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.insert_fixtures("events", [{"x": 1}, {"y": 2}])

        assert redis_client.xadd.await_args_list == [
            call("events", {"x": "1"}),
            call("events", {"y": "2"}),
        ]

    @pytest.mark.asyncio
    async def test_hash_fixture_must_be_a_mapping(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        with pytest.raises(ConfigurationError, match="field mappings"):
            await driver.insert_fixtures("profile", ["not-a-map"])

        redis_client.hset.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["profile", "events"])
    async def test_empty_field_mapping_names_the_key(
        self, driver: RedisDriver, redis_client: AsyncMock, key: str
    ) -> None:
        with pytest.raises(ConfigurationError, match=f"'{key}' must have at least one field"):
            await driver.insert_fixtures(key, [{}])

        redis_client.hset.assert_not_awaited()
        redis_client.xadd.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["queue", "tags", "profile", "events"])
    async def test_empty_fixtures_make_no_call(
        self, driver: RedisDriver, redis_client: AsyncMock, key: str
    ) -> None:
        await driver.insert_fixtures(key, [])

        assert redis_client.method_calls == []

    @pytest.mark.asyncio
    async def test_backend_error_bubbles_up_unchanged(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        error = ConnectionRefusedError("redis down")
        redis_client.lpush.side_effect = error

        with pytest.raises(ConnectionRefusedError) as exc_info:
            await driver.insert_fixtures("queue", ["a"])

        assert exc_info.value is error


class TestRedisDriverUndeclaredKey:
    @pytest.mark.asyncio
    async def test_raises_before_any_call(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        with pytest.raises(UndeclaredKeyError) as exc_info:
            await driver.insert_fixtures("unknown", ["x"])

        assert "'unknown'" in str(exc_info.value)
        assert exc_info.value.key == "unknown"
        assert exc_info.value.context.driver == "redis"
        assert redis_client.method_calls == []

    @pytest.mark.asyncio
    async def test_is_a_configuration_error(self, driver: RedisDriver) -> None:
        with pytest.raises(ConfigurationError):
            await driver.insert_fixtures("unknown", ["x"])


class TestRedisDriverTruncateAndClose:
    @pytest.mark.asyncio
    async def test_truncate_deletes_all_keys_in_one_call(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.truncate(["greeting", "queue", "missing"])

        redis_client.delete.assert_awaited_once_with("greeting", "queue", "missing")

    @pytest.mark.asyncio
    async def test_truncate_with_no_names_makes_no_call(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.truncate([])

        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_closes_the_client_once(
        self, driver: RedisDriver, redis_client: AsyncMock
    ) -> None:
        await driver.close()

        redis_client.aclose.assert_awaited_once_with()

    def test_key_types_are_read_only(self, driver: RedisDriver) -> None:
        key_types = driver.key_types
        key_types["extra"] = KeyType.SET

        assert "extra" not in driver.key_types
