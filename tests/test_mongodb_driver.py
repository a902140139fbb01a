"""Tests for the MongoDB driver."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from dbfixtures.drivers.mongodb_driver import MongoDriver


@pytest.fixture
def driver(mongo_client: MagicMock) -> MongoDriver:
    return MongoDriver(mongo_client, "testdb")


class TestMongoDriver:
    def test_selects_the_database(self, driver: MongoDriver, mongo_client: MagicMock) -> None:
        mongo_client.get_database.assert_called_once_with(
            "testdb", codec_options=None, write_concern=None
        )

    @pytest.mark.asyncio
    async def test_truncate_drops_each_collection(
        self, driver: MongoDriver, mongo_client: MagicMock
    ) -> None:
        database = mongo_client.get_database.return_value

        await driver.truncate(["users", "orders"])

        assert database.drop_collection.await_count == 2
        dropped = {args.args[0] for args in database.drop_collection.await_args_list}
        assert dropped == {"users", "orders"}

    @pytest.mark.asyncio
    async def test_truncate_error_bubbles_up_unchanged(
        self, driver: MongoDriver, mongo_client: MagicMock
    ) -> None:
        error = RuntimeError("drop failed")
        mongo_client.get_database.return_value.drop_collection.side_effect = error

        with pytest.raises(RuntimeError) as exc_info:
            await driver.truncate(["users"])

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_truncate_waits_for_every_drop_before_raising(
        self, driver: MongoDriver, mongo_client: MagicMock
    ) -> None:
        error = RuntimeError("drop failed")
        finished: list[str] = []

        async def drop_collection(name: str) -> None:
            if name == "users":
                raise error
            await asyncio.sleep(0.05)
            finished.append(name)

        mongo_client.get_database.return_value.drop_collection.side_effect = drop_collection

        with pytest.raises(RuntimeError) as exc_info:
            await driver.truncate(["users", "orders"])

        assert exc_info.value is error
        assert finished == ["orders"]

    @pytest.mark.asyncio
    async def test_insert_uses_one_insert_many(
        self, driver: MongoDriver, mongo_client: MagicMock
    ) -> None:
        database = mongo_client.get_database.return_value
        documents = [{"name": "Ada"}, {"name": "Grace"}]

        await driver.insert_fixtures("users", documents)

        database.get_collection.assert_called_once_with("users")
        collection = database.get_collection.return_value
        collection.insert_many.assert_awaited_once_with([{"name": "Ada"}, {"name": "Grace"}])

    @pytest.mark.asyncio
    async def test_insert_does_not_mutate_the_fixtures(
        self, driver: MongoDriver, mongo_client: MagicMock
    ) -> None:
        collection = mongo_client.get_database.return_value.get_collection.return_value

        async def assign_ids(documents: list[dict]) -> None:
            for index, document in enumerate(documents):
                document["_id"] = index

        collection.insert_many.side_effect = assign_ids
        documents = [{"name": "Ada"}]

        await driver.insert_fixtures("users", documents)

        assert documents == [{"name": "Ada"}]

    @pytest.mark.asyncio
    async def test_empty_fixtures_make_no_call(
        self, driver: MongoDriver, mongo_client: MagicMock
    ) -> None:
        database = mongo_client.get_database.return_value

        await driver.insert_fixtures("users", [])

        database.get_collection.assert_not_called()

    @pytest.mark.asyncio
    async def test_close_closes_the_client_once(
        self, driver: MongoDriver, mongo_client: MagicMock
    ) -> None:
        await driver.close()

        mongo_client.close.assert_awaited_once_with()
