"""Pytest fixtures for dbfixtures tests."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from dbfixtures.ports.driver import BaseDriver


class RecordingDriver(BaseDriver[Any]):
    """In-memory driver recording every call it receives."""

    driver_name = "recording"

    def __init__(self, label: str, calls: list[tuple[Any, ...]] | None = None) -> None:
        self.label = label
        self.calls: list[tuple[Any, ...]] = calls if calls is not None else []
        self.data: dict[str, list[Any]] = {}
        self.truncate_error: BaseException | None = None
        self.insert_error: BaseException | None = None
        self.close_error: BaseException | None = None

    async def truncate(self, names: Sequence[str]) -> None:
        self.calls.append((self.label, "truncate", list(names)))
        if self.truncate_error is not None:
            raise self.truncate_error
        for name in names:
            self.data.pop(name, None)

    async def insert_fixtures(self, name: str, fixtures: Sequence[Any]) -> None:
        self.calls.append((self.label, "insert_fixtures", name, fixtures))
        if self.insert_error is not None:
            raise self.insert_error
        if fixtures:
            self.data.setdefault(name, []).extend(fixtures)

    async def close(self) -> None:
        self.calls.append((self.label, "close"))
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def calls() -> list[tuple[Any, ...]]:
    return []


@pytest.fixture
def driver_one(calls: list[tuple[Any, ...]]) -> RecordingDriver:
    return RecordingDriver("one", calls)


@pytest.fixture
def driver_two(calls: list[tuple[Any, ...]]) -> RecordingDriver:
    return RecordingDriver("two", calls)


@pytest.fixture
def redis_client() -> AsyncMock:
    client = AsyncMock()
    client.set.return_value = True
    client.delete.return_value = 0
    return client


@pytest.fixture
def mongo_client() -> MagicMock:
    client = MagicMock()
    database = MagicMock()
    database.drop_collection = AsyncMock()
    collection = MagicMock()
    collection.insert_many = AsyncMock()
    database.get_collection.return_value = collection
    client.get_database.return_value = database
    client.close = AsyncMock()
    return client
