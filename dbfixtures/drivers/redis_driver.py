"""Redis driver for seeding keys of every Redis data type.

Redis keys carry no schema, so the driver is told up front which type each
key holds. The declaration picks the insertion strategy for the key once,
when the driver is built:

- string: SET the key to the first fixture
- list: LPUSH all fixtures in one call
- set: SADD all fixtures in one call
- hash: HSET each fixture's fields, in order
- stream: XADD one entry per fixture, in order

Installation:
    pip install redis

Example:
    >>> from redis.asyncio import Redis
    >>> from dbfixtures.drivers import KeyType, RedisDriver
    >>> driver = RedisDriver(
    ...     Redis.from_url("redis://localhost:6379/0"),
    ...     {"greeting": KeyType.STRING, "events": KeyType.STREAM},
    ... )
    >>> await driver.truncate(["greeting", "events"])
    >>> await driver.insert_fixtures("events", [{"type": "signup"}])
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from enum import Enum
from typing import Any

from redis.asyncio import Redis

from dbfixtures.errors import (
    ConfigurationError,
    ErrorContext,
    InsertFailedError,
    UndeclaredKeyError,
)
from dbfixtures.ports.driver import BaseDriver

logger = logging.getLogger(__name__)


class KeyType(Enum):
    """Data type stored under a Redis key."""

    STRING = "string"
    LIST = "list"
    SET = "set"
    HASH = "hash"
    STREAM = "stream"

    @classmethod
    def _missing_(cls, value: object) -> KeyType | None:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "scalar":
                return cls.STRING
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @classmethod
    def parse(cls, value: KeyType | str) -> KeyType:
        """Parse a declared key type, raising ConfigurationError if unknown."""
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(member.value for member in cls)
            raise ConfigurationError(
                message=f"Invalid key type '{value}'. Valid types: {valid}",
                cause=e,
            ) from e


Inserter = Callable[[str, Sequence[Any]], Awaitable[None]]


def _render(value: Any) -> str | bytes:
    """Render a fixture value the way Redis stores it."""
    if isinstance(value, (str, bytes)):
        return value
    return str(value)


class RedisDriver(BaseDriver[Any]):
    """Driver seeding Redis keys according to their declared type.

    Attributes:
        key_types: Read-only view of the declared key types.

    Example:
        >>> driver = RedisDriver(client, {"tags": KeyType.SET})
        >>> await driver.insert_fixtures("tags", ["a", "b", "a"])
    """

    driver_name = "redis"

    def __init__(
        self,
        client: Redis,
        key_types: Mapping[str, KeyType | str],
    ) -> None:
        """Initialize the Redis driver.

        Args:
            client: Connected redis.asyncio client. The driver takes
                ownership and closes it in close().
            key_types: Type declared for every key the driver may seed.

        Raises:
            ConfigurationError: If a declared type is not a Redis type.
        """
        self._client = client
        self._key_types: dict[str, KeyType] = {
            key: KeyType.parse(key_type) for key, key_type in key_types.items()
        }
        strategies: dict[KeyType, Inserter] = {
            KeyType.STRING: self._insert_string,
            KeyType.LIST: self._insert_list,
            KeyType.SET: self._insert_set,
            KeyType.HASH: self._insert_hash,
            KeyType.STREAM: self._insert_stream,
        }
        self._inserters: dict[str, Inserter] = {
            key: strategies[key_type] for key, key_type in self._key_types.items()
        }

    @property
    def key_types(self) -> Mapping[str, KeyType]:
        return dict(self._key_types)

    async def truncate(self, names: Sequence[str]) -> None:
        """Delete every given key in a single DEL call."""
        if not names:
            return
        deleted = await self._client.delete(*names)
        logger.debug(f"Deleted {deleted} of {len(names)} Redis key(s)")

    async def insert_fixtures(self, name: str, fixtures: Sequence[Any]) -> None:
        """Insert fixtures under a key using the key's declared type.

        Raises:
            UndeclaredKeyError: If the key has no declared type.
            InsertFailedError: If Redis refuses a string SET.
        """
        if not fixtures:
            return

        inserter = self._inserters.get(name)
        if inserter is None:
            raise UndeclaredKeyError(
                name,
                context=ErrorContext(
                    driver=self.driver_name, target=name, operation="insert_fixtures"
                ),
            )

        await inserter(name, fixtures)
        logger.debug(
            f"Inserted {len(fixtures)} fixture(s) into Redis "
            f"{self._key_types[name].value} key '{name}'"
        )

    async def close(self) -> None:
        """Close the client and its connection pool."""
        await self._client.aclose()
        logger.info("Closed Redis connection")

    async def _insert_string(self, name: str, fixtures: Sequence[Any]) -> None:
        # Only the first fixture is stored; a string key holds one value.
        result = await self._client.set(name, _render(fixtures[0]))
        if not result:
            raise InsertFailedError(
                message=f"Failed to insert string key '{name}'",
                context=ErrorContext(
                    driver=self.driver_name, target=name, operation="insert_fixtures"
                ),
            )

    async def _insert_list(self, name: str, fixtures: Sequence[Any]) -> None:
        await self._client.lpush(name, *(_render(fixture) for fixture in fixtures))

    async def _insert_set(self, name: str, fixtures: Sequence[Any]) -> None:
        await self._client.sadd(name, *(_render(fixture) for fixture in fixtures))

    async def _insert_hash(self, name: str, fixtures: Sequence[Any]) -> None:
        for fixture in fixtures:
            await self._client.hset(name, mapping=self._fields(name, fixture))

    async def _insert_stream(self, name: str, fixtures: Sequence[Any]) -> None:
        for fixture in fixtures:
            await self._client.xadd(name, self._fields(name, fixture))

    def _fields(self, name: str, fixture: Any) -> dict[str, str | bytes]:
        if not isinstance(fixture, Mapping):
            raise ConfigurationError(
                message=(
                    f"Fixtures for {self._key_types[name].value} key '{name}' must be "
                    f"field mappings, got {type(fixture).__name__}"
                ),
                context=ErrorContext(
                    driver=self.driver_name, target=name, operation="insert_fixtures"
                ),
            )
        if not fixture:
            raise ConfigurationError(
                message=(
                    f"Fixtures for {self._key_types[name].value} key '{name}' must have "
                    "at least one field"
                ),
                context=ErrorContext(
                    driver=self.driver_name, target=name, operation="insert_fixtures"
                ),
            )
        return {str(field): _render(value) for field, value in fixture.items()}
