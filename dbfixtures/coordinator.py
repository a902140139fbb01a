"""Coordinator fanning fixture work out to every registered driver.

Example:
    >>> async with DbFixtures([redis_driver, mongo_driver]) as fixtures:
    ...     await fixtures.load_fixtures(
    ...         ["users", "sessions"],
    ...         {"users": [{"name": "Ada"}], "sessions": []},
    ...     )
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping, Sequence
from types import TracebackType
from typing import Any

from dbfixtures.ports.driver import Driver

logger = logging.getLogger(__name__)


class DbFixtures:
    """Loads fixtures into, and closes, a set of drivers.

    Each call runs one task per driver concurrently. Every task runs to
    completion; the first failure in registration order is then raised
    as-is and any further failures are logged.

    Attributes:
        drivers: The registered drivers, in registration order.
    """

    def __init__(self, drivers: Sequence[Driver[Any]]) -> None:
        self.drivers: tuple[Driver[Any], ...] = tuple(drivers)

    async def load_fixtures(
        self,
        names: Sequence[str],
        fixtures: Mapping[str, Sequence[Any]],
    ) -> None:
        """Truncate the named targets, then insert their fixtures, on every driver.

        Within a driver, truncation finishes before the first insert and
        names are inserted one after another in the given order. A name
        with no entry in ``fixtures`` is truncated and left empty.

        Args:
            names: Target names (tables, collections, keys or topics).
            fixtures: Fixtures to insert, keyed by target name.
        """
        names = list(names)
        logger.info(f"Loading fixtures for {len(names)} target(s) into {len(self.drivers)} driver(s)")
        await self._gather(
            "load_fixtures",
            [self._load_driver(driver, names, fixtures) for driver in self.drivers],
        )

    async def close_drivers(self) -> None:
        """Close every driver concurrently."""
        await self._gather("close", [driver.close() for driver in self.drivers])

    async def _load_driver(
        self,
        driver: Driver[Any],
        names: list[str],
        fixtures: Mapping[str, Sequence[Any]],
    ) -> None:
        await driver.truncate(names)
        for name in names:
            await driver.insert_fixtures(name, fixtures.get(name, ()))
        logger.debug(f"{driver!r} loaded {len(names)} target(s)")

    async def _gather(self, operation: str, calls: list[Awaitable[None]]) -> None:
        results = await asyncio.gather(*calls, return_exceptions=True)
        errors = [
            (driver, result)
            for driver, result in zip(self.drivers, results)
            if isinstance(result, BaseException)
        ]
        if not errors:
            return

        for driver, error in errors[1:]:
            logger.error(f"{operation} failed on {driver!r}: {error!r}")
        driver, first = errors[0]
        logger.error(f"{operation} failed on {driver!r}: {first!r}")
        raise first

    async def __aenter__(self) -> DbFixtures:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close_drivers()
