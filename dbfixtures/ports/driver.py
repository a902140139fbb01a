"""Driver contract shared by every backend.

A driver owns the connection(s) to one backend and knows how to wipe and
seed named targets there. The coordinator only ever talks to drivers
through this contract, never to a concrete backend type.

Example:
    >>> class ListDriver(BaseDriver[str]):
    ...     driver_name = "list"
    ...
    ...     def __init__(self) -> None:
    ...         self.data: dict[str, list[str]] = {}
    ...
    ...     async def truncate(self, names):
    ...         for name in names:
    ...             self.data.pop(name, None)
    ...
    ...     async def insert_fixtures(self, name, fixtures):
    ...         if fixtures:
    ...             self.data.setdefault(name, []).extend(fixtures)
    ...
    ...     async def close(self):
    ...         self.data.clear()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from types import TracebackType
from typing import Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)
D = TypeVar("D", bound="BaseDriver")


@runtime_checkable
class Driver(Protocol[T_contra]):
    """Protocol defining the interface for fixture drivers.

    Any object implementing these coroutines can be registered with the
    coordinator, allowing custom backends beyond the built-in ones.
    """

    async def truncate(self, names: Sequence[str]) -> None:
        """Wipe all existing data for each of the given names.

        Must succeed when a name holds no data. Names already wiped are
        not restored if a later name fails.
        """
        ...

    async def insert_fixtures(self, name: str, fixtures: Sequence[T_contra]) -> None:
        """Insert fixtures under the given name.

        Issues no backend call when fixtures is empty. Not transactional:
        a failure can leave some fixtures inserted.
        """
        ...

    async def close(self) -> None:
        """Release every resource owned by the driver."""
        ...


class BaseDriver(ABC, Generic[T]):
    """Abstract base class for the built-in drivers.

    The type parameter is the fixture payload the driver accepts. The base
    class holds no connection state; it only adds a name for logging and
    async context manager support.

    Example:
        >>> async with RedisDriver(client, {"greeting": KeyType.STRING}) as driver:
        ...     await driver.truncate(["greeting"])
        ...     await driver.insert_fixtures("greeting", ["hello"])
    """

    driver_name: str = "driver"

    @abstractmethod
    async def truncate(self, names: Sequence[str]) -> None:
        pass

    @abstractmethod
    async def insert_fixtures(self, name: str, fixtures: Sequence[T]) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    async def __aenter__(self: D) -> D:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.driver_name}>"
