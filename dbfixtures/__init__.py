"""dbfixtures - seed and reset test data across data stores.

dbfixtures truncates and re-seeds named targets in Kafka topics, MongoDB
collections and Redis keys before a test run, through one coordinator that
drives every configured backend concurrently.

Example:
    >>> from redis.asyncio import Redis
    >>> from pymongo import AsyncMongoClient
    >>> from dbfixtures import DbFixtures, KeyType, MongoDriver, RedisDriver
    >>>
    >>> fixtures = DbFixtures([
    ...     MongoDriver(AsyncMongoClient("mongodb://localhost:27017"), "test"),
    ...     RedisDriver(Redis.from_url("redis://localhost:6379"), {"users": KeyType.SET}),
    ... ])
    >>> await fixtures.load_fixtures(["users"], {"users": [...]})
    >>> await fixtures.close_drivers()

Core:
    DbFixtures: Coordinator loading fixtures into every driver
    Driver: Protocol every driver implements
    BaseDriver: Base class of the built-in drivers

Drivers:
    RedisDriver, KeyType: Redis keys of a declared type
    MongoDriver: MongoDB collections
    KafkaDriver, KafkaMessage: Kafka topics

Error Handling:
    DbFixturesError: Base exception for all dbfixtures errors
    ConfigurationError: Misconfigured driver or backend
    BackendError: Failure reported by a backend reply
"""

from dbfixtures.config import FixturesConfig, load_config
from dbfixtures.coordinator import DbFixtures
from dbfixtures.drivers import KafkaDriver, KafkaMessage, KeyType, MongoDriver, RedisDriver
from dbfixtures.errors import (
    BackendError,
    ConfigurationError,
    DbFixturesError,
    FixtureLoadError,
    UndeclaredKeyError,
)
from dbfixtures.factory import DriverFactory
from dbfixtures.loaders import FixtureLoader, load_fixture_file
from dbfixtures.ports import BaseDriver, Driver

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "BaseDriver",
    "ConfigurationError",
    "DbFixtures",
    "DbFixturesError",
    "Driver",
    "DriverFactory",
    "FixtureLoadError",
    "FixtureLoader",
    "FixturesConfig",
    "KafkaDriver",
    "KafkaMessage",
    "KeyType",
    "MongoDriver",
    "RedisDriver",
    "UndeclaredKeyError",
    "load_config",
    "load_fixture_file",
]
