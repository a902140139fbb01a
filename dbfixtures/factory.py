"""Factory for creating drivers from configuration.

This module builds ready-to-use drivers, connections included, from a
backend name or from a FixturesConfig. It supports the built-in backends
and can be extended with custom ones.

Example:
    >>> from dbfixtures.factory import DriverFactory
    >>>
    >>> # Create from backend name
    >>> driver = DriverFactory.create(
    ...     "redis", url="redis://localhost:6379/0", key_types={"greeting": "string"}
    ... )
    >>>
    >>> # Create every configured driver
    >>> drivers = DriverFactory.from_config(load_config("dbfixtures.yaml"))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from dbfixtures.config import FixturesConfig
from dbfixtures.errors import ConfigurationError, UnknownBackendError
from dbfixtures.ports.driver import Driver

if TYPE_CHECKING:
    from dbfixtures.drivers.kafka_driver import KafkaDriver
    from dbfixtures.drivers.mongodb_driver import MongoDriver
    from dbfixtures.drivers.redis_driver import RedisDriver

logger = logging.getLogger(__name__)


class DriverFactory:
    """Factory to create drivers from configuration.

    Custom backends registered with register_backend() are called with the
    same keyword options passed to create().
    """

    _custom_backends: dict[str, Callable[..., Driver[Any]]] = {}
    _REQUIRED: dict[str, tuple[str, ...]] = {
        "kafka": ("bootstrap_servers",),
        "mongodb": ("url", "database"),
        "redis": ("url",),
    }

    @classmethod
    def create(cls, backend: str, **options: Any) -> Driver[Any]:
        """Create a driver for the specified backend.

        Args:
            backend: Backend type. Built-in options:
                - 'redis': Redis (options: url, key_types)
                - 'mongodb' or 'mongo': MongoDB (options: url, database)
                - 'kafka': Kafka (options: bootstrap_servers, group_id,
                  metadata_timeout, watermark_timeout, produce_timeout,
                  close_flush_timeout)
            **options: Backend-specific options.

        Returns:
            Driver owning freshly created client connections.

        Raises:
            UnknownBackendError: If the backend is not supported.
            ConfigurationError: If a required option is missing.
        """
        if not backend:
            raise ConfigurationError(message="Backend type cannot be empty")

        backend_lower = backend.lower().strip()

        if backend_lower == "redis":
            return cls._create_redis(**options)

        if backend_lower in ("mongodb", "mongo"):
            return cls._create_mongodb(**options)

        if backend_lower == "kafka":
            return cls._create_kafka(**options)

        if backend_lower in cls._custom_backends:
            return cls._custom_backends[backend_lower](**options)

        raise UnknownBackendError(
            message=(
                f"Unsupported backend '{backend}'. "
                f"Supported backends: {cls.get_supported_backends()}. "
                "To add custom backends, use register_backend()."
            )
        )

    @classmethod
    def from_config(cls, config: FixturesConfig) -> list[Driver[Any]]:
        """Create a driver for every backend with connection settings.

        Every backend's settings are checked before the first client is
        created, so a misconfigured backend leaves no open connections.

        Returns:
            Drivers in the order given by FixturesConfig.configured_backends().

        Raises:
            ConfigurationError: If a configured backend lacks a required setting.
        """
        backends = [
            (backend, cls._options(config, backend)) for backend in config.configured_backends()
        ]
        for backend, options in backends:
            cls._require(backend, **{name: options.get(name) for name in cls._REQUIRED[backend]})

        drivers = [cls.create(backend, **options) for backend, options in backends]
        logger.info(f"Created {len(drivers)} driver(s): {', '.join(b for b, _ in backends)}")
        return drivers

    @staticmethod
    def _options(config: FixturesConfig, backend: str) -> dict[str, Any]:
        if backend == "kafka":
            return {
                "bootstrap_servers": config.kafka_bootstrap_servers,
                "group_id": config.kafka_group_id,
                "metadata_timeout": config.kafka_metadata_timeout,
                "watermark_timeout": config.kafka_watermark_timeout,
                "produce_timeout": config.kafka_produce_timeout,
                "close_flush_timeout": config.kafka_flush_timeout,
            }
        if backend == "mongodb":
            return {"url": config.mongodb_url, "database": config.mongodb_database}
        return {"url": config.redis_url, "key_types": config.redis_key_types}

    @classmethod
    def register_backend(cls, name: str, builder: Callable[..., Driver[Any]]) -> None:
        """Register a custom backend builder.

        Args:
            name: Backend name (case-insensitive).
            builder: Callable accepting keyword options and returning a Driver.
        """
        if not name:
            raise ConfigurationError(message="Backend name cannot be empty")

        if not callable(builder):
            raise ConfigurationError(message="Backend builder must be callable")

        cls._custom_backends[name.lower()] = builder
        logger.info(f"Registered custom driver backend: {name}")

    @classmethod
    def unregister_backend(cls, name: str) -> bool:
        """Unregister a custom backend.

        Returns:
            True if backend was removed, False if it didn't exist.
        """
        return cls._custom_backends.pop(name.lower(), None) is not None

    @classmethod
    def get_supported_backends(cls) -> list[str]:
        built_in = ["kafka", "mongodb", "redis"]
        return built_in + list(cls._custom_backends.keys())

    @staticmethod
    def _require(backend: str, **values: Any) -> None:
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                message=f"Backend '{backend}' requires: {', '.join(missing)}",
            )

    @classmethod
    def _create_redis(
        cls,
        url: str | None = None,
        key_types: Mapping[str, str] | None = None,
    ) -> RedisDriver:
        """Create a Redis driver."""
        from redis.asyncio import Redis

        from dbfixtures.drivers.redis_driver import RedisDriver

        cls._require("redis", url=url)
        return RedisDriver(Redis.from_url(url), key_types or {})

    @classmethod
    def _create_mongodb(
        cls,
        url: str | None = None,
        database: str | None = None,
    ) -> MongoDriver:
        """Create a MongoDB driver."""
        from pymongo import AsyncMongoClient

        from dbfixtures.drivers.mongodb_driver import MongoDriver

        cls._require("mongodb", url=url, database=database)
        return MongoDriver(AsyncMongoClient(url), database)

    @classmethod
    def _create_kafka(
        cls,
        bootstrap_servers: str | None = None,
        group_id: str = "dbfixtures",
        **timeouts: float,
    ) -> KafkaDriver:
        """Create a Kafka driver with its admin, consumer and producer clients."""
        from confluent_kafka import Consumer, Producer
        from confluent_kafka.admin import AdminClient

        from dbfixtures.drivers.kafka_driver import KafkaDriver

        cls._require("kafka", bootstrap_servers=bootstrap_servers)
        conf = {"bootstrap.servers": bootstrap_servers}
        return KafkaDriver(
            AdminClient(conf),
            Consumer({**conf, "group.id": group_id, "enable.auto.commit": False}),
            Producer(conf),
            **timeouts,
        )
