"""Configuration settings and loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_KEY_TYPES = {"string", "scalar", "list", "set", "hash", "stream"}


class FixturesConfig(BaseSettings):
    """Connection settings for the backends dbfixtures seeds.

    A backend is enabled by setting its URL (or bootstrap servers).
    """

    model_config = SettingsConfigDict(
        env_prefix="DBFIXTURES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    redis_url: str | None = None
    redis_key_types: dict[str, str] = Field(default_factory=dict)

    mongodb_url: str | None = None
    mongodb_database: str | None = None

    kafka_bootstrap_servers: str | None = None
    kafka_group_id: str = "dbfixtures"
    kafka_metadata_timeout: float = 10.0
    kafka_watermark_timeout: float = 10.0
    kafka_produce_timeout: float = 10.0
    kafka_flush_timeout: float = 5.0

    verbose: bool = False

    @field_validator("redis_url", mode="before")
    @classmethod
    def validate_redis_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("redis_url must be a redis:// connection string")
        return v

    @field_validator("mongodb_url", mode="before")
    @classmethod
    def validate_mongodb_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("mongodb_url must be a mongodb:// connection string")
        return v

    @field_validator("redis_key_types", mode="before")
    @classmethod
    def validate_redis_key_types(cls, v: dict[str, str] | None) -> dict[str, str]:
        if v is None:
            return {}
        invalid = {key: key_type for key, key_type in v.items() if str(key_type).lower() not in VALID_KEY_TYPES}
        if invalid:
            raise ValueError(f"Invalid Redis key types: {invalid}. Valid: {sorted(VALID_KEY_TYPES)}")
        return {key: str(key_type).lower() for key, key_type in v.items()}

    def configured_backends(self) -> list[str]:
        """Names of the backends with connection settings, in load order."""
        backends = []
        if self.kafka_bootstrap_servers:
            backends.append("kafka")
        if self.mongodb_url:
            backends.append("mongodb")
        if self.redis_url:
            backends.append("redis")
        return backends


def load_config(config_path: str | Path | None = None) -> FixturesConfig:
    """Load configuration from file and environment.

    Priority: env vars > config file > defaults. A field set in the
    environment replaces the file's value outright, mappings included.
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

    env_overrides = _get_env_overrides()
    config_data.update(env_overrides)

    return FixturesConfig(**config_data)


def _get_env_overrides() -> dict[str, Any]:
    """Get the fields set through DBFIXTURES_* variables or the .env file."""
    env_config = FixturesConfig()
    return env_config.model_dump(include=env_config.model_fields_set)
