"""Configuration management for dbfixtures."""

from dbfixtures.config.settings import FixturesConfig, load_config

__all__ = ["FixturesConfig", "load_config"]
