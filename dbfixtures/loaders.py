"""Load fixture sets from JSON/YAML files.

A fixture file maps each target name to the list of payloads to insert:

    users:
      - {name: Ada, role: admin}
    greeting:
      - hello
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import yaml

from dbfixtures.errors import FixtureLoadError


class FixtureLoader:
    """Load fixture sets from JSON or YAML files."""

    def __init__(self, base_path: str | Path | None = None):
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self._cache: dict[str, dict[str, list[Any]]] = {}

    def load(self, filepath: str | Path, use_cache: bool = True) -> dict[str, list[Any]]:
        """Load a fixture set from file path."""
        path = self._resolve_path(filepath)

        cache_key = str(path)
        if use_cache and cache_key in self._cache:
            return copy.deepcopy(self._cache[cache_key])

        if not path.exists():
            raise FixtureLoadError(f"Fixture file not found: {path}")

        suffix = path.suffix.lower()
        if suffix == ".json":
            data = self._load_json(path)
        elif suffix in (".yaml", ".yml"):
            data = self._load_yaml(path)
        else:
            raise FixtureLoadError(f"Unsupported fixture format: {suffix}")

        fixtures = self._validate(path, data)
        if use_cache:
            self._cache[cache_key] = fixtures

        return copy.deepcopy(fixtures)

    def load_all(self, directory: str | Path, pattern: str = "*.yaml") -> dict[str, list[Any]]:
        """Merge every matching fixture file in a directory.

        Files are read in name order; a later file replaces the fixtures
        an earlier one gave for the same target.
        """
        dir_path = self._resolve_path(directory)
        if not dir_path.is_dir():
            raise FixtureLoadError(f"Directory not found: {dir_path}")

        merged: dict[str, list[Any]] = {}
        for filepath in sorted(dir_path.glob(pattern)):
            merged.update(self.load(filepath))
        return merged

    def clear_cache(self) -> None:
        self._cache.clear()

    def _resolve_path(self, filepath: str | Path) -> Path:
        path = Path(filepath)
        if path.is_absolute():
            return path
        return self.base_path / path

    def _load_json(self, path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise FixtureLoadError(f"Invalid JSON in {path}: {e}", cause=e) from e
        except UnicodeDecodeError as e:
            raise FixtureLoadError(f"Fixture file {path} is not valid UTF-8: {e}", cause=e) from e

    def _load_yaml(self, path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise FixtureLoadError(f"Invalid YAML in {path}: {e}", cause=e) from e
        except UnicodeDecodeError as e:
            raise FixtureLoadError(f"Fixture file {path} is not valid UTF-8: {e}", cause=e) from e

    @staticmethod
    def _validate(path: Path, data: Any) -> dict[str, list[Any]]:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise FixtureLoadError(
                f"Fixture file {path} must map target names to lists, got {type(data).__name__}"
            )
        fixtures: dict[str, list[Any]] = {}
        for name, payloads in data.items():
            if payloads is None:
                payloads = []
            if not isinstance(payloads, list):
                raise FixtureLoadError(
                    f"Fixtures for '{name}' in {path} must be a list, got {type(payloads).__name__}"
                )
            fixtures[str(name)] = payloads
        return fixtures


def load_fixture_file(filepath: str | Path, base_path: str | Path | None = None) -> dict[str, list[Any]]:
    """Convenience function to load a single fixture file."""
    return FixtureLoader(base_path).load(filepath)
