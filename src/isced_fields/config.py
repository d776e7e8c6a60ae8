"""
Configuration file system for isced-fields.

Supports loading configuration from multiple locations, merged with precedence:
1. /etc/isced-fields/config.yaml or config.json (lowest priority)
2. ~/.config/isced-fields/config.yaml or config.json
3. ./isced-fields.yaml or ./isced-fields.json (highest priority)

All found config files are merged, with later files overriding earlier ones.
YAML is checked before JSON at each location. Environment variables
(ISCED_FIELDS_*) have the highest priority.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

# Config filenames for current working directory (project-local config)
CONFIG_FILENAMES = ["isced-fields.yaml", "isced-fields.json"]
# Config filenames for system/user config directories
CONFIG_USER_FILENAMES = ["config.yaml", "config.json"]

ENV_PREFIX = "ISCED_FIELDS_"

DEFAULTS: dict[str, Any] = {
    "scheme_uri": "http://data.europa.eu/snb/isced-f/25831c2",
    "harvest": {
        "min_delay": 0.005,  # seconds between two fetches
        "timeout": 30.0,
    },
    "output": {
        "table": "data/isced.json",
        "translations_dir": "translations",
        "domain": "isced",
    },
    # Catalogs copied verbatim to regional dialect codes
    "locale_copies": {
        "en": ["en_GB"],
        "no": ["nb"],
        "pt": ["pt_PT"],
    },
}


def _get_config_dirs() -> list[Path]:
    """Get list of config directories to search, in merge order (lowest priority first)."""
    return [
        Path("/etc/isced-fields"),
        Path.home() / ".config" / "isced-fields",
        Path.cwd(),
    ]


def find_config_files() -> list[Path]:
    """Find all existing config files, in merge order (lowest priority first).

    At each location only the first found file (YAML before JSON) is included.
    """
    found_files = []

    for dir_path in _get_config_dirs():
        filenames = CONFIG_FILENAMES if dir_path == Path.cwd() else CONFIG_USER_FILENAMES
        for filename in filenames:
            path = dir_path / filename
            if path.exists():
                found_files.append(path)
                break
    return found_files


def find_config_file() -> Path | None:
    """Find the highest-priority existing config file, or None."""
    files = find_config_files()
    return files[-1] if files else None


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base dict, modifying base in place."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _deep_copy(d: dict) -> dict:
    """Create a deep copy of a nested dict structure."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy(value)
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    return result


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load a single config file and return its contents.

    Raises:
        ImportError: If YAML config is found but PyYAML is not installed.
        json.JSONDecodeError: If JSON config file is malformed.
    """
    if path.suffix in (".yaml", ".yml"):
        try:
            import yaml
        except ImportError as e:
            raise ImportError(
                "PyYAML required for .yaml config files. Install with: pip install isced-fields[yaml]"
            ) from e
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    else:
        with open(path, encoding="utf-8") as f:
            return json.load(f)


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load config from file(s), merging with defaults.

    If path is provided, only that file is loaded (plus defaults and env
    vars). Otherwise all standard locations are merged, then
    ISCED_FIELDS_* environment variables are applied on top.
    """
    config = _deep_copy(DEFAULTS)

    if path is not None:
        if path.exists():
            _deep_merge(config, _load_config_file(path))
    else:
        for config_path in find_config_files():
            _deep_merge(config, _load_config_file(config_path))

    _apply_env_overrides(config)

    return config


def _apply_env_overrides(config: dict[str, Any]) -> None:
    """Apply environment variable overrides to config.

    Nested keys use double underscore, e.g. ISCED_FIELDS_HARVEST__TIMEOUT=10
    """
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            config_key = key[len(ENV_PREFIX):].lower()
            _set_nested_value(config, config_key, value)


def _set_nested_value(config: dict, key: str, value: str) -> None:
    """Set a nested config value using double-underscore notation."""
    parts = key.split("__")
    target = config
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]

    target[parts[-1]] = _convert_value(value)


def _convert_value(value: str) -> Any:
    """Convert string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false",):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def get_config_value(config: dict[str, Any], key: str, default: Any = None) -> Any:
    """Get a config value using dot notation, e.g. "harvest.timeout"."""
    target = config
    for part in key.split("."):
        if isinstance(target, dict) and part in target:
            target = target[part]
        else:
            return default
    return target


class Config:
    """Configuration holder with convenient access methods."""

    def __init__(self, path: Path | None = None):
        """Initialize config, loading from file(s).

        Args:
            path: Optional explicit path to config file. If provided, only
                  this file is loaded. Otherwise, all standard locations
                  are searched and merged.
        """
        if path is not None:
            self._paths = [path] if path.exists() else []
        else:
            self._paths = find_config_files()
        self._data = load_config(path)

    @property
    def path(self) -> Path | None:
        """Return the highest-priority loaded config file, or None."""
        return self._paths[-1] if self._paths else None

    @property
    def paths(self) -> list[Path]:
        """Return all loaded config file paths, in merge order."""
        return self._paths.copy()

    @property
    def data(self) -> dict[str, Any]:
        """Return the raw config dictionary."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value using dot notation."""
        return get_config_value(self._data, key, default)

    @property
    def scheme_uri(self) -> str:
        return self.get("scheme_uri", DEFAULTS["scheme_uri"])

    @property
    def min_delay(self) -> float:
        """Minimum seconds between two consecutive fetches."""
        return float(self.get("harvest.min_delay", 0.005))

    @property
    def timeout(self) -> float:
        """Per-request timeout in seconds."""
        return float(self.get("harvest.timeout", 30.0))

    @property
    def table_path(self) -> Path:
        return Path(self.get("output.table", "data/isced.json"))

    @property
    def translations_dir(self) -> Path:
        return Path(self.get("output.translations_dir", "translations"))

    @property
    def catalog_domain(self) -> str:
        return self.get("output.domain", "isced")

    @property
    def locale_copies(self) -> dict[str, list[str]]:
        """Return dialect copies, source language -> target codes.

        Example config:
            locale_copies:
              en: [en_GB]
              pt: [pt_PT]
              no: nb, nn

        A single string target, as set from ISCED_FIELDS_LOCALE_COPIES__PT=pt_PT,
        is split on commas.
        """
        copies = self.get("locale_copies", DEFAULTS["locale_copies"])
        result = {}
        for source, targets in copies.items():
            if isinstance(targets, str):
                targets = [t.strip() for t in targets.split(",") if t.strip()]
            # YAML parses a bare 'no' key as boolean False
            result["no" if source is False else str(source)] = list(targets)
        return result
