"""
Layered configuration for testbridge.

Settings come from three layers, later layers winning key by key:

1. a TOML or YAML file (``.testbridge.toml`` and friends, or a
   ``[tool.testbridge]`` table inside ``pyproject.toml``),
2. ``TESTBRIDGE_`` environment variables, where ``__`` separates sections
   (``TESTBRIDGE_FILE_GEN__CONFIRMATION=never``),
3. explicit overrides passed by the command line.
"""

import logging
import os
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..domain.models import TestBridgeError
from .models import TestBridgeConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "TESTBRIDGE_"
SECTION_SEPARATOR = "__"

# Searched in order; TOML wins over YAML when both exist.
CONFIG_FILE_NAMES = (
    ".testbridge.toml",
    "testbridge.toml",
    ".testbridge.yml",
    ".testbridge.yaml",
    "testbridge.yml",
    "testbridge.yaml",
)

_TRUTHY = frozenset({"true", "yes", "on"})
_FALSY = frozenset({"false", "no", "off"})


class ConfigurationError(TestBridgeError):
    """Raised when configuration cannot be read or does not validate."""


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as stream:
            document = tomllib.load(stream)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

    section = document.get("tool", {}).get("testbridge")
    return section if isinstance(section, dict) else document


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as stream:
            document = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return document


_READERS: dict[str, Callable[[Path], dict[str, Any]]] = {
    ".toml": _read_toml,
    ".yml": _read_yaml,
    ".yaml": _read_yaml,
}


def coerce_env_value(raw: str) -> Any:
    """Turn an environment string into a bool, number, list or plain string."""
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False

    number_type = float if "." in raw else int
    try:
        return number_type(raw)
    except ValueError:
        pass

    if "," in raw:
        return [part.strip() for part in raw.split(",")]
    return raw


def environment_overrides(
    environ: Mapping[str, str], prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """Collect prefixed variables into a nested settings mapping."""
    settings: dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(prefix):
            continue

        *sections, field = name[len(prefix) :].lower().split(SECTION_SEPARATOR)
        target = settings
        for section in sections:
            target = target.setdefault(section, {})
        target[field] = coerce_env_value(raw)
    return settings


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Merge mappings left to right, recursing into nested sections."""
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, Mapping):
                merged[key] = merge_layers(current, value)
            else:
                merged[key] = value
    return merged


class ConfigLoader:
    """Resolves and caches the effective configuration for one working directory."""

    def __init__(
        self,
        config_file: str | Path | None = None,
        search_dir: str | Path | None = None,
    ):
        """
        Args:
            config_file: Explicit configuration file. It must exist when given.
            search_dir: Directory searched for the default file names when no
                explicit file is given. Defaults to the working directory.
        """
        self.config_file = Path(config_file) if config_file else None
        self.search_dir = Path(search_dir) if search_dir else None
        self._cached: TestBridgeConfig | None = None

    def locate_config_file(self) -> Path | None:
        """Return the file the file layer is read from, if any."""
        if self.config_file is not None:
            if not self.config_file.exists():
                raise ConfigurationError(f"Configuration file not found: {self.config_file}")
            return self.config_file

        base = self.search_dir or Path.cwd()
        return next(
            (base / name for name in CONFIG_FILE_NAMES if (base / name).exists()),
            None,
        )

    def read_file_layer(self) -> dict[str, Any]:
        path = self.locate_config_file()
        if path is None:
            logger.debug("No configuration file found, using defaults")
            return {}

        reader = _READERS.get(path.suffix.lower())
        if reader is None:
            logger.warning("Ignoring configuration file with unknown type: %s", path)
            return {}

        try:
            settings = reader(path)
        except OSError as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e

        if not settings:
            logger.warning("Configuration file %s is empty", path)
        else:
            logger.debug("Loaded configuration from %s", path)
        return settings

    def load_config(
        self,
        env_overrides: dict[str, Any] | None = None,
        cli_overrides: dict[str, Any] | None = None,
        reload: bool = False,
    ) -> TestBridgeConfig:
        """
        Build the validated configuration.

        ``env_overrides`` replaces the environment layer when given, which
        keeps tests independent of the calling process. The result is cached
        until ``reload`` is requested.

        Raises:
            ConfigurationError: If a file cannot be read or a value is invalid.
        """
        if self._cached is not None and not reload:
            return self._cached

        env_layer = (
            env_overrides if env_overrides is not None else environment_overrides(os.environ)
        )
        settings = merge_layers(self.read_file_layer(), env_layer, cli_overrides or {})

        try:
            self._cached = TestBridgeConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return self._cached


def load_config(
    config_file: str | Path | None = None,
    env_overrides: dict[str, Any] | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> TestBridgeConfig:
    """Load configuration once without keeping a loader around."""
    return ConfigLoader(config_file).load_config(env_overrides, cli_overrides)
