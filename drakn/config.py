"""Application configuration: defaults, location and loading from TOML."""

from __future__ import annotations

import logging
import os
import sys
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

BINARY_NAME = "drakn"
CONFIG_FILE_NAME = "config.toml"
DEFAULT_PLAYER_VOLUME = 0.5


class ConfigError(ValueError):
    """Raised when configuration data is missing or malformed."""


def _require_bool(section: Mapping[str, Any], key: str, name: str) -> bool:
    if key not in section:
        raise ConfigError(f"missing field `{key}` in [{name}]")
    value = section[key]
    if not isinstance(value, bool):
        raise ConfigError(f"field `{key}` in [{name}] must be a boolean")
    return value


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any] | None:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigError(f"[{name}] must be a table")
    return value


@dataclass
class GeneralConfig:
    debug: bool = False
    vsync: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GeneralConfig:
        return cls(
            debug=_require_bool(data, "debug", "general"),
            vsync=_require_bool(data, "vsync", "general"),
        )


@dataclass
class VolumeConfig:
    default: float = DEFAULT_PLAYER_VOLUME

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> VolumeConfig:
        if "default" not in data:
            raise ConfigError("missing field `default` in [volume]")
        value = data["default"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError("field `default` in [volume] must be a number")
        return cls(default=float(value))


@dataclass
class CoreConfig:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    volume: VolumeConfig = field(default_factory=VolumeConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CoreConfig:
        """Build a config from parsed data; absent sections take their defaults."""
        if not isinstance(data, Mapping):
            raise ConfigError("configuration root must be a table")
        general = _section(data, "general")
        volume = _section(data, "volume")
        return cls(
            general=GeneralConfig.from_mapping(general) if general is not None else GeneralConfig(),
            volume=VolumeConfig.from_mapping(volume) if volume is not None else VolumeConfig(),
        )


def _env_value(environ: Mapping[str, str], name: str) -> str:
    try:
        return environ[name]
    except KeyError:
        raise ConfigError(f"{name} environment variable not found") from None


def get_config_path(
    environ: Mapping[str, str] | None = None, platform: str | None = None
) -> Path:
    """Return the path of the configuration file for this platform."""
    env = os.environ if environ is None else environ
    platform = sys.platform if platform is None else platform

    if platform.startswith("linux") or platform in ("darwin", "macos"):
        base = Path(_env_value(env, "HOME")) / ".config"
    elif platform in ("win32", "windows"):
        base = Path(_env_value(env, "APPDATA"))
    else:
        raise NotImplementedError(f"unsupported platform: {platform}")

    return base / BINARY_NAME / CONFIG_FILE_NAME


def load_config(path: str | os.PathLike[str] | None = None) -> CoreConfig:
    """Load the configuration, falling back to defaults if it cannot be read or understood."""
    if path is None:
        path = get_config_path()

    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as err:
        log.warning("Failed to build config: %s. Falling back to default config.", err)
        return CoreConfig()

    try:
        return CoreConfig.from_mapping(data)
    except ConfigError as err:
        log.warning("Failed to deserialize config: %s. Falling back to default config.", err)
        return CoreConfig()