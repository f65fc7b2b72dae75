# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tool settings loaded from layered sources."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import CONFIG_DIRNAME, CONFIG_FILENAME
from .errors import ConfigError

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class Settings(BaseModel):
    """Behaviour knobs for the engine and the command-line interface."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    verbose: bool = False
    emoji: bool = True
    color: bool = True
    desktops: list[str] = Field(default_factory=list)
    extra_application_dirs: list[Path] = Field(default_factory=list)


class SettingsSource:
    """Base class for a single layer of settings."""

    name: str = "source"

    def load(self) -> Mapping[str, Any]:
        """Return the raw settings fragment contributed by this source."""

        raise NotImplementedError


class DefaultSettingsSource(SettingsSource):
    """Return the built-in defaults as a settings fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        """Return every field of :class:`Settings` at its default value."""

        return Settings().model_dump()


class TomlSettingsSource(SettingsSource):
    """Load settings from a TOML document, expanding ``$VAR`` references."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        """Create a source reading ``path``.

        Args:
            path: TOML settings file; a missing file contributes nothing.
            env: Environment used for ``$VAR`` expansion; defaults to ``os.environ``.
        """

        self._path = path
        self.name = str(path)
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        """Return the decoded file with environment references expanded.

        Returns:
            Mapping[str, Any]: Settings fragment; empty when the file is absent.

        Raises:
            ConfigError: If the file cannot be read or is not valid TOML.
        """

        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except FileNotFoundError:
            return {}
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {self._path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"cannot read {self._path}: {exc}") from exc
        return _expand_env(data, self._env)


class MappingSettingsSource(SettingsSource):
    """Wrap explicit overrides such as command-line flags."""

    def __init__(self, values: Mapping[str, Any], *, name: str = "overrides") -> None:
        """Create a source from ``values``, ignoring ``None`` entries.

        Args:
            values: Explicit settings values.
            name: Label used in validation error messages.
        """

        self._values = {key: value for key, value in values.items() if value is not None}
        self.name = name

    def load(self) -> Mapping[str, Any]:
        """Return a copy of the explicit values."""

        return dict(self._values)


def default_settings_path(env: Mapping[str, str] | None = None) -> Path:
    """Return ``$XDG_CONFIG_HOME/mimeassoc/config.toml`` for ``env``."""

    source = os.environ if env is None else env
    config_home = source.get("XDG_CONFIG_HOME", "")
    if not config_home or not os.path.isabs(config_home):
        config_home = str(Path(source.get("HOME") or Path.home()) / ".config")
    return Path(config_home) / CONFIG_DIRNAME / CONFIG_FILENAME


def merge_settings(sources: Sequence[SettingsSource]) -> Settings:
    """Apply ``sources`` in order; later sources override earlier ones.

    Args:
        sources: Settings sources ordered from lowest to highest precedence.

    Returns:
        Settings: Validated settings.

    Raises:
        ConfigError: If the merged values fail validation.
    """

    merged: dict[str, Any] = {}
    for source in sources:
        merged.update(source.load())
    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        names = ", ".join(source.name for source in sources)
        raise ConfigError(f"invalid settings from {names}: {exc}") from exc


def load_settings(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from defaults, the user's TOML file, and ``overrides``.

    Args:
        path: Optional settings file; defaults to :func:`default_settings_path`.
        overrides: Explicit values taking precedence over the file. ``None``
            values are ignored so unset CLI flags do not mask the file.
        env: Environment used to locate the file and expand variables.

    Returns:
        Settings: Validated settings.
    """

    settings_path = path if path is not None else default_settings_path(env)
    sources: list[SettingsSource] = [
        DefaultSettingsSource(),
        TomlSettingsSource(settings_path, env=env),
    ]
    if overrides:
        sources.append(MappingSettingsSource(overrides))
    return merge_settings(sources)


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Return ``data`` with ``$VAR`` references expanded recursively.

    Args:
        data: Raw mapping decoded from the settings file.
        env: Environment supplying variable values.

    Returns:
        dict[str, Any]: Copy of ``data`` with string values expanded.
    """

    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    """Expand ``value`` recursively through mappings and lists.

    Args:
        value: Settings value of any TOML type.
        env: Environment supplying variable values.

    Returns:
        Any: Expanded value; other types are returned unchanged.
    """

    if isinstance(value, str):
        return _expand_env_string(value, env)
    if isinstance(value, Mapping):
        return {k: _expand_env_value(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(v, env) for v in value]
    return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    """Replace ``$VAR`` and ``${VAR}`` in ``value``.

    Args:
        value: String that may reference environment variables.
        env: Environment supplying variable values.

    Returns:
        str: Expanded string; unknown variables are left as written.
    """

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key is None:
            return match.group(0)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


__all__ = [
    "DefaultSettingsSource",
    "MappingSettingsSource",
    "Settings",
    "SettingsSource",
    "TomlSettingsSource",
    "default_settings_path",
    "load_settings",
    "merge_settings",
]
