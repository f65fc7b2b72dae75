# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve active desktop identifiers and XDG base directories."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Final

import xdg.BaseDirectory

from .constants import APPLICATIONS_SUBDIR, CURRENT_DESKTOP_ENV

_DEFAULT_CONFIG_DIRS: Final[str] = "/etc/xdg"
_DEFAULT_DATA_DIRS: Final[str] = "/usr/local/share:/usr/share"


@dataclass(slots=True, frozen=True)
class DesktopEnvironment:
    """Snapshot of the desktop identifiers and standard directories in effect.

    Attributes:
        desktops: Lower-cased desktop identifiers in ``XDG_CURRENT_DESKTOP`` order.
        config_home: User configuration directory (``XDG_CONFIG_HOME``).
        config_dirs: System configuration directories, excluding ``config_home``.
        data_home: User data directory (``XDG_DATA_HOME``).
        data_dirs: System data directories, excluding ``data_home``.
        extra_application_dirs: Additional descriptor directories scanned after
            the standard ones.
    """

    desktops: tuple[str, ...]
    config_home: Path
    config_dirs: tuple[Path, ...]
    data_home: Path
    data_dirs: tuple[Path, ...]
    extra_application_dirs: tuple[Path, ...] = field(default_factory=tuple)

    @property
    def application_dirs(self) -> tuple[Path, ...]:
        """Return descriptor directories ordered from highest precedence.

        Returns:
            tuple[Path, ...]: ``applications`` directories beneath the data home
            and every system data directory, followed by configured extras.
        """

        dirs = [self.data_home / APPLICATIONS_SUBDIR]
        dirs.extend(data_dir / APPLICATIONS_SUBDIR for data_dir in self.data_dirs)
        dirs.extend(self.extra_application_dirs)
        return tuple(dirs)

    def with_desktops(self, desktops: Sequence[str]) -> DesktopEnvironment:
        """Return a copy using ``desktops`` instead of the detected identifiers."""

        return replace(self, desktops=_clean_desktops(desktops))

    def with_extra_application_dirs(self, dirs: Iterable[Path]) -> DesktopEnvironment:
        """Return a copy that also scans ``dirs`` for descriptors."""

        return replace(self, extra_application_dirs=tuple(Path(entry) for entry in dirs))


def current_desktops(env: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Return the active desktop identifiers.

    Args:
        env: Environment mapping to inspect; defaults to ``os.environ``.

    Returns:
        tuple[str, ...]: Lower-cased identifiers with empty segments dropped.
    """

    source = os.environ if env is None else env
    raw = source.get(CURRENT_DESKTOP_ENV, "")
    return _clean_desktops(raw.split(":"))


def resolve_environment(
    env: Mapping[str, str] | None = None,
    *,
    desktops: Sequence[str] | None = None,
) -> DesktopEnvironment:
    """Build a :class:`DesktopEnvironment` for ``env``.

    When ``env`` is omitted the process environment is used and the base
    directories come from :mod:`xdg.BaseDirectory`. An explicit mapping is
    resolved with the XDG Base Directory defaults instead, which keeps the
    result independent from the state captured when ``xdg`` was imported.

    Args:
        env: Optional environment mapping to resolve.
        desktops: Optional desktop identifiers overriding ``XDG_CURRENT_DESKTOP``.

    Returns:
        DesktopEnvironment: Resolved desktop identifiers and directories.
    """

    if env is None:
        config_home = Path(xdg.BaseDirectory.xdg_config_home)
        data_home = Path(xdg.BaseDirectory.xdg_data_home)
        config_dirs = _absolute_dirs(xdg.BaseDirectory.xdg_config_dirs)
        data_dirs = _absolute_dirs(xdg.BaseDirectory.xdg_data_dirs)
    else:
        home = Path(env.get("HOME") or Path.home())
        config_home = _home_dir(env, "XDG_CONFIG_HOME", home / ".config")
        data_home = _home_dir(env, "XDG_DATA_HOME", home / ".local" / "share")
        config_dirs = _absolute_dirs((env.get("XDG_CONFIG_DIRS") or _DEFAULT_CONFIG_DIRS).split(":"))
        data_dirs = _absolute_dirs((env.get("XDG_DATA_DIRS") or _DEFAULT_DATA_DIRS).split(":"))

    identifiers = _clean_desktops(desktops) if desktops else current_desktops(env)
    return DesktopEnvironment(
        desktops=identifiers,
        config_home=config_home,
        config_dirs=tuple(path for path in config_dirs if path != config_home),
        data_home=data_home,
        data_dirs=tuple(path for path in data_dirs if path != data_home),
    )


def _home_dir(env: Mapping[str, str], key: str, fallback: Path) -> Path:
    """Return the absolute directory stored under ``key`` or ``fallback``.

    Args:
        env: Environment mapping to inspect.
        key: Variable naming the directory.
        fallback: Directory used when the variable is unset or relative.

    Returns:
        Path: Resolved directory.
    """

    value = env.get(key, "")
    if value and os.path.isabs(value):
        return Path(value)
    return fallback


def _absolute_dirs(entries: Iterable[str]) -> list[Path]:
    """Return the absolute entries of a colon-split directory list.

    Args:
        entries: Directory strings in precedence order.

    Returns:
        list[Path]: Absolute directories, order preserved.
    """

    # Relative entries are invalid per the base-directory rules and are ignored.
    return [Path(entry) for entry in entries if entry and os.path.isabs(entry)]


def _clean_desktops(values: Iterable[str]) -> tuple[str, ...]:
    """Return lower-cased, non-empty desktop identifiers from ``values``."""

    return tuple(value.strip().lower() for value in values if value.strip())


__all__ = [
    "DesktopEnvironment",
    "current_desktops",
    "resolve_environment",
]
