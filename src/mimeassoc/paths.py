# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build the ordered list of ``mimeapps.list`` candidates."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import overload

from .constants import APPLICATIONS_SUBDIR, DESKTOP_MIMEAPPS_SUFFIX, MIMEAPPS_LIST
from .environment import DesktopEnvironment


@dataclass(slots=True, frozen=True)
class LayerPath:
    """A candidate association file together with its precedence tags."""

    path: Path
    desktop_specific: bool = False
    user_level: bool = False

    @property
    def is_user_file(self) -> bool:
        """Return ``True`` for the user's generic, writable association file."""

        return self.user_level and not self.desktop_specific


class PrecedenceOrder(Sequence[LayerPath]):
    """Immutable sequence of layer candidates, highest precedence first."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Sequence[LayerPath]) -> None:
        """Freeze ``entries`` in the given order."""

        self._entries: tuple[LayerPath, ...] = tuple(entries)

    @overload
    def __getitem__(self, index: int) -> LayerPath: ...

    @overload
    def __getitem__(self, index: slice) -> PrecedenceOrder: ...

    def __getitem__(self, index: int | slice) -> LayerPath | PrecedenceOrder:
        if isinstance(index, slice):
            return PrecedenceOrder(self._entries[index])
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LayerPath]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PrecedenceOrder):
            return self._entries == other._entries
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"PrecedenceOrder({list(self._entries)!r})"

    @property
    def paths(self) -> tuple[Path, ...]:
        """Return the bare filesystem paths in precedence order."""

        return tuple(entry.path for entry in self._entries)

    @property
    def user_file(self) -> LayerPath | None:
        """Return the user's generic association file, if present in the order."""

        for entry in self._entries:
            if entry.is_user_file:
                return entry
        return None


def build_layer_paths(environment: DesktopEnvironment) -> PrecedenceOrder:
    """Return every ``mimeapps.list`` candidate for ``environment``.

    The order follows the XDG MIME applications lookup rules: user config home,
    system config directories, user data home ``applications`` and finally the
    system data ``applications`` directories. Within each directory the
    desktop-specific files precede the generic one, in desktop order.

    Args:
        environment: Desktop identifiers and base directories to expand.

    Returns:
        PrecedenceOrder: Candidate layers, highest precedence first. Files
        need not exist; absent ones contribute nothing when parsed.
    """

    entries: list[LayerPath] = []
    entries.extend(_directory_layers(environment.config_home, environment.desktops, user_level=True))
    for config_dir in environment.config_dirs:
        if config_dir == environment.config_home:
            continue
        entries.extend(_directory_layers(config_dir, environment.desktops))
    entries.extend(_directory_layers(environment.data_home / APPLICATIONS_SUBDIR, environment.desktops))
    for data_dir in environment.data_dirs:
        entries.extend(_directory_layers(data_dir / APPLICATIONS_SUBDIR, environment.desktops))
    return PrecedenceOrder(entries)


def user_mimeapps_path(environment: DesktopEnvironment) -> Path:
    """Return the user's writable ``mimeapps.list`` path."""

    return environment.config_home / MIMEAPPS_LIST


def _directory_layers(
    directory: Path,
    desktops: Sequence[str],
    *,
    user_level: bool = False,
) -> list[LayerPath]:
    """Return the desktop-specific and generic candidates inside ``directory``.

    Args:
        directory: Directory that may hold association files.
        desktops: Active desktop identifiers in precedence order.
        user_level: Whether ``directory`` is the user config home.

    Returns:
        list[LayerPath]: One candidate per desktop, then the generic file.
    """

    layers = [
        LayerPath(
            path=directory / f"{desktop}{DESKTOP_MIMEAPPS_SUFFIX}",
            desktop_specific=True,
            user_level=user_level,
        )
        for desktop in desktops
    ]
    layers.append(LayerPath(path=directory / MIMEAPPS_LIST, user_level=user_level))
    return layers


__all__ = [
    "LayerPath",
    "PrecedenceOrder",
    "build_layer_paths",
    "user_mimeapps_path",
]
