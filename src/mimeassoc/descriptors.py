# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Discover application descriptors and index the types they declare."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .constants import DESCRIPTOR_SUFFIX, DESKTOP_ENTRY_HEADER, OCTET_STREAM
from .interfaces import TypeDatabase
from .mimedb import is_scheme_handler, normalize_type, type_group

LOGGER = logging.getLogger(__name__)

NAME_KEY: Final[str] = "Name"
ICON_KEY: Final[str] = "Icon"
MIME_TYPE_KEY: Final[str] = "MimeType"


@dataclass(slots=True, frozen=True)
class DescriptorEntry:
    """Raw values read from the primary section of one descriptor file."""

    name: str = ""
    icon: str = ""
    mime_types: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class AppDescriptor:
    """One installed application as described by its descriptor file.

    Attributes:
        name: Display name, or the file's base name when none is declared.
        descriptor_id: Descriptor filename used as the durable key.
        icon: Icon name declared by the descriptor (may be empty).
        types: Canonical content types the descriptor declares natively.
        path: Location the descriptor was read from.
    """

    name: str
    descriptor_id: str
    icon: str
    types: tuple[str, ...]
    path: Path


@dataclass(slots=True, frozen=True)
class ApplicationCatalog:
    """Immutable result of one descriptor scan.

    Attributes:
        apps: Display name mapped to ``type -> descriptor id``; the first
            (highest precedence) descriptor declaring a type for a name wins.
        icons: Display name mapped to its first non-empty icon name.
        child_types: Parent type mapped to the types declaring it as a parent.
        groups: Top-level type groups seen across all declarations.
        descriptors: Every descriptor parsed, in scan order.
    """

    apps: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    icons: Mapping[str, str] = field(default_factory=dict)
    child_types: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    groups: frozenset[str] = frozenset()
    descriptors: tuple[AppDescriptor, ...] = ()

    def declares(self, app_name: str, content_type: str) -> bool:
        """Return ``True`` when ``app_name`` natively declares ``content_type``."""

        return content_type in self.apps.get(app_name, {})

    def descriptor_for(self, app_name: str, content_type: str) -> str | None:
        """Return the descriptor id registered for ``app_name`` and ``content_type``."""

        return self.apps.get(app_name, {}).get(content_type)

    def apps_declaring(self, content_type: str) -> list[str]:
        """Return descriptor ids of every app natively declaring ``content_type``."""

        found: list[str] = []
        for name in sorted(self.apps):
            descriptor_id = self.apps[name].get(content_type)
            if descriptor_id and descriptor_id not in found:
                found.append(descriptor_id)
        return found


def parse_descriptor(content: str) -> DescriptorEntry:
    """Parse the primary ``[Desktop Entry]`` section of descriptor ``content``.

    Only ``Name``, ``Icon``, and ``MimeType`` are read. A section header that
    follows the primary section ends the read; lines before the primary
    section are ignored.

    Args:
        content: Full text of a descriptor file.

    Returns:
        DescriptorEntry: Values found in the primary section.
    """

    name = ""
    icon = ""
    mime_types: tuple[str, ...] = ()
    in_entry = False
    seen_entry = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("["):
            if seen_entry:
                break
            in_entry = line == DESKTOP_ENTRY_HEADER
            seen_entry = in_entry
            continue
        if not in_entry:
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if key == NAME_KEY:
            name = value
        elif key == ICON_KEY:
            icon = value
        elif key == MIME_TYPE_KEY:
            mime_types = tuple(part.strip() for part in value.split(";") if part.strip())
    return DescriptorEntry(name=name, icon=icon, mime_types=mime_types)


def iter_descriptor_files(directories: Iterable[Path]) -> Iterator[Path]:
    """Yield descriptor files found directly inside each of ``directories``.

    Args:
        directories: Descriptor directories in precedence order.

    Yields:
        Path: Descriptor files, directory order first, then by file name.
    """

    for directory in directories:
        try:
            candidates = sorted(directory.iterdir())
        except FileNotFoundError:
            LOGGER.debug("descriptor directory %s does not exist", directory)
            continue
        except NotADirectoryError:
            LOGGER.debug("descriptor path %s is not a directory", directory)
            continue
        except OSError as exc:
            LOGGER.warning("cannot list descriptor directory %s: %s", directory, exc)
            continue
        LOGGER.debug("loading applications from %s", directory)
        for candidate in candidates:
            if candidate.suffix == DESCRIPTOR_SUFFIX and candidate.is_file():
                yield candidate


class DescriptorScanner:
    """Build an :class:`ApplicationCatalog` from descriptor directories."""

    def __init__(self, database: TypeDatabase) -> None:
        """Create a scanner that validates declared types against ``database``.

        Args:
            database: Type database used to normalise and relate types.
        """

        self._database = database

    def scan(self, directories: Sequence[Path]) -> ApplicationCatalog:
        """Scan ``directories`` in order and return the resulting catalog.

        Directories must be supplied highest precedence first: when two
        descriptors share a display name and declare the same type, the one
        scanned first keeps the type.

        Args:
            directories: Descriptor directories in precedence order.

        Returns:
            ApplicationCatalog: Freshly built catalog.
        """

        builder = _CatalogBuilder(self._database)
        for path in iter_descriptor_files(directories):
            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except FileNotFoundError:
                LOGGER.debug("descriptor %s vanished during scan", path)
                continue
            except OSError as exc:
                LOGGER.warning("cannot read descriptor %s: %s", path, exc)
                continue
            builder.add(path, parse_descriptor(content))
        catalog = builder.build()
        LOGGER.debug(
            "scanned %d descriptors providing %d applications",
            len(catalog.descriptors),
            len(catalog.apps),
        )
        return catalog


class _CatalogBuilder:
    """Mutable accumulator used while a single scan is in progress."""

    def __init__(self, database: TypeDatabase) -> None:
        self._database = database
        self._apps: dict[str, dict[str, str]] = {}
        self._icons: dict[str, str] = {}
        self._children: dict[str, list[str]] = {}
        self._groups: set[str] = set()
        self._descriptors: list[AppDescriptor] = []

    def add(self, path: Path, entry: DescriptorEntry) -> None:
        """Register the application described by ``entry``.

        Args:
            path: Descriptor file the entry was parsed from.
            entry: Values read from the descriptor's primary section.
        """

        descriptor_id = path.name
        name = entry.name or path.name.split(".", 1)[0]
        if entry.icon and not self._icons.get(name):
            self._icons[name] = entry.icon

        types: list[str] = []
        for raw_type in entry.mime_types:
            content_type = normalize_type(self._database, raw_type)
            if content_type is None:
                LOGGER.debug("%s: ignoring unknown type %s", descriptor_id, raw_type)
                continue
            if content_type in types:
                continue
            types.append(content_type)
            self._register_type(content_type)
            declared = self._apps.setdefault(name, {})
            declared.setdefault(content_type, descriptor_id)

        self._descriptors.append(
            AppDescriptor(
                name=name,
                descriptor_id=descriptor_id,
                icon=entry.icon,
                types=tuple(types),
                path=path,
            )
        )

    def _register_type(self, content_type: str) -> None:
        """Record the parent links and group of ``content_type``.

        Args:
            content_type: Canonical type declared by a descriptor.
        """

        if not is_scheme_handler(content_type):
            for parent in self._database.parent_types(content_type):
                if parent == OCTET_STREAM:
                    continue
                children = self._children.setdefault(parent, [])
                if content_type not in children:
                    children.append(content_type)
        if (group := type_group(content_type)) is not None:
            self._groups.add(group)

    def build(self) -> ApplicationCatalog:
        """Return an immutable catalog of everything registered so far.

        Returns:
            ApplicationCatalog: Snapshot of the accumulated tables.
        """

        return ApplicationCatalog(
            apps={name: dict(types) for name, types in self._apps.items()},
            icons=dict(self._icons),
            child_types={parent: tuple(children) for parent, children in self._children.items()},
            groups=frozenset(self._groups),
            descriptors=tuple(self._descriptors),
        )


__all__ = [
    "AppDescriptor",
    "ApplicationCatalog",
    "DescriptorEntry",
    "DescriptorScanner",
    "iter_descriptor_files",
    "parse_descriptor",
]
