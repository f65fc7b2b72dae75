# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Content-type database adapters and type-name normalisation helpers."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Final

import xdg.Mime

from .constants import LEGACY_TYPE_ALIASES, SCHEME_HANDLER_PREFIX
from .interfaces import TypeDatabase

LOGGER = logging.getLogger(__name__)

_TYPE_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9][\w!#$&^.+-]*/[\w!#$&^.+-]+$")
_TYPES_REGISTRY: Final[str] = "types"
_MIME_SUBDIR: Final[str] = "mime"


def is_scheme_handler(name: str) -> bool:
    """Return ``True`` when ``name`` is an ``x-scheme-handler/`` pseudo-type."""

    return name.startswith(SCHEME_HANDLER_PREFIX) and len(name) > len(SCHEME_HANDLER_PREFIX)


def fix_legacy_alias(name: str) -> str:
    """Map legacy type spellings onto their modern canonical form."""

    return LEGACY_TYPE_ALIASES.get(name, name)


def type_group(name: str) -> str | None:
    """Return the top-level group of ``name`` (text before the first ``/``)."""

    group, sep, _ = name.partition("/")
    return group if sep and group else None


def normalize_type(database: TypeDatabase, name: str) -> str | None:
    """Return the canonical spelling of ``name`` or ``None`` when invalid.

    Scheme handlers are accepted verbatim; every other name is resolved through
    ``database`` and then passed through :func:`fix_legacy_alias`.

    Args:
        database: Type database used for canonicalisation.
        name: Raw type name.

    Returns:
        str | None: Canonical type name, or ``None`` when the database rejects it.
    """

    stripped = name.strip()
    if is_scheme_handler(stripped):
        return stripped
    if not stripped:
        return None
    canonical = database.normalize(stripped)
    if canonical is None:
        return None
    return fix_legacy_alias(canonical)


def describe_type(database: TypeDatabase, name: str) -> str:
    """Return a one-line description for ``name`` suitable for display."""

    if is_scheme_handler(name):
        return f"Handles {name[len(SCHEME_HANDLER_PREFIX):]}:// URIs"
    description = database.description(fix_legacy_alias(name)).strip()
    return description or name


class StaticTypeDatabase(TypeDatabase):
    """In-memory type database built from explicit tables.

    Useful for embedding the engine where no shared-mime-info installation is
    available, and for tests that need exact control over type relationships.
    """

    def __init__(
        self,
        types: Iterable[str] = (),
        *,
        aliases: Mapping[str, str] | None = None,
        parents: Mapping[str, Sequence[str]] | None = None,
        descriptions: Mapping[str, str] | None = None,
    ) -> None:
        """Create a database from type, alias, parent and description tables.

        Args:
            types: Canonical type names the database recognises.
            aliases: Mapping of alias name to canonical name.
            parents: Mapping of canonical name to its ordered parent names.
            descriptions: Mapping of canonical name to description text.
        """

        self._parents = {name: tuple(values) for name, values in (parents or {}).items()}
        self._aliases = dict(aliases or {})
        self._descriptions = dict(descriptions or {})
        known = set(types)
        known.update(self._parents)
        known.update(self._aliases.values())
        self._types = frozenset(known)

    @property
    def types(self) -> frozenset[str]:
        """Return every canonical type known to the database."""

        return self._types

    def normalize(self, name: str) -> str | None:
        """Return the canonical name for ``name`` after alias resolution.

        Args:
            name: Raw type name.

        Returns:
            str | None: Canonical name, or ``None`` when the table lacks it.
        """

        candidate = self._aliases.get(name, name)
        return candidate if candidate in self._types else None

    def parent_types(self, name: str) -> tuple[str, ...]:
        """Return the parents recorded for ``name``.

        Args:
            name: Canonical type name.

        Returns:
            tuple[str, ...]: Parent names in table order; empty when none.
        """

        return self._parents.get(name, ())

    def description(self, name: str) -> str:
        """Return the description recorded for ``name``.

        Args:
            name: Canonical type name.

        Returns:
            str: Description text, or an empty string when none is recorded.
        """

        return self._descriptions.get(name, "")


class SharedMimeInfoDatabase(TypeDatabase):
    """Type database backed by the freedesktop.org shared-mime-info files.

    Alias resolution, inheritance, and comments come from :mod:`xdg.Mime`.
    Whether a name is known is decided from the ``mime/types`` registries that
    ``update-mime-database`` writes into each data directory; without any
    registry every syntactically valid name is accepted.
    """

    def __init__(self, data_dirs: Sequence[Path]) -> None:
        """Create the adapter for the given data directories.

        Args:
            data_dirs: Data directories, highest precedence first, whose
                ``mime`` subdirectories hold shared-mime-info output.
        """

        self._data_dirs = tuple(data_dirs)
        self._known: frozenset[str] | None = None

    @property
    def known_types(self) -> frozenset[str]:
        """Return the union of every ``mime/types`` registry, loading it once."""

        if self._known is None:
            self._known = frozenset(_read_registries(self._data_dirs))
        return self._known

    def normalize(self, name: str) -> str | None:
        """Return the canonical name of ``name`` as known to shared-mime-info.

        Args:
            name: Raw type name, possibly an alias.

        Returns:
            str | None: Canonical name, or ``None`` when the name is malformed
            or absent from every ``mime/types`` registry.
        """

        mime = _lookup(name)
        if mime is None:
            return None
        canonical = str(mime.canonical())
        known = self.known_types
        if known and canonical not in known:
            return None
        return canonical

    def parent_types(self, name: str) -> tuple[str, ...]:
        """Return the types ``name`` inherits from.

        Args:
            name: Canonical type name.

        Returns:
            tuple[str, ...]: Sorted parent names; empty for malformed names.
        """

        mime = _lookup(name)
        if mime is None:
            return ()
        return tuple(sorted(str(parent) for parent in mime.inherits_from()))

    def description(self, name: str) -> str:
        """Return the shared-mime-info comment for ``name``.

        Args:
            name: Canonical type name.

        Returns:
            str: Localised comment, or an empty string when none exists.
        """

        mime = _lookup(name)
        if mime is None:
            return ""
        comment = mime.get_comment()
        return str(comment) if comment else ""


def _lookup(name: str) -> xdg.Mime.MIMEtype | None:
    """Return the pyxdg type object for ``name`` when it is well formed.

    Args:
        name: Type name to look up.

    Returns:
        xdg.Mime.MIMEtype | None: Type object, or ``None`` for malformed names.
    """

    if not _TYPE_NAME_RE.match(name):
        return None
    try:
        return xdg.Mime.lookup(name)
    except ValueError:
        return None


def _read_registries(data_dirs: Iterable[Path]) -> set[str]:
    """Collect the type names listed in each ``mime/types`` registry.

    Args:
        data_dirs: Data directories whose ``mime`` subdirectory is inspected.

    Returns:
        set[str]: Union of every registered type name. Missing registries are
        skipped; unreadable ones are logged as warnings.
    """

    known: set[str] = set()
    for data_dir in data_dirs:
        registry = data_dir / _MIME_SUBDIR / _TYPES_REGISTRY
        try:
            content = registry.read_text(encoding="utf-8")
        except FileNotFoundError:
            LOGGER.debug("no type registry at %s", registry)
            continue
        except OSError as exc:
            LOGGER.warning("cannot read type registry %s: %s", registry, exc)
            continue
        known.update(line.strip() for line in content.splitlines() if line.strip())
    return known


__all__ = [
    "SharedMimeInfoDatabase",
    "StaticTypeDatabase",
    "describe_type",
    "fix_legacy_alias",
    "is_scheme_handler",
    "normalize_type",
    "type_group",
]
