# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parse individual ``mimeapps.list`` layers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .constants import (
    ADDED_ASSOCIATIONS_HEADER,
    DEFAULT_APPLICATIONS_HEADER,
    REMOVED_ASSOCIATIONS_HEADER,
)
from .mimedb import fix_legacy_alias
from .paths import LayerPath

LOGGER = logging.getLogger(__name__)


class Section(str, Enum):
    """Sections of an association file the parser understands."""

    NONE = "none"
    DEFAULT_APPLICATIONS = "default"
    ADDED_ASSOCIATIONS = "added"
    REMOVED_ASSOCIATIONS = "removed"

    @classmethod
    def from_header(cls, header: str) -> Section:
        """Return the section announced by ``header`` (``NONE`` when unknown)."""

        return _HEADERS.get(header, cls.NONE)


_HEADERS: dict[str, Section] = {
    DEFAULT_APPLICATIONS_HEADER: Section.DEFAULT_APPLICATIONS,
    ADDED_ASSOCIATIONS_HEADER: Section.ADDED_ASSOCIATIONS,
    REMOVED_ASSOCIATIONS_HEADER: Section.REMOVED_ASSOCIATIONS,
}


@dataclass(slots=True, frozen=True)
class ConfigLayer:
    """Association tables contributed by exactly one file.

    Attributes:
        defaults: Content type mapped to its default descriptor id.
        added: Content type mapped to descriptor ids added as associations.
        removed: Content type mapped to descriptor ids removed from associations.
        desktop_specific: Whether the layer is scoped to one desktop; such
            layers never carry added or removed associations.
        source: File the layer was read from, when known.
    """

    defaults: Mapping[str, str] = field(default_factory=dict)
    added: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    removed: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    desktop_specific: bool = False
    source: Path | None = None


def split_entry(line: str) -> tuple[str, str] | None:
    """Split a ``key=value`` line into its normalised type key and raw value.

    Args:
        line: Stripped line from an association file.

    Returns:
        tuple[str, str] | None: ``(type, value)`` or ``None`` without ``=``.
    """

    key, sep, value = line.partition("=")
    if not sep:
        return None
    return fix_legacy_alias(key.strip()), value.strip()


def split_ids(value: str) -> list[str]:
    """Return the non-empty descriptor ids from a ``;``-delimited value."""

    return [part.strip() for part in value.split(";") if part.strip()]


def parse_layer(
    content: str,
    *,
    desktop_specific: bool = False,
    source: Path | None = None,
) -> ConfigLayer:
    """Parse association file ``content`` into a :class:`ConfigLayer`.

    Within one file the first default for a type wins. Added and removed
    associations are dropped entirely for desktop-specific layers.

    Args:
        content: Text of the association file.
        desktop_specific: Whether the file is a ``<desktop>-mimeapps.list``.
        source: Optional path recorded on the resulting layer.

    Returns:
        ConfigLayer: Parsed association tables.
    """

    defaults: dict[str, str] = {}
    added: dict[str, list[str]] = {}
    removed: dict[str, list[str]] = {}
    section = Section.NONE
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("["):
            section = Section.from_header(line)
            continue
        if section is Section.NONE:
            continue
        entry = split_entry(line)
        if entry is None:
            continue
        content_type, value = entry
        ids = split_ids(value)
        if section is Section.DEFAULT_APPLICATIONS:
            if ids and content_type not in defaults:
                defaults[content_type] = ids[0]
        elif not desktop_specific:
            target = added if section is Section.ADDED_ASSOCIATIONS else removed
            bucket = target.setdefault(content_type, [])
            bucket.extend(item for item in ids if item not in bucket)
    return ConfigLayer(
        defaults=defaults,
        added={key: tuple(values) for key, values in added.items() if values},
        removed={key: tuple(values) for key, values in removed.items() if values},
        desktop_specific=desktop_specific,
        source=source,
    )


def read_layer(candidate: LayerPath) -> ConfigLayer | None:
    """Read and parse ``candidate``.

    Args:
        candidate: Layer candidate produced by the precedence builder.

    Returns:
        ConfigLayer | None: Parsed layer, or ``None`` when the file is absent
        or unreadable. Unreadable files are logged as warnings.
    """

    try:
        content = candidate.path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        LOGGER.debug("association file %s does not exist", candidate.path)
        return None
    except IsADirectoryError:
        LOGGER.warning("association path %s is a directory", candidate.path)
        return None
    except OSError as exc:
        LOGGER.warning("cannot read association file %s: %s", candidate.path, exc)
        return None
    LOGGER.debug("parsing %s", candidate.path)
    return parse_layer(content, desktop_specific=candidate.desktop_specific, source=candidate.path)


def read_layers(candidates: Iterable[LayerPath]) -> tuple[ConfigLayer, ...]:
    """Return parsed layers for every readable candidate, preserving order."""

    layers: list[ConfigLayer] = []
    for candidate in candidates:
        if (layer := read_layer(candidate)) is not None:
            layers.append(layer)
    return tuple(layers)


def default_section_keys(content: str) -> frozenset[str]:
    """Return every type key appearing in ``[Default Applications]`` of ``content``.

    Unlike :func:`parse_layer` this keeps keys whose value is empty; it answers
    "did the user write a default for this type" rather than "which default".
    """

    keys: set[str] = set()
    in_defaults = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("["):
            in_defaults = line == DEFAULT_APPLICATIONS_HEADER
            continue
        if in_defaults and (entry := split_entry(line)) is not None:
            keys.add(entry[0])
    return frozenset(keys)


__all__ = [
    "ConfigLayer",
    "Section",
    "default_section_keys",
    "parse_layer",
    "read_layer",
    "read_layers",
    "split_entry",
    "split_ids",
]
