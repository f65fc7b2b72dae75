# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fold parsed layers into the effective association state."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .layers import ConfigLayer, default_section_keys, read_layers
from .mimedb import fix_legacy_alias
from .paths import LayerPath, PrecedenceOrder

LOGGER = logging.getLogger(__name__)


def effective_default(layers: Sequence[ConfigLayer], content_type: str) -> str | None:
    """Return the default descriptor id for ``content_type`` across ``layers``.

    ``layers`` must be ordered highest precedence first; the first layer that
    defines the type wins and later layers never override it. Both the query
    path and the writer's conflict detection go through this function.

    Args:
        layers: Parsed layers in precedence order.
        content_type: Content type to look up.

    Returns:
        str | None: Descriptor id of the effective default, if any.
    """

    for layer in layers:
        if (descriptor_id := layer.defaults.get(content_type)) is not None:
            return descriptor_id
    return None


def merge_defaults(layers: Sequence[ConfigLayer]) -> dict[str, str]:
    """Return the effective default for every type defined by any layer."""

    merged: dict[str, str] = {}
    for layer in layers:
        for content_type in layer.defaults:
            if content_type in merged:
                continue
            if (descriptor_id := effective_default(layers, content_type)) is not None:
                merged[content_type] = descriptor_id
    return merged


@dataclass(slots=True, frozen=True)
class ResolvedAssociations:
    """Merged association state for one load of every layer.

    Attributes:
        defaults: Effective default descriptor id per content type.
        added: Added associations accumulated from non-desktop layers.
        removed: Removed associations accumulated from non-desktop layers.
        user_defaults: Types with an explicit default in the user's generic file.
        layers: Parsed layers the state was derived from, in precedence order.
    """

    defaults: Mapping[str, str] = field(default_factory=dict)
    added: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    removed: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    user_defaults: frozenset[str] = frozenset()
    layers: tuple[ConfigLayer, ...] = ()

    def default_app(self, content_type: str) -> str | None:
        """Return the effective default descriptor id for ``content_type``."""

        return self.defaults.get(fix_legacy_alias(content_type))

    def associated_apps(self, content_type: str) -> list[str]:
        """Return added associations for ``content_type`` minus removed ones."""

        key = fix_legacy_alias(content_type)
        removed = set(self.removed.get(key, ()))
        result: list[str] = []
        for descriptor_id in self.added.get(key, ()):
            if descriptor_id not in removed and descriptor_id not in result:
                result.append(descriptor_id)
        return result

    def is_removed(self, content_type: str, descriptor_id: str) -> bool:
        """Return ``True`` when ``descriptor_id`` was removed for ``content_type``."""

        return descriptor_id in self.removed.get(fix_legacy_alias(content_type), ())

    def has_user_default(self, content_type: str) -> bool:
        """Return ``True`` when the user explicitly chose a default for ``content_type``."""

        return fix_legacy_alias(content_type) in self.user_defaults


def fold_layers(
    layers: Sequence[ConfigLayer],
    *,
    user_defaults: frozenset[str] = frozenset(),
) -> ResolvedAssociations:
    """Fold ``layers`` (highest precedence first) into :class:`ResolvedAssociations`.

    Args:
        layers: Parsed layers in precedence order.
        user_defaults: Types explicitly defaulted by the user's generic file.

    Returns:
        ResolvedAssociations: Merged state.
    """

    added: dict[str, list[str]] = {}
    removed: dict[str, list[str]] = {}
    for layer in layers:
        _accumulate(added, layer.added)
        _accumulate(removed, layer.removed)
    return ResolvedAssociations(
        defaults=merge_defaults(layers),
        added={key: tuple(values) for key, values in added.items()},
        removed={key: tuple(values) for key, values in removed.items()},
        user_defaults=user_defaults,
        layers=tuple(layers),
    )


def read_user_defaults(user_file: LayerPath | None) -> frozenset[str]:
    """Return the types listed under ``[Default Applications]`` in ``user_file``.

    Args:
        user_file: The user's generic association file, if any.

    Returns:
        frozenset[str]: Type keys the user explicitly assigned.
    """

    if user_file is None:
        return frozenset()
    try:
        content = user_file.path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return frozenset()
    except OSError as exc:
        LOGGER.warning("cannot read user association file %s: %s", user_file.path, exc)
        return frozenset()
    return default_section_keys(content)


def resolve(order: PrecedenceOrder) -> ResolvedAssociations:
    """Read every layer in ``order`` and return the merged state.

    Args:
        order: Layer candidates, highest precedence first.

    Returns:
        ResolvedAssociations: Merged state rebuilt from disk.
    """

    layers = read_layers(order)
    LOGGER.debug("resolved %d association layers out of %d candidates", len(layers), len(order))
    return fold_layers(layers, user_defaults=read_user_defaults(order.user_file))


def _accumulate(target: dict[str, list[str]], source: Mapping[str, tuple[str, ...]]) -> None:
    """Append ids from ``source`` to ``target`` without duplicates.

    Args:
        target: Accumulated type to descriptor ids mapping, updated in place.
        source: Mapping contributed by one layer.
    """

    for content_type, descriptor_ids in source.items():
        bucket = target.setdefault(content_type, [])
        bucket.extend(item for item in descriptor_ids if item not in bucket)


__all__ = [
    "ResolvedAssociations",
    "effective_default",
    "fold_layers",
    "merge_defaults",
    "read_user_defaults",
    "resolve",
]
