# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Protocols describing collaborators consumed by the association engine."""

from __future__ import annotations

from collections.abc import Callable, Collection
from typing import TYPE_CHECKING, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from .writer import Conflict


@runtime_checkable
class TypeDatabase(Protocol):
    """Canonical content-type knowledge supplied by the platform."""

    def normalize(self, name: str) -> str | None:
        """Return the canonical name for ``name`` or ``None`` when unknown.

        Args:
            name: Raw type name as written in a descriptor or association file.

        Returns:
            str | None: Canonical type name, or ``None`` for invalid names.
        """
        ...

    def parent_types(self, name: str) -> tuple[str, ...]:
        """Return the declared parent types of ``name`` in database order.

        Args:
            name: Canonical type name.

        Returns:
            tuple[str, ...]: Parent type names; empty when none are declared.
        """
        ...

    def description(self, name: str) -> str:
        """Return a human-readable description of ``name``.

        Args:
            name: Canonical type name.

        Returns:
            str: Description text; may be empty when the database has none.
        """
        ...


ConflictResolver: TypeAlias = Callable[[Collection["Conflict"]], Collection[str]]
"""Callback deciding which conflicting types may be overwritten.

The callback receives every conflict of one write request and returns the
content types approved for overwrite. Returning nothing cancels the write.
"""

__all__ = ["ConflictResolver", "TypeDatabase"]
