# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rewrite the user's ``mimeapps.list`` with new or removed defaults."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .constants import ADDED_ASSOCIATIONS_HEADER, DEFAULT_APPLICATIONS_HEADER
from .descriptors import ApplicationCatalog
from .errors import DefaultsWriteError
from .interfaces import ConflictResolver, TypeDatabase
from .layers import ConfigLayer, split_entry, split_ids
from .mimedb import fix_legacy_alias, normalize_type
from .resolver import effective_default

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Conflict:
    """A requested default that would replace a different existing default."""

    content_type: str
    current: str


class WriteStatus(str, Enum):
    """Outcome of a request to set defaults."""

    APPLIED = "applied"
    CANCELLED = "cancelled"
    UNCHANGED = "unchanged"


@dataclass(slots=True, frozen=True)
class WriteResult:
    """Report returned by :func:`set_defaults`.

    Attributes:
        status: Whether the file was rewritten, the request was cancelled, or
            nothing remained to write.
        path: User association file targeted by the request.
        conflicts: Every conflict detected while reading the file.
        written: Content type mapped to the descriptor id written for it.
        kept: Conflicting types whose existing default was preserved.
    """

    status: WriteStatus
    path: Path
    conflicts: tuple[Conflict, ...] = ()
    written: Mapping[str, str] = field(default_factory=dict)
    kept: tuple[str, ...] = ()

    @property
    def by_descriptor(self) -> dict[str, tuple[str, ...]]:
        """Return the written types grouped by descriptor id."""

        grouped: dict[str, list[str]] = {}
        for content_type, descriptor_id in sorted(self.written.items()):
            grouped.setdefault(descriptor_id, []).append(content_type)
        return {descriptor_id: tuple(types) for descriptor_id, types in grouped.items()}


@dataclass(slots=True)
class DefaultsPlan:
    """Intermediate state of a set-defaults request before conflicts are settled.

    Attributes:
        preserved_content: Lines outside ``[Default Applications]``, verbatim.
        preserved_associations: Lines inside ``[Default Applications]`` for
            types that were not requested.
        requested: Canonical types still scheduled for writing; all of them
            are declared by the target application.
        undeclared: Requested types the application does not declare. Their
            existing lines are dropped like any other requested type, but
            nothing is written for them.
        conflicts: Conflicts detected against the existing file.
    """

    preserved_content: list[str] = field(default_factory=list)
    preserved_associations: list[str] = field(default_factory=list)
    requested: set[str] = field(default_factory=set)
    undeclared: set[str] = field(default_factory=set)
    conflicts: list[Conflict] = field(default_factory=list)

    def keep_existing(self, conflict: Conflict) -> None:
        """Retain the existing default for ``conflict`` and stop writing its type."""

        self.preserved_associations.append(f"{conflict.content_type}={conflict.current}")
        self.requested.discard(conflict.content_type)


def overwrite_all(conflicts: Collection[Conflict]) -> set[str]:
    """Approve every conflicting type for overwrite."""

    return {conflict.content_type for conflict in conflicts}


def decline_all(_conflicts: Collection[Conflict]) -> set[str]:
    """Approve nothing, which cancels any write that has conflicts."""

    return set()


def line_key(name: str, database: TypeDatabase | None = None) -> str:
    """Return the canonical key used to match ``name`` against file lines.

    Args:
        name: Type name from a request or an association line.
        database: Optional type database resolving aliases such as
            ``text/x-c``; without one only the legacy alias table applies.

    Returns:
        str: Canonical type name, or ``name`` with the legacy alias fixed when
        the database does not know it.
    """

    if database is None:
        return fix_legacy_alias(name)
    return normalize_type(database, name) or fix_legacy_alias(name)


def plan_set_defaults(
    content: str,
    catalog: ApplicationCatalog,
    app_name: str,
    requested_types: Iterable[str],
    database: TypeDatabase | None = None,
) -> DefaultsPlan:
    """Split existing file ``content`` for a request to default ``app_name``.

    Every ``[Default Applications]`` line whose type was requested is dropped,
    whether or not ``app_name`` declares the type. A conflict is recorded for
    a requested type when the file already assigns it to a descriptor other
    than the one ``app_name`` declares for it, and ``app_name`` natively
    declares the type.

    Args:
        content: Current text of the user association file.
        catalog: Scanned applications used to look up descriptor ids.
        app_name: Application display name receiving the defaults.
        requested_types: Types the caller wants to default to ``app_name``.
        database: Optional type database used to match aliased keys.

    Returns:
        DefaultsPlan: Preserved lines, remaining requests, and conflicts.
    """

    plan = DefaultsPlan()
    for name in requested_types:
        content_type = line_key(name, database)
        if catalog.declares(app_name, content_type):
            plan.requested.add(content_type)
        else:
            plan.undeclared.add(content_type)
    targets = plan.requested | plan.undeclared

    current: dict[str, str] = {}
    in_defaults = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if line.startswith("["):
            in_defaults = line == DEFAULT_APPLICATIONS_HEADER
            if not in_defaults:
                plan.preserved_content.append(raw_line)
            continue
        if not in_defaults:
            plan.preserved_content.append(raw_line)
            continue
        if not line:
            continue
        entry = split_entry(line) if not line.startswith("#") else None
        if entry is None or (content_type := line_key(entry[0], database)) not in targets:
            plan.preserved_associations.append(raw_line)
            continue
        if ids := split_ids(entry[1]):
            current.setdefault(content_type, ids[0])

    existing = ConfigLayer(defaults=current)
    for content_type in sorted(plan.requested):
        assigned = effective_default((existing,), content_type)
        wanted = catalog.descriptor_for(app_name, content_type)
        if assigned is not None and assigned != wanted:
            plan.conflicts.append(Conflict(content_type=content_type, current=assigned))
    return plan


def render_defaults(plan: DefaultsPlan, assignments: Mapping[str, str]) -> str:
    """Return the new file text for ``plan`` with ``assignments`` appended.

    Args:
        plan: Plan produced by :func:`plan_set_defaults`.
        assignments: Content type mapped to the descriptor id to write.

    Returns:
        str: Complete file content ending with a newline.
    """

    lines = list(plan.preserved_content)
    if lines and lines[-1].strip():
        lines.append("")
    lines.append(DEFAULT_APPLICATIONS_HEADER)
    lines.extend(plan.preserved_associations)
    lines.extend(f"{content_type}={assignments[content_type]}" for content_type in sorted(assignments))
    return "\n".join(lines) + "\n"


def set_defaults(
    path: Path,
    catalog: ApplicationCatalog,
    app_name: str,
    requested_types: Iterable[str],
    resolve_conflicts: ConflictResolver,
    *,
    database: TypeDatabase | None = None,
) -> WriteResult:
    """Make ``app_name`` the default for ``requested_types`` in ``path``.

    Conflicts are handed to ``resolve_conflicts`` as one batch. Types it does
    not approve keep their existing default; an empty approval cancels the
    request without touching the file. Types ``app_name`` does not declare
    lose their existing line and get no new one. When nothing is left to
    assign the file is not rewritten at all.

    Args:
        path: User association file to rewrite.
        catalog: Scanned applications used to look up descriptor ids.
        app_name: Application display name receiving the defaults.
        requested_types: Types to default to ``app_name``.
        resolve_conflicts: Callback approving conflicting types for overwrite.
        database: Optional type database used to match aliased keys.

    Returns:
        WriteResult: Outcome of the request.

    Raises:
        DefaultsWriteError: If ``path`` exists but cannot be read, or cannot be
            replaced with the new content.
    """

    content = _read_existing(path)
    plan = plan_set_defaults(content, catalog, app_name, requested_types, database)
    conflicts = tuple(plan.conflicts)
    kept: list[str] = []
    if conflicts:
        approved = {line_key(name, database) for name in resolve_conflicts(conflicts)}
        if not approved:
            LOGGER.info("set-defaults for %s cancelled with %d conflicts", app_name, len(conflicts))
            return WriteResult(status=WriteStatus.CANCELLED, path=path, conflicts=conflicts)
        for conflict in conflicts:
            if conflict.content_type not in approved:
                plan.keep_existing(conflict)
                kept.append(conflict.content_type)

    for content_type in sorted(plan.undeclared):
        LOGGER.debug("%s does not declare %s; not writing it", app_name, content_type)
    assignments: dict[str, str] = {}
    for content_type in sorted(plan.requested):
        if (descriptor_id := catalog.descriptor_for(app_name, content_type)) is not None:
            assignments[content_type] = descriptor_id

    if not assignments:
        return WriteResult(status=WriteStatus.UNCHANGED, path=path, conflicts=conflicts, kept=tuple(kept))

    atomic_write(path, render_defaults(plan, assignments))
    for content_type, descriptor_id in assignments.items():
        LOGGER.debug("wrote %s=%s to %s", content_type, descriptor_id, path)
    return WriteResult(
        status=WriteStatus.APPLIED,
        path=path,
        conflicts=conflicts,
        written=assignments,
        kept=tuple(kept),
    )


def strip_defaults(
    content: str,
    types: Collection[str],
    database: TypeDatabase | None = None,
) -> tuple[list[str], int]:
    """Return ``content`` lines without defaults or added associations for ``types``.

    Args:
        content: Current text of the user association file.
        types: Canonical types whose entries should be dropped.
        database: Optional type database used to match aliased keys.

    Returns:
        tuple[list[str], int]: Remaining lines (verbatim) and the number of
        lines dropped.
    """

    kept: list[str] = []
    dropped = 0
    in_target = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if line.startswith("["):
            in_target = line in (DEFAULT_APPLICATIONS_HEADER, ADDED_ASSOCIATIONS_HEADER)
            kept.append(raw_line)
            continue
        if in_target and line and not line.startswith("#"):
            entry = split_entry(line)
            if entry is not None and line_key(entry[0], database) in types:
                LOGGER.debug("removing association line %s", line)
                dropped += 1
                continue
        kept.append(raw_line)
    return kept, dropped


def remove_defaults(path: Path, types: Iterable[str], database: TypeDatabase | None = None) -> int:
    """Remove defaults and added associations for ``types`` from ``path``.

    Args:
        path: User association file to rewrite.
        types: Types whose entries should be removed.
        database: Optional type database used to match aliased keys.

    Returns:
        int: Number of lines removed. Zero means the file was not rewritten.

    Raises:
        DefaultsWriteError: If ``path`` cannot be read or replaced.
    """

    targets = {line_key(name, database) for name in types}
    if not targets:
        return 0
    content = _read_existing(path)
    kept, dropped = strip_defaults(content, targets, database)
    if dropped:
        atomic_write(path, "\n".join(kept) + "\n")
    return dropped


def atomic_write(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` without exposing a partial file.

    The content is written to a temporary sibling which then replaces
    ``path``. A symlinked ``path`` is followed so the link survives and its
    target receives the content. On failure the temporary file is removed and
    ``path`` keeps its previous content.

    Args:
        path: Destination file.
        content: Text to store.

    Raises:
        DefaultsWriteError: If the directory or the file cannot be written.
    """

    target = Path(os.path.realpath(path)) if path.is_symlink() else path
    temp_path: Path | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if target.exists():
            shutil.copymode(target, temp_path)
        os.replace(temp_path, target)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise DefaultsWriteError(path, str(exc)) from exc


def _read_existing(path: Path) -> str:
    """Return the current text of ``path``.

    Args:
        path: User association file.

    Returns:
        str: File content, or an empty string when the file does not exist.

    Raises:
        DefaultsWriteError: If the file exists but cannot be read.
    """

    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return ""
    except OSError as exc:
        raise DefaultsWriteError(path, f"cannot read existing content: {exc}") from exc


__all__ = [
    "Conflict",
    "DefaultsPlan",
    "WriteResult",
    "WriteStatus",
    "atomic_write",
    "decline_all",
    "line_key",
    "overwrite_all",
    "plan_set_defaults",
    "remove_defaults",
    "render_defaults",
    "set_defaults",
    "strip_defaults",
]
