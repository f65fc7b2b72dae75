# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Query surface and mutation entry points of the association engine."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from .descriptors import ApplicationCatalog, DescriptorScanner
from .environment import DesktopEnvironment, resolve_environment
from .errors import UnknownApplicationError
from .interfaces import ConflictResolver, TypeDatabase
from .mimedb import SharedMimeInfoDatabase, describe_type, fix_legacy_alias
from .paths import PrecedenceOrder, build_layer_paths, user_mimeapps_path
from .resolver import ResolvedAssociations, resolve
from .writer import WriteResult, WriteStatus, decline_all, remove_defaults, set_defaults

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TypeSupport:
    """Types an application supports, split by how the support is known.

    Attributes:
        official: Types the application's descriptor declares.
        implied: Child types of declared types that are not declared
            themselves; weaker suggestions rather than official support.
    """

    official: tuple[str, ...]
    implied: tuple[str, ...]


def _in_group(content_type: str, group: str) -> bool:
    """Return ``True`` when ``content_type`` belongs to ``group`` (empty matches all)."""

    if not group:
        return True
    prefix = group if group.endswith("/") else f"{group}/"
    return content_type.startswith(prefix)


@dataclass(slots=True, frozen=True)
class AssociationGeneration:
    """One consistent, immutable view of applications and associations.

    Every reload produces a new generation; callers holding an older one keep
    a coherent (if stale) snapshot.
    """

    environment: DesktopEnvironment
    order: PrecedenceOrder
    catalog: ApplicationCatalog
    associations: ResolvedAssociations
    serial: int = 0

    @property
    def apps(self) -> Mapping[str, Mapping[str, str]]:
        """Return application name mapped to ``type -> descriptor id``."""

        return self.catalog.apps

    @property
    def groups(self) -> frozenset[str]:
        """Return the known top-level type groups."""

        return self.catalog.groups

    def default_app(self, content_type: str) -> str | None:
        """Return the effective default descriptor id for ``content_type``."""

        return self.associations.default_app(content_type)

    def associated_apps(self, content_type: str) -> list[str]:
        """Return the added, non-removed associations for ``content_type``."""

        return self.associations.associated_apps(content_type)

    def has_user_default(self, content_type: str) -> bool:
        """Return ``True`` when the user explicitly set a default for ``content_type``."""

        return self.associations.has_user_default(content_type)

    def app_icon(self, app_name: str) -> str | None:
        """Return the icon name recorded for ``app_name``, if any."""

        return self.catalog.icons.get(app_name) or None

    def child_types(self, content_type: str) -> tuple[str, ...]:
        """Return types declaring ``content_type`` as their parent."""

        return self.catalog.child_types.get(fix_legacy_alias(content_type), ())

    def apps_for_type(self, content_type: str) -> list[str]:
        """Return descriptor ids of every application able to open ``content_type``.

        The result unites natively declaring applications with added
        associations, minus removed associations, without duplicates.

        Args:
            content_type: Content type to look up.

        Returns:
            list[str]: Descriptor ids in discovery order.
        """

        key = fix_legacy_alias(content_type)
        result: list[str] = []
        for descriptor_id in [*self.catalog.apps_declaring(key), *self.associations.associated_apps(key)]:
            if descriptor_id in result or self.associations.is_removed(key, descriptor_id):
                continue
            result.append(descriptor_id)
        return result

    def support_for(self, app_name: str, group: str = "") -> TypeSupport:
        """Return official and implied support of ``app_name``.

        Args:
            app_name: Application display name.
            group: Optional top-level group restricting the returned types.

        Returns:
            TypeSupport: Sorted official and implied types.

        Raises:
            UnknownApplicationError: If ``app_name`` has no catalog entry.
        """

        declared = self._declared(app_name)
        implied: set[str] = set()
        for content_type in declared:
            for child in self.catalog.child_types.get(content_type, ()):
                if child not in declared:
                    implied.add(child)
        return TypeSupport(
            official=tuple(sorted(name for name in declared if _in_group(name, group))),
            implied=tuple(sorted(name for name in implied if _in_group(name, group))),
        )

    def current_defaults(self) -> dict[str, str]:
        """Return content type mapped to the name of the application opening it.

        Only types whose effective default is the descriptor an application
        declares for that type are included.
        """

        owners: dict[str, str] = {}
        for app_name, declared in self.catalog.apps.items():
            for content_type, descriptor_id in declared.items():
                if self.associations.default_app(content_type) == descriptor_id:
                    owners[content_type] = app_name
        return owners

    def types_opened_by(self, app_name: str) -> list[str]:
        """Return the sorted types ``app_name`` currently opens by default.

        Raises:
            UnknownApplicationError: If ``app_name`` has no catalog entry.
        """

        self._declared(app_name)
        return sorted(name for name, owner in self.current_defaults().items() if owner == app_name)

    def apps_matching(self, text: str = "", group: str = "") -> list[str]:
        """Return sorted application names filtered by ``text`` and ``group``.

        Args:
            text: Case-insensitive substring the name must contain.
            group: Top-level group at least one declared or implied type must
                belong to.

        Returns:
            list[str]: Matching application names.
        """

        needle = text.casefold()
        matches: list[str] = []
        for app_name in sorted(self.catalog.apps):
            if needle and needle not in app_name.casefold():
                continue
            if group and not self._has_type_in_group(app_name, group):
                continue
            matches.append(app_name)
        return matches

    def _has_type_in_group(self, app_name: str, group: str) -> bool:
        """Return ``True`` when ``app_name`` declares or implies a type in ``group``.

        Args:
            app_name: Application display name.
            group: Top-level group to test.

        Returns:
            bool: Whether any declared type or child of one is in ``group``.
        """

        for content_type in self.catalog.apps.get(app_name, {}):
            if _in_group(content_type, group):
                return True
            if any(_in_group(child, group) for child in self.catalog.child_types.get(content_type, ())):
                return True
        return False

    def _declared(self, app_name: str) -> Mapping[str, str]:
        """Return the declared types of ``app_name``.

        Args:
            app_name: Application display name.

        Returns:
            Mapping[str, str]: Type mapped to descriptor id.

        Raises:
            UnknownApplicationError: If ``app_name`` has no catalog entry.
        """

        try:
            return self.catalog.apps[app_name]
        except KeyError as exc:
            raise UnknownApplicationError(app_name) from exc


class AssociationEngine:
    """Own the current :class:`AssociationGeneration` and apply user changes.

    The engine is synchronous and offers no internal locking; callers issuing
    concurrent writes must serialise them.
    """

    def __init__(
        self,
        environment: DesktopEnvironment,
        database: TypeDatabase,
        *,
        scanner: DescriptorScanner | None = None,
    ) -> None:
        """Create an engine and load the first generation from disk.

        Args:
            environment: Desktop identifiers and directories to resolve against.
            database: Type database used for normalisation and descriptions.
            scanner: Optional scanner override; defaults to one using ``database``.
        """

        self._environment = environment
        self._database = database
        self._scanner = scanner or DescriptorScanner(database)
        self._generation = self._load(serial=0)

    @classmethod
    def for_environment(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        desktops: Iterable[str] | None = None,
        extra_application_dirs: Iterable[Path] = (),
        database: TypeDatabase | None = None,
    ) -> AssociationEngine:
        """Build an engine for the process (or a supplied) environment.

        Args:
            env: Optional environment mapping; defaults to the process one.
            desktops: Optional desktop identifiers overriding the environment.
            extra_application_dirs: Additional descriptor directories.
            database: Optional type database; defaults to shared-mime-info.

        Returns:
            AssociationEngine: Engine with its first generation loaded.
        """

        environment = resolve_environment(env, desktops=list(desktops) if desktops else None)
        environment = environment.with_extra_application_dirs(extra_application_dirs)
        if database is None:
            database = SharedMimeInfoDatabase((environment.data_home, *environment.data_dirs))
        return cls(environment, database)

    @property
    def generation(self) -> AssociationGeneration:
        """Return the most recently loaded generation."""

        return self._generation

    @property
    def environment(self) -> DesktopEnvironment:
        """Return the environment the engine resolves against."""

        return self._environment

    @property
    def database(self) -> TypeDatabase:
        """Return the type database used by the engine."""

        return self._database

    @property
    def user_file(self) -> Path:
        """Return the user's writable association file."""

        return user_mimeapps_path(self._environment)

    def reload(self) -> AssociationGeneration:
        """Rescan descriptors, re-read every layer, and swap in the result."""

        self._generation = self._load(serial=self._generation.serial + 1)
        return self._generation

    def describe(self, content_type: str) -> str:
        """Return a display description of ``content_type``."""

        return describe_type(self._database, content_type)

    def set_defaults(
        self,
        app_name: str,
        content_types: Iterable[str],
        resolve_conflicts: ConflictResolver = decline_all,
    ) -> WriteResult:
        """Make ``app_name`` the default for ``content_types``.

        Args:
            app_name: Application display name receiving the defaults.
            content_types: Types to default to ``app_name``.
            resolve_conflicts: Callback approving conflicting types; the
                default declines everything, cancelling on any conflict.

        Returns:
            WriteResult: Outcome of the request. Descriptors and layers are reloaded
            from disk whenever the file was rewritten.

        Raises:
            UnknownApplicationError: If ``app_name`` has no catalog entry.
            DefaultsWriteError: If the user file cannot be read or replaced.
        """

        if app_name not in self._generation.catalog.apps:
            raise UnknownApplicationError(app_name)
        result = set_defaults(
            self.user_file,
            self._generation.catalog,
            app_name,
            content_types,
            resolve_conflicts,
            database=self._database,
        )
        if result.status is WriteStatus.APPLIED:
            LOGGER.info("set %d defaults for %s in %s", len(result.written), app_name, result.path)
            self.reload()
        return result

    def remove_defaults(self, content_types: Iterable[str]) -> int:
        """Remove the user's defaults and added associations for ``content_types``.

        Args:
            content_types: Types whose user entries should be dropped.

        Returns:
            int: Number of lines removed from the user file.

        Raises:
            DefaultsWriteError: If the user file cannot be read or replaced.
        """

        types = [name for name in content_types if name]
        if not types:
            return 0
        removed = remove_defaults(self.user_file, types, self._database)
        LOGGER.info("removed %d association lines from %s", removed, self.user_file)
        self.reload()
        return removed

    def _load(self, *, serial: int) -> AssociationGeneration:
        """Scan descriptors, read every layer, and return a new generation.

        Args:
            serial: Serial number assigned to the generation.

        Returns:
            AssociationGeneration: Freshly loaded state.
        """

        order = build_layer_paths(self._environment)
        catalog = self._scanner.scan(self._environment.application_dirs)
        return AssociationGeneration(
            environment=self._environment,
            order=order,
            catalog=catalog,
            associations=resolve(order),
            serial=serial,
        )


__all__ = [
    "AssociationEngine",
    "AssociationGeneration",
    "TypeSupport",
]
