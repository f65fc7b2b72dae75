# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Commands that change the user's default applications."""

from __future__ import annotations

from collections.abc import Collection

import typer

from ..errors import DefaultsWriteError, UnknownApplicationError
from ..interfaces import ConflictResolver
from ..mimedb import normalize_type
from ..writer import Conflict, WriteStatus, overwrite_all
from ._options import APP_ARGUMENT, OVERWRITE_OPTION, REQUIRED_TYPES_ARGUMENT, TYPES_ARGUMENT, normalize_cli_values
from .shared import EXIT_CANCELLED, EXIT_FAILURE, CLIError, CLILogger, exit_with, get_context


def confirm_conflicts(conflicts: Collection[Conflict]) -> set[str]:
    """Ask about every conflict and return the types approved for overwrite."""

    approved: set[str] = set()
    for conflict in sorted(conflicts, key=lambda item: item.content_type):
        question = f"{conflict.content_type} is currently opened by {conflict.current}. Overwrite?"
        if typer.confirm(question, default=True):
            approved.add(conflict.content_type)
    return approved


def set_command(
    ctx: typer.Context,
    app_name: APP_ARGUMENT,
    content_types: TYPES_ARGUMENT = None,
    overwrite: OVERWRITE_OPTION = False,
) -> None:
    """Make an application the default for content types."""

    state = get_context(ctx)
    logger = state.logger
    engine = state.engine()
    requested = [normalize_type(engine.database, name) or name for name in normalize_cli_values(content_types)]
    try:
        if not requested:
            requested = list(engine.generation.support_for(app_name).official)
        resolver: ConflictResolver = overwrite_all if overwrite else confirm_conflicts
        result = engine.set_defaults(app_name, requested, resolver)
    except UnknownApplicationError as exc:
        raise exit_with(CLIError(str(exc)), logger) from exc
    except DefaultsWriteError as exc:
        raise exit_with(CLIError(str(exc)), logger) from exc

    if result.status is WriteStatus.CANCELLED:
        logger.warn("Cancelled; no defaults were changed")
        raise typer.Exit(code=EXIT_CANCELLED)
    if result.status is WriteStatus.UNCHANGED:
        logger.info(f"Nothing to change for {app_name}")
        return
    _report_kept(result.kept, logger)
    for descriptor_id, types in result.by_descriptor.items():
        logger.ok(f"{descriptor_id} now opens {', '.join(types)}")


def unset_command(ctx: typer.Context, content_types: REQUIRED_TYPES_ARGUMENT) -> None:
    """Remove user-level defaults for content types."""

    state = get_context(ctx)
    logger = state.logger
    engine = state.engine()
    requested = [normalize_type(engine.database, name) or name for name in normalize_cli_values(content_types)]
    try:
        removed = engine.remove_defaults(requested)
    except DefaultsWriteError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_FAILURE) from exc
    if removed:
        logger.ok(f"Removed {removed} association line(s) from {engine.user_file}")
    else:
        logger.info("No user defaults matched")


def _report_kept(kept: Collection[str], logger: CLILogger) -> None:
    """Warn about conflicting types whose existing default was kept."""

    if kept:
        logger.warn(f"Kept existing defaults for {', '.join(sorted(kept))}")


__all__ = ["confirm_conflicts", "set_command", "unset_command"]
