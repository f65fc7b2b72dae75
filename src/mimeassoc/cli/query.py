# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Read-only commands exposing the association query surface."""

from __future__ import annotations

import typer

from ..errors import UnknownApplicationError
from ..logging import section
from ..mimedb import normalize_type
from ._options import APP_ARGUMENT, GROUP_OPTION, SEARCH_OPTION, TYPE_ARGUMENT
from .shared import EXIT_FAILURE, get_context


def paths_command(ctx: typer.Context) -> None:
    """List mimeapps.list candidates, highest precedence first."""

    state = get_context(ctx)
    for candidate in state.engine().generation.order:
        marker = "*" if candidate.path.is_file() else " "
        tags: list[str] = []
        if candidate.desktop_specific:
            tags.append("desktop")
        if candidate.is_user_file:
            tags.append("user")
        suffix = f"  [{', '.join(tags)}]" if tags else ""
        typer.echo(f"{marker} {candidate.path}{suffix}")


def apps_command(ctx: typer.Context, search: SEARCH_OPTION = "", group: GROUP_OPTION = "") -> None:
    """List applications that declare at least one content type."""

    state = get_context(ctx)
    generation = state.engine().generation
    names = generation.apps_matching(search, group)
    if not names:
        state.logger.warn("No applications match")
        return
    for name in names:
        typer.echo(f"{name}\t{generation.app_icon(name) or '-'}")


def groups_command(ctx: typer.Context) -> None:
    """List the known top-level content-type groups."""

    state = get_context(ctx)
    for group in sorted(state.engine().generation.groups):
        typer.echo(group)


def show_command(ctx: typer.Context, app_name: APP_ARGUMENT, group: GROUP_OPTION = "") -> None:
    """Show what an application can open and what it currently opens."""

    state = get_context(ctx)
    engine = state.engine()
    generation = engine.generation
    try:
        support = generation.support_for(app_name, group)
        opened = generation.types_opened_by(app_name)
    except UnknownApplicationError as exc:
        state.logger.fail(str(exc))
        raise typer.Exit(code=EXIT_FAILURE) from exc

    use_color = state.settings.color
    section(f"{app_name} can open", use_color=use_color)
    for content_type in support.official:
        typer.echo(f"  {content_type}  ({engine.describe(content_type)})")
    if support.implied:
        section(f"{app_name} may also open", use_color=use_color)
        for content_type in support.implied:
            typer.echo(f"  {content_type}  ({engine.describe(content_type)})")
    section(f"{app_name} currently opens", use_color=use_color)
    for content_type in opened:
        typer.echo(f"  {content_type}")


def query_command(ctx: typer.Context, content_type: TYPE_ARGUMENT) -> None:
    """Show the default and candidate applications for a content type."""

    state = get_context(ctx)
    engine = state.engine()
    generation = engine.generation
    name = normalize_type(engine.database, content_type) or content_type.strip()
    default = generation.default_app(name)
    marker = " (user)" if generation.has_user_default(name) else ""
    typer.echo(f"type: {name}")
    typer.echo(f"description: {engine.describe(name)}")
    typer.echo(f"default: {default or '-'}{marker}")
    candidates = generation.apps_for_type(name)
    typer.echo(f"apps: {', '.join(candidates) if candidates else '-'}")


__all__ = [
    "apps_command",
    "groups_command",
    "paths_command",
    "query_command",
    "show_command",
]
