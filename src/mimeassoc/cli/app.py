# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

import typer

from ..config import load_settings
from ..errors import ConfigError
from ..logging import configure_logging
from ._options import COLOR_OPTION, CONFIG_OPTION, DESKTOP_OPTION, EMOJI_OPTION, VERBOSE_OPTION, normalize_cli_values
from .edit import set_command, unset_command
from .query import apps_command, groups_command, paths_command, query_command, show_command
from .shared import EXIT_FAILURE, CLILogger, get_context

app = typer.Typer(
    name="mimeassoc",
    help="Inspect and change default applications for content types.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = None,
    color: COLOR_OPTION = None,
    desktop: DESKTOP_OPTION = None,
    config: CONFIG_OPTION = None,
) -> None:
    """Resolve settings and prepare the shared command state."""

    state = get_context(ctx)
    overrides = {
        "verbose": True if verbose else None,
        "emoji": emoji,
        "color": color,
        "desktops": list(normalize_cli_values(desktop)) or None,
    }
    try:
        state.settings = load_settings(config, overrides=overrides)
    except ConfigError as exc:
        CLILogger(use_emoji=emoji is not False).fail(str(exc))
        raise typer.Exit(code=EXIT_FAILURE) from exc
    configure_logging(verbose=state.settings.verbose)


app.command("paths")(paths_command)
app.command("apps")(apps_command)
app.command("groups")(groups_command)
app.command("show")(show_command)
app.command("query")(query_command)
app.command("set")(set_command)
app.command("unset")(unset_command)

__all__ = ["app", "main"]
