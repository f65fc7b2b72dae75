# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared Typer option declarations."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer

VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-V", help="Log how descriptors and association files are parsed."),
]
EMOJI_OPTION = Annotated[
    bool | None,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool | None,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]
DESKTOP_OPTION = Annotated[
    list[str] | None,
    typer.Option("--desktop", "-d", help="Desktop identifier overriding XDG_CURRENT_DESKTOP (repeatable)."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", help="Settings file (defaults to $XDG_CONFIG_HOME/mimeassoc/config.toml)."),
]
SEARCH_OPTION = Annotated[
    str,
    typer.Option("--search", "-s", help="Only list applications whose name contains this text."),
]
GROUP_OPTION = Annotated[
    str,
    typer.Option("--group", "-g", help="Only consider types of this top-level group (e.g. 'image')."),
]
OVERWRITE_OPTION = Annotated[
    bool,
    typer.Option("--overwrite", "-y", help="Overwrite conflicting defaults without asking."),
]
APP_ARGUMENT = Annotated[str, typer.Argument(help="Application display name.")]
TYPE_ARGUMENT = Annotated[str, typer.Argument(help="Content type, e.g. 'text/plain'.")]
TYPES_ARGUMENT = Annotated[
    list[str] | None,
    typer.Argument(help="Content types; defaults to every type the application declares."),
]
REQUIRED_TYPES_ARGUMENT = Annotated[list[str], typer.Argument(help="Content types to clear.")]


def normalize_cli_values(values: Sequence[str] | None) -> tuple[str, ...]:
    """Return sanitized CLI values preserving order."""

    if not values:
        return ()
    cleaned_values: list[str] = []
    for entry in values:
        if not entry:
            continue
        stripped = entry.strip()
        if stripped and stripped not in cleaned_values:
            cleaned_values.append(stripped)
    return tuple(cleaned_values)


__all__ = [
    "APP_ARGUMENT",
    "COLOR_OPTION",
    "CONFIG_OPTION",
    "DESKTOP_OPTION",
    "EMOJI_OPTION",
    "GROUP_OPTION",
    "OVERWRITE_OPTION",
    "REQUIRED_TYPES_ARGUMENT",
    "SEARCH_OPTION",
    "TYPES_ARGUMENT",
    "TYPE_ARGUMENT",
    "VERBOSE_OPTION",
    "normalize_cli_values",
]
