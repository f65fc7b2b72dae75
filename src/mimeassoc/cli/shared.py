# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, command state)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final

import typer

from ..config import Settings
from ..engine import AssociationEngine
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import warn as core_warn

EXIT_OK: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
EXIT_CANCELLED: Final[int] = 2


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = EXIT_FAILURE) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI presentation settings."""

    use_emoji: bool
    use_color: bool | None = None

    def fail(self, message: str) -> None:
        """Log a failure message."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Log a warning message."""

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Log a success message."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def info(self, message: str) -> None:
        """Log an informational message."""

        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)


def build_cli_logger(settings: Settings) -> CLILogger:
    """Return a :class:`CLILogger` honouring ``settings``' presentation flags."""

    return CLILogger(use_emoji=settings.emoji, use_color=None if settings.color else False)


EngineFactory = Callable[[Settings], AssociationEngine]


def default_engine_factory(settings: Settings) -> AssociationEngine:
    """Build an engine for the process environment using ``settings``."""

    return AssociationEngine.for_environment(
        desktops=settings.desktops or None,
        extra_application_dirs=settings.extra_application_dirs,
    )


@dataclass(slots=True)
class CLIContext:
    """State shared between the root callback and sub-commands.

    Attributes:
        settings: Resolved tool settings.
        engine_factory: Callable creating the engine on first use.
    """

    settings: Settings = field(default_factory=Settings)
    engine_factory: EngineFactory = default_engine_factory
    _engine: AssociationEngine | None = None

    @property
    def logger(self) -> CLILogger:
        """Return a logger bound to the current settings."""

        return build_cli_logger(self.settings)

    def engine(self) -> AssociationEngine:
        """Return the engine, creating it on first access."""

        if self._engine is None:
            self._engine = self.engine_factory(self.settings)
        return self._engine


def get_context(ctx: typer.Context) -> CLIContext:
    """Return the :class:`CLIContext` stored on ``ctx``."""

    state = ctx.obj
    if not isinstance(state, CLIContext):
        state = CLIContext()
        ctx.obj = state
    return state


def exit_with(error: CLIError, logger: CLILogger) -> typer.Exit:
    """Report ``error`` through ``logger`` and return the matching exit."""

    logger.fail(str(error))
    return typer.Exit(code=error.exit_code)


__all__ = [
    "CLIContext",
    "CLIError",
    "CLILogger",
    "EXIT_CANCELLED",
    "EXIT_FAILURE",
    "EXIT_OK",
    "EngineFactory",
    "build_cli_logger",
    "default_engine_factory",
    "exit_with",
    "get_context",
]
