# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the association engine and the CLI."""

from __future__ import annotations

from pathlib import Path


class MimeAssocError(Exception):
    """Base class for errors raised by :mod:`mimeassoc`."""


class ConfigError(MimeAssocError):
    """Raised when tool configuration input is invalid."""


class UnknownApplicationError(MimeAssocError, LookupError):
    """Raised when a query names an application absent from the catalog."""

    def __init__(self, app_name: str) -> None:
        """Initialise the error with the missing application name.

        Args:
            app_name: Display name that was not found in the catalog.
        """

        super().__init__(f"unknown application: {app_name}")
        self.app_name = app_name


class DefaultsWriteError(MimeAssocError):
    """Raised when the user association file cannot be rewritten.

    The on-disk file is left exactly as it was before the write was attempted.
    """

    def __init__(self, path: Path, reason: str) -> None:
        """Initialise the error with the offending path and a readable reason.

        Args:
            path: User association file that could not be written.
            reason: Description of the underlying failure.
        """

        super().__init__(f"failed to write {path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "ConfigError",
    "DefaultsWriteError",
    "MimeAssocError",
    "UnknownApplicationError",
]
