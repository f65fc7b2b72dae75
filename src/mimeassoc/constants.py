# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants for association files, descriptors, and type names."""

from __future__ import annotations

from typing import Final

MIMEAPPS_LIST: Final[str] = "mimeapps.list"
DESKTOP_MIMEAPPS_SUFFIX: Final[str] = "-mimeapps.list"
APPLICATIONS_SUBDIR: Final[str] = "applications"
DESCRIPTOR_SUFFIX: Final[str] = ".desktop"

DEFAULT_APPLICATIONS: Final[str] = "Default Applications"
ADDED_ASSOCIATIONS: Final[str] = "Added Associations"
REMOVED_ASSOCIATIONS: Final[str] = "Removed Associations"
DESKTOP_ENTRY: Final[str] = "Desktop Entry"

DEFAULT_APPLICATIONS_HEADER: Final[str] = f"[{DEFAULT_APPLICATIONS}]"
ADDED_ASSOCIATIONS_HEADER: Final[str] = f"[{ADDED_ASSOCIATIONS}]"
REMOVED_ASSOCIATIONS_HEADER: Final[str] = f"[{REMOVED_ASSOCIATIONS}]"
DESKTOP_ENTRY_HEADER: Final[str] = f"[{DESKTOP_ENTRY}]"

SCHEME_HANDLER_PREFIX: Final[str] = "x-scheme-handler/"
OCTET_STREAM: Final[str] = "application/octet-stream"

# Type names some databases report under their registered name even though
# association files in the wild use the other spelling.
LEGACY_TYPE_ALIASES: Final[dict[str, str]] = {
    "application/pkcs12": "application/x-pkcs12",
}

CURRENT_DESKTOP_ENV: Final[str] = "XDG_CURRENT_DESKTOP"
CONFIG_DIRNAME: Final[str] = "mimeassoc"
CONFIG_FILENAME: Final[str] = "config.toml"

__all__ = [
    "ADDED_ASSOCIATIONS",
    "ADDED_ASSOCIATIONS_HEADER",
    "APPLICATIONS_SUBDIR",
    "CONFIG_DIRNAME",
    "CONFIG_FILENAME",
    "CURRENT_DESKTOP_ENV",
    "DEFAULT_APPLICATIONS",
    "DEFAULT_APPLICATIONS_HEADER",
    "DESCRIPTOR_SUFFIX",
    "DESKTOP_ENTRY",
    "DESKTOP_ENTRY_HEADER",
    "DESKTOP_MIMEAPPS_SUFFIX",
    "LEGACY_TYPE_ALIASES",
    "MIMEAPPS_LIST",
    "OCTET_STREAM",
    "REMOVED_ASSOCIATIONS",
    "REMOVED_ASSOCIATIONS_HEADER",
    "SCHEME_HANDLER_PREFIX",
]
