# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Temporary XDG directory layouts used across the test-suite."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from mimeassoc.environment import DesktopEnvironment, resolve_environment


@dataclass(slots=True)
class XdgTree:
    """Throw-away XDG layout rooted in a temporary directory."""

    root: Path

    @property
    def home(self) -> Path:
        return self.root / "home"

    @property
    def config_home(self) -> Path:
        return self.home / ".config"

    @property
    def data_home(self) -> Path:
        return self.home / ".local" / "share"

    @property
    def config_dir(self) -> Path:
        return self.root / "etc" / "xdg"

    @property
    def data_dir(self) -> Path:
        return self.root / "usr" / "share"

    @property
    def user_file(self) -> Path:
        return self.config_home / "mimeapps.list"

    def env(self, desktop: str = "") -> dict[str, str]:
        return {
            "HOME": str(self.home),
            "XDG_CONFIG_HOME": str(self.config_home),
            "XDG_CONFIG_DIRS": str(self.config_dir),
            "XDG_DATA_HOME": str(self.data_home),
            "XDG_DATA_DIRS": str(self.data_dir),
            "XDG_CURRENT_DESKTOP": desktop,
        }

    def environment(self, desktops: Sequence[str] = ()) -> DesktopEnvironment:
        return resolve_environment(self.env(), desktops=list(desktops) or None)

    def write_descriptor(
        self,
        filename: str,
        *,
        name: str,
        mime_types: Iterable[str],
        icon: str = "",
        data_dir: Path | None = None,
    ) -> Path:
        directory = (data_dir or self.data_dir) / "applications"
        directory.mkdir(parents=True, exist_ok=True)
        lines = ["[Desktop Entry]", "Type=Application", f"Name={name}", f"Exec={filename.split('.')[0]} %f"]
        if icon:
            lines.append(f"Icon={icon}")
        lines.append(f"MimeType={';'.join(mime_types)};")
        path = directory / filename
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    def write_mimeapps(self, directory: Path, content: str, *, desktop: str | None = None) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        filename = f"{desktop}-mimeapps.list" if desktop else "mimeapps.list"
        path = directory / filename
        path.write_text(content, encoding="utf-8")
        return path

