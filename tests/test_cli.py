# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the command-line interface."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner
from xdg_layout import XdgTree

from mimeassoc.cli.app import app
from mimeassoc.cli.shared import EXIT_CANCELLED, EXIT_FAILURE, CLIContext
from mimeassoc.config import Settings
from mimeassoc.engine import AssociationEngine
from mimeassoc.mimedb import StaticTypeDatabase


@pytest.fixture
def cli_state(
    populated_tree: XdgTree,
    database: StaticTypeDatabase,
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[], CLIContext]:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(populated_tree.config_home))

    def _factory(settings: Settings) -> AssociationEngine:
        return AssociationEngine(populated_tree.environment(settings.desktops), database)

    return lambda: CLIContext(engine_factory=_factory)


def _invoke(state: CLIContext, *args: str, input_text: str | None = None):
    return CliRunner().invoke(app, ["--no-emoji", "--no-color", *args], obj=state, input=input_text)


def test_apps_lists_names_and_icons(cli_state: Callable[[], CLIContext]) -> None:
    result = _invoke(cli_state(), "apps", "--group", "image")

    assert result.exit_code == 0
    assert "Viewer A\tviewer-a" in result.stdout
    assert "Viewer B\t-" in result.stdout
    assert "Editor" not in result.stdout


def test_query_reports_default_and_candidates(populated_tree: XdgTree, cli_state: Callable[[], CLIContext]) -> None:
    populated_tree.write_mimeapps(populated_tree.config_home, "[Default Applications]\napplication/pkcs12=certmgr.desktop\n")

    result = _invoke(cli_state(), "query", "application/pkcs12")

    assert result.exit_code == 0
    assert "type: application/x-pkcs12" in result.stdout
    assert "default: certmgr.desktop (user)" in result.stdout


def test_paths_honours_desktop_option(populated_tree: XdgTree, cli_state: Callable[[], CLIContext]) -> None:
    result = _invoke(cli_state(), "--desktop", "KDE", "paths")

    assert result.exit_code == 0
    assert str(populated_tree.config_home / "kde-mimeapps.list") in result.stdout
    assert "[user]" in result.stdout


def test_show_unknown_application_fails(cli_state: Callable[[], CLIContext]) -> None:
    result = _invoke(cli_state(), "show", "Nobody")

    assert result.exit_code == EXIT_FAILURE
    assert "unknown application: Nobody" in result.stdout


def test_set_with_overwrite_writes_user_file(populated_tree: XdgTree, cli_state: Callable[[], CLIContext]) -> None:
    populated_tree.write_mimeapps(populated_tree.config_home, "[Default Applications]\nimage/png=viewerB.desktop\n")

    result = _invoke(cli_state(), "set", "Viewer A", "image/png", "--overwrite")

    assert result.exit_code == 0
    assert "viewerA.desktop now opens image/png" in result.stdout
    assert "image/png=viewerA.desktop" in populated_tree.user_file.read_text(encoding="utf-8")


def test_set_declined_conflict_cancels(populated_tree: XdgTree, cli_state: Callable[[], CLIContext]) -> None:
    original = "[Default Applications]\nimage/png=viewerB.desktop\n"
    populated_tree.write_mimeapps(populated_tree.config_home, original)

    result = _invoke(cli_state(), "set", "Viewer A", "image/png", input_text="n\n")

    assert result.exit_code == EXIT_CANCELLED
    assert populated_tree.user_file.read_text(encoding="utf-8") == original


def test_set_without_types_uses_declared_types(populated_tree: XdgTree, cli_state: Callable[[], CLIContext]) -> None:
    result = _invoke(cli_state(), "set", "Viewer A")

    assert result.exit_code == 0
    content = populated_tree.user_file.read_text(encoding="utf-8")
    assert "image/jpeg=viewerA.desktop" in content
    assert "image/png=viewerA.desktop" in content


def test_unset_removes_lines(populated_tree: XdgTree, cli_state: Callable[[], CLIContext]) -> None:
    populated_tree.write_mimeapps(populated_tree.config_home, "[Default Applications]\nimage/png=viewerB.desktop\n")

    first = _invoke(cli_state(), "unset", "image/png")
    second = _invoke(cli_state(), "unset", "image/png")

    assert first.exit_code == 0
    assert "Removed 1 association line(s)" in first.stdout
    assert second.exit_code == 0
    assert "No user defaults matched" in second.stdout


def test_invalid_settings_file_exits_with_failure(tmp_path: Path, cli_state: Callable[[], CLIContext]) -> None:
    config = tmp_path / "bad.toml"
    config.write_text("verbose = [", encoding="utf-8")

    result = _invoke(cli_state(), "--config", str(config), "apps")

    assert result.exit_code == EXIT_FAILURE
    assert "invalid TOML" in result.stdout
