# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for rewriting the user's association file."""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path

import pytest

from mimeassoc.descriptors import ApplicationCatalog
from mimeassoc.errors import DefaultsWriteError
from mimeassoc.mimedb import StaticTypeDatabase
from mimeassoc.writer import (
    Conflict,
    WriteStatus,
    atomic_write,
    decline_all,
    overwrite_all,
    plan_set_defaults,
    remove_defaults,
    set_defaults,
    strip_defaults,
)

CATALOG = ApplicationCatalog(
    apps={
        "Viewer A": {"image/png": "viewerA.desktop", "image/jpeg": "viewerA.desktop"},
        "Viewer B": {"image/png": "viewerB.desktop"},
        "Certificates": {"application/x-pkcs12": "certmgr.desktop"},
        "Coder": {"text/x-csrc": "coder.desktop"},
    },
)

EXISTING = """\
# managed by hand
[Added Associations]
image/png=viewerB.desktop;

[Default Applications]
text/plain=editor.desktop
image/png=viewerB.desktop

[Unknown Section]
keep=me
"""


def test_set_defaults_creates_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "config" / "mimeapps.list"

    result = set_defaults(path, CATALOG, "Viewer A", ["image/png", "image/jpeg"], decline_all)

    assert result.status is WriteStatus.APPLIED
    assert result.written == {"image/jpeg": "viewerA.desktop", "image/png": "viewerA.desktop"}
    assert result.by_descriptor == {"viewerA.desktop": ("image/jpeg", "image/png")}
    assert path.read_text(encoding="utf-8") == (
        "[Default Applications]\nimage/jpeg=viewerA.desktop\nimage/png=viewerA.desktop\n"
    )


def test_conflict_names_existing_default(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text(EXISTING, encoding="utf-8")
    seen: list[Conflict] = []

    def _record(conflicts: Collection[Conflict]) -> set[str]:
        seen.extend(conflicts)
        return set()

    result = set_defaults(path, CATALOG, "Viewer A", ["image/png"], _record)

    assert seen == [Conflict(content_type="image/png", current="viewerB.desktop")]
    assert result.status is WriteStatus.CANCELLED
    assert path.read_text(encoding="utf-8") == EXISTING


def test_overwrite_preserves_unrelated_lines(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text(EXISTING, encoding="utf-8")

    result = set_defaults(path, CATALOG, "Viewer A", ["image/png", "image/jpeg"], overwrite_all)

    assert result.status is WriteStatus.APPLIED
    lines = path.read_text(encoding="utf-8").splitlines()
    preserved = (
        "# managed by hand",
        "[Added Associations]",
        "image/png=viewerB.desktop;",
        "[Unknown Section]",
        "keep=me",
        "text/plain=editor.desktop",
    )
    for line in preserved:
        assert line in lines
    assert lines.count("[Default Applications]") == 1
    assert "image/png=viewerA.desktop" in lines
    assert "image/png=viewerB.desktop" not in lines
    assert lines[-2:] == ["image/jpeg=viewerA.desktop", "image/png=viewerA.desktop"]


def test_partial_approval_keeps_declined_conflicts(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("[Default Applications]\nimage/png=viewerB.desktop\nimage/jpeg=other.desktop\n", encoding="utf-8")

    result = set_defaults(path, CATALOG, "Viewer A", ["image/png", "image/jpeg"], lambda conflicts: {"image/jpeg"})

    assert result.kept == ("image/png",)
    assert result.written == {"image/jpeg": "viewerA.desktop"}
    content = path.read_text(encoding="utf-8")
    assert "image/png=viewerB.desktop" in content
    assert "image/jpeg=viewerA.desktop" in content


def test_only_undeclared_types_leave_file_untouched(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("[Default Applications]\nimage/jpeg=viewerA.desktop\n", encoding="utf-8")

    plan = plan_set_defaults(path.read_text(encoding="utf-8"), CATALOG, "Viewer B", ["image/jpeg"])
    result = set_defaults(path, CATALOG, "Viewer B", ["image/jpeg"], decline_all)

    assert plan.conflicts == []
    assert plan.undeclared == {"image/jpeg"}
    assert plan.preserved_associations == []
    assert result.status is WriteStatus.UNCHANGED
    assert path.read_text(encoding="utf-8") == "[Default Applications]\nimage/jpeg=viewerA.desktop\n"


def test_undeclared_type_line_is_dropped_and_not_rewritten(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("[Default Applications]\nimage/jpeg=viewerA.desktop\nimage/png=viewerB.desktop\n", encoding="utf-8")

    result = set_defaults(path, CATALOG, "Viewer B", ["image/png", "image/jpeg"], decline_all)

    assert result.status is WriteStatus.APPLIED
    assert result.conflicts == ()
    assert result.written == {"image/png": "viewerB.desktop"}
    assert path.read_text(encoding="utf-8") == "[Default Applications]\nimage/png=viewerB.desktop\n"


def test_existing_default_matching_request_is_not_a_conflict() -> None:
    plan = plan_set_defaults("[Default Applications]\nimage/png=viewerA.desktop\n", CATALOG, "Viewer A", ["image/png"])

    assert plan.conflicts == []
    assert plan.requested == {"image/png"}
    assert plan.preserved_associations == []


def test_legacy_alias_lines_are_replaced(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("[Default Applications]\napplication/pkcs12=certmgr.desktop\n", encoding="utf-8")

    result = set_defaults(path, CATALOG, "Certificates", ["application/pkcs12"], decline_all)

    assert result.status is WriteStatus.APPLIED
    assert path.read_text(encoding="utf-8") == "[Default Applications]\napplication/x-pkcs12=certmgr.desktop\n"


def test_strip_defaults_only_touches_default_and_added_sections() -> None:
    kept, dropped = strip_defaults(EXISTING + "[Removed Associations]\nimage/png=x.desktop\n", {"image/png"})

    assert dropped == 2
    assert "image/png=x.desktop" in kept
    assert "text/plain=editor.desktop" in kept


def test_remove_defaults_is_noop_without_match(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text(EXISTING, encoding="utf-8")
    before = path.stat().st_mtime_ns

    assert remove_defaults(path, ["application/pdf"]) == 0
    assert remove_defaults(tmp_path / "absent.list", ["image/png"]) == 0
    assert path.read_text(encoding="utf-8") == EXISTING
    assert path.stat().st_mtime_ns == before
    assert not (tmp_path / "absent.list").exists()


def test_remove_defaults_handles_legacy_alias(tmp_path: Path) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("[Default Applications]\napplication/pkcs12=certmgr.desktop\ntext/plain=editor.desktop\n", encoding="utf-8")

    assert remove_defaults(path, ["application/x-pkcs12"]) == 1
    assert path.read_text(encoding="utf-8") == "[Default Applications]\ntext/plain=editor.desktop\n"


def test_atomic_write_failure_leaves_target_untouched(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("original\n", encoding="utf-8")

    def _fail(src: object, dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("mimeassoc.writer.os.replace", _fail)

    with pytest.raises(DefaultsWriteError, match="disk full"):
        atomic_write(path, "new\n")

    assert path.read_text(encoding="utf-8") == "original\n"
    assert sorted(entry.name for entry in tmp_path.iterdir()) == ["mimeapps.list"]


def test_symlinked_user_file_is_written_through(tmp_path: Path) -> None:
    dotfile = tmp_path / "dotfiles" / "mimeapps.list"
    dotfile.parent.mkdir()
    dotfile.write_text("[Default Applications]\ntext/plain=editor.desktop\n", encoding="utf-8")
    link = tmp_path / "config" / "mimeapps.list"
    link.parent.mkdir()
    link.symlink_to(dotfile)

    result = set_defaults(link, CATALOG, "Viewer A", ["image/png"], overwrite_all)

    assert result.status is WriteStatus.APPLIED
    assert link.is_symlink()
    assert dotfile.read_text(encoding="utf-8") == (
        "[Default Applications]\ntext/plain=editor.desktop\nimage/png=viewerA.desktop\n"
    )
    assert sorted(entry.name for entry in link.parent.iterdir()) == ["mimeapps.list"]


def test_database_aliases_match_existing_lines(tmp_path: Path, database: StaticTypeDatabase) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("[Default Applications]\ntext/x-c=old.desktop\n", encoding="utf-8")

    result = set_defaults(path, CATALOG, "Coder", ["text/x-c"], overwrite_all, database=database)

    assert result.conflicts == (Conflict(content_type="text/x-csrc", current="old.desktop"),)
    assert path.read_text(encoding="utf-8") == "[Default Applications]\ntext/x-csrc=coder.desktop\n"


def test_remove_defaults_matches_database_aliases(tmp_path: Path, database: StaticTypeDatabase) -> None:
    path = tmp_path / "mimeapps.list"
    path.write_text("[Default Applications]\ntext/x-c=old.desktop\nimage/png=viewerA.desktop\n", encoding="utf-8")

    assert remove_defaults(path, ["text/x-csrc"], database) == 1
    assert path.read_text(encoding="utf-8") == "[Default Applications]\nimage/png=viewerA.desktop\n"


def test_ready_made_resolvers() -> None:
    conflicts = [Conflict(content_type="image/png", current="viewerB.desktop")]

    assert overwrite_all(conflicts) == {"image/png"}
    assert decline_all(conflicts) == set()
