# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for type-name normalisation and database adapters."""

from __future__ import annotations

from pathlib import Path

from mimeassoc.interfaces import TypeDatabase
from mimeassoc.mimedb import (
    SharedMimeInfoDatabase,
    StaticTypeDatabase,
    describe_type,
    fix_legacy_alias,
    is_scheme_handler,
    normalize_type,
    type_group,
)


def test_normalize_type_resolves_aliases(database: StaticTypeDatabase) -> None:
    assert normalize_type(database, " text/x-c ") == "text/x-csrc"
    assert normalize_type(database, "application/pkcs12") == "application/x-pkcs12"
    assert normalize_type(database, "application/x-unknown") is None
    assert normalize_type(database, "") is None


def test_normalize_type_accepts_scheme_handlers_verbatim(database: StaticTypeDatabase) -> None:
    assert normalize_type(database, "x-scheme-handler/https") == "x-scheme-handler/https"
    assert not is_scheme_handler("x-scheme-handler/")


def test_legacy_alias_applies_even_when_database_reports_it() -> None:
    database = StaticTypeDatabase(["application/pkcs12"])

    assert normalize_type(database, "application/pkcs12") == "application/x-pkcs12"
    assert fix_legacy_alias("text/plain") == "text/plain"


def test_describe_type(database: StaticTypeDatabase) -> None:
    assert describe_type(database, "x-scheme-handler/ssh") == "Handles ssh:// URIs"
    assert describe_type(database, "text/plain") == "plain text document"
    assert describe_type(database, "image/jpeg") == "image/jpeg"


def test_type_group() -> None:
    assert type_group("image/png") == "image"
    assert type_group("nonsense") is None


def test_databases_satisfy_protocol(database: StaticTypeDatabase, tmp_path: Path) -> None:
    assert isinstance(database, TypeDatabase)
    assert isinstance(SharedMimeInfoDatabase([tmp_path]), TypeDatabase)


def test_shared_mime_info_reads_type_registries(tmp_path: Path) -> None:
    local = tmp_path / "local"
    system = tmp_path / "system"
    (local / "mime").mkdir(parents=True)
    (system / "mime").mkdir(parents=True)
    (local / "mime" / "types").write_text("text/x-local\n", encoding="utf-8")
    (system / "mime" / "types").write_text("text/plain\nimage/png\n\n", encoding="utf-8")

    database = SharedMimeInfoDatabase([local, tmp_path / "missing", system])

    assert database.known_types == frozenset({"text/x-local", "text/plain", "image/png"})
    assert database.normalize("image/png") == "image/png"
    assert database.normalize("image/x-not-registered") is None
    assert database.normalize("not a type") is None
