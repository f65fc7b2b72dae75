# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest
from xdg_layout import XdgTree

from mimeassoc.engine import AssociationEngine
from mimeassoc.mimedb import StaticTypeDatabase

KNOWN_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/x-pkcs12",
    "image/jpeg",
    "image/png",
    "text/html",
    "text/plain",
    "text/x-csrc",
)


@pytest.fixture
def database() -> StaticTypeDatabase:
    """Return a small type database with one alias and a parent chain."""

    return StaticTypeDatabase(
        KNOWN_TYPES,
        aliases={"application/pkcs12": "application/x-pkcs12", "text/x-c": "text/x-csrc"},
        parents={
            "text/x-csrc": ("text/plain",),
            "text/html": ("text/plain",),
            "application/pdf": ("application/octet-stream",),
        },
        descriptions={"text/plain": "plain text document", "image/png": "PNG image"},
    )


@pytest.fixture
def xdg_tree(tmp_path: Path) -> XdgTree:
    """Return an empty XDG layout below ``tmp_path``."""

    tree = XdgTree(tmp_path)
    tree.config_home.mkdir(parents=True)
    tree.data_dir.mkdir(parents=True)
    return tree


@pytest.fixture
def populated_tree(xdg_tree: XdgTree) -> XdgTree:
    """Return a layout with an editor, two viewers, and a certificate manager."""

    xdg_tree.write_descriptor("editor.desktop", name="Editor", mime_types=["text/plain"], icon="accessories-text-editor")
    xdg_tree.write_descriptor("viewerA.desktop", name="Viewer A", mime_types=["image/png", "image/jpeg"], icon="viewer-a")
    xdg_tree.write_descriptor("viewerB.desktop", name="Viewer B", mime_types=["image/png"])
    xdg_tree.write_descriptor("certmgr.desktop", name="Certificates", mime_types=["application/pkcs12"])
    return xdg_tree


@pytest.fixture
def engine_factory(database: StaticTypeDatabase) -> Callable[..., AssociationEngine]:
    """Return a callable building an engine for an :class:`XdgTree`."""

    def _build(tree: XdgTree, desktops: Sequence[str] = ()) -> AssociationEngine:
        return AssociationEngine(tree.environment(desktops), database)

    return _build


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    """Undo handler changes made by ``configure_logging`` during a test."""

    logger = logging.getLogger("mimeassoc")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
