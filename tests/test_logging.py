# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for console and logging helpers."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from mimeassoc.console import get_console_manager
from mimeassoc.logging import configure_logging, emoji, ok, warn


def test_configure_logging_installs_single_rich_handler() -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    handlers = [handler for handler in logger.handlers if isinstance(handler, RichHandler)]
    assert len(handlers) == 1
    assert handlers[0].console.stderr
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_plain_messages_respect_emoji_preference(capsys: pytest.CaptureFixture[str]) -> None:
    get_console_manager().clear()
    ok("written", use_emoji=False, use_color=False)
    warn("careful", use_emoji=True, use_color=False)

    captured = capsys.readouterr().out.splitlines()
    assert captured[0] == "written"
    assert captured[1].endswith("careful")
    assert emoji("✅", False) == ""
