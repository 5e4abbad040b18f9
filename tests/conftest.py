"""Shared fixtures for the trading-journal test suite."""

from __future__ import annotations

import logging
import os

import pytest
import structlog


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo any setup_logging() call made by a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _no_journal_env(monkeypatch):
    """Keep JOURNAL_* variables from the developer's shell out of Settings()."""
    for name in list(os.environ):
        if name.upper().startswith("JOURNAL_"):
            monkeypatch.delenv(name)
