"""Shared fixtures for the trading-psychology test suite."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest


@pytest.fixture
def base_time() -> datetime:
    return datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by ``setup_logging``."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
