# tests/conftest.py
from __future__ import annotations

import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from core.results import IResultHandler
from core.time import BacktestClock

FIXED_NOW = datetime(2024, 3, 15, 14, 30, tzinfo=timezone.utc)


# -------------------------
# Fakes
# -------------------------

class RecordingResultHandler(IResultHandler):
    """IResultHandler fake that records what it was told."""

    def __init__(self):
        self.errors = []
        self.runtime_errors = []

    def error_message(self, message: str) -> None:
        self.errors.append(message)

    def runtime_error(self, message: str) -> None:
        self.runtime_errors.append(message)


# -------------------------
# Fixtures
# -------------------------

@pytest.fixture
def fixed_clock() -> BacktestClock:
    """Clock frozen at FIXED_NOW."""
    return BacktestClock(FIXED_NOW)


@pytest.fixture
def write_artifact(tmp_path: Path) -> Callable[..., Path]:
    """
    Write algorithm source to a .py artifact and return its path.

    The source is dedented and prefixed with the QCAlgorithm import.
    """
    def _write(source: str, name: str = "artifact") -> Path:
        path = tmp_path / f"{name}.py"
        body = textwrap.dedent(source)
        path.write_text("from core.algorithm import QCAlgorithm\n\n" + body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def result_handler() -> RecordingResultHandler:
    return RecordingResultHandler()
