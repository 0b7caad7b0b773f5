"""Shared fixtures for annotated error tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from packages.brain_errors import configure


@pytest.fixture(autouse=True)
def default_error_settings() -> Iterator[None]:
    """Start and finish every test with the built-in configuration."""
    configure()
    yield
    configure()
