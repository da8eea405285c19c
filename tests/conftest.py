"""Pytest configuration."""
import sys
from pathlib import Path

import pytest

# Ensure project root is importable regardless of where pytest is invoked
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from common.rng import make_rng  # noqa: E402


@pytest.fixture
def rng():
    """Seeded generator so every test run draws the same numbers."""
    return make_rng(1234)


@pytest.fixture
def csv_history(tmp_path: Path, monkeypatch):
    """Route the history store to a throwaway CSV directory."""
    from storage import database
    monkeypatch.setattr(database, "USE_POSTGRES", False)
    monkeypatch.setattr(database, "DATA_DIR", tmp_path)
    return tmp_path
