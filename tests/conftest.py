from __future__ import annotations

import os
import sys
from pathlib import Path

# Add project src/ to sys.path for imports like `testbench.*`
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest


@pytest.fixture(autouse=True)
def restore_environ():
    """Bootstrapping writes to os.environ; put it back after every test."""
    original = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original)


@pytest.fixture
def working_path(tmp_path: Path) -> Path:
    """A package directory with an app skeleton under ./app."""
    package = tmp_path / "package"
    (package / "app").mkdir(parents=True)
    return package


@pytest.fixture
def clean_app_env(monkeypatch):
    """Remove variables the default environment would otherwise not override."""
    for key in ("APP_ENV", "APP_KEY", "APP_DEBUG", "DB_CONNECTION"):
        monkeypatch.delenv(key, raising=False)
