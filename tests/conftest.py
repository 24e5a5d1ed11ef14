"""Shared test fixtures for the pagemark test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

import pagemark
from pagemark import BookmarkStore


@pytest.fixture(autouse=True)
def _reset_api_store():
    """Never let one test's ``configure()`` leak into the next."""
    pagemark.reset()
    yield
    pagemark.reset()


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the home directory at a temp dir so nothing touches the real one."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    return home_dir


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / ".pagemark_bookmarks"


@pytest.fixture
def store(store_path: Path) -> BookmarkStore:
    return BookmarkStore(store_path, lock_timeout=0.2)

