"""Module-level bookmark functions for the document viewer.

Both functions go through a process-wide ``BookmarkStore``: a default one
resolving ``~/.pagemark_bookmarks`` per call, or whatever ``configure()``
installed.  Neither ever raises.
"""

from __future__ import annotations

import os
from pathlib import Path

from .persistence import BookmarkStore
from .preferences import Preferences, load_preferences

_store: BookmarkStore | None = None


def configure(
    prefs: Preferences | None = None, prefs_path: Path | None = None
) -> BookmarkStore:
    """Install the store used by ``read_bookmark`` / ``save_bookmark``.

    Loads preferences from *prefs_path* (or the default location) unless
    *prefs* is given.
    """
    global _store
    _store = BookmarkStore.from_preferences(prefs or load_preferences(prefs_path))
    return _store


def reset() -> None:
    """Drop any configured store and go back to defaults."""
    global _store
    _store = None


def current_store() -> BookmarkStore:
    return _store if _store is not None else BookmarkStore()


def read_bookmark(docpath: str | bytes | os.PathLike | None) -> int:
    """Return the saved page number for *docpath*, or ``NO_BOOKMARK`` (-1)."""
    return current_store().get(docpath)


def save_bookmark(docpath: str | bytes | os.PathLike | None, pageno: int) -> None:
    """Save *pageno* for *docpath*.  ``NO_BOOKMARK`` is a no-op, not a delete."""
    current_store().save(docpath, pageno)
