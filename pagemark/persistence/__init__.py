"""Persistence layer – the bookmark store owns its file path, format, and I/O."""

from .bookmarks import BookmarkStore
from .records import Bookmark

__all__ = [
    "Bookmark",
    "BookmarkStore",
]
