"""Exception types raised inside pagemark.

None of these escape the public API: ``BookmarkStore.get``/``save`` catch
them, log, and fall back to ``NO_BOOKMARK`` or ``False``.  I/O failures use
the built-in ``OSError`` family.
"""

from __future__ import annotations


class PagemarkError(Exception):
    """Base class for pagemark errors."""


class StoreLocationError(PagemarkError, LookupError):
    """No home directory could be determined for the bookmark store."""


class RecordError(PagemarkError, ValueError):
    """A stored page number is not a usable positive integer."""

    def __init__(self, docpath: str, raw: str, reason: str) -> None:
        super().__init__(f"bad bookmark for {docpath!r}: {raw!r} ({reason})")
        self.docpath = docpath
        self.raw = raw
        self.reason = reason
