"""Bookmark persistence store.

One line per document in ``~/.<app>_bookmarks``::

    /home/me/docs/manual.pdf = 42

Readers take a shared lock with a single non-blocking attempt and report
``NO_BOOKMARK`` when they can't get it.  Writers hold an exclusive lock for
the whole read-rewrite-replace cycle, build the new file next to the store
and rename it into place, so readers only ever see a complete file.
"""

from __future__ import annotations

import errno
import os
import shutil
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import IO, TYPE_CHECKING

from ..constants import (
    DEFAULT_APP_NAME,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_WRITE_RETRIES,
    MAX_LOCK_TIMEOUT,
    NO_BOOKMARK,
    TMP_SUFFIX,
)
from ..errors import RecordError, StoreLocationError
from ..log import logger
from ..platform import IS_WINDOWS, bookmarks_path
from ._io import iter_lines, locked, same_file
from .records import (
    Bookmark,
    format_record,
    is_valid_pageno,
    key_prefix,
    parse_pageno,
    split_record,
)

if TYPE_CHECKING:
    from ..preferences import Preferences

# surrogateescape lets undecodable bytes in docpaths and in foreign lines
# pass through a rewrite unchanged.
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _open_text(fd_or_path, mode: str) -> IO[str]:
    return open(fd_or_path, mode, encoding=_ENCODING, errors=_ERRORS, newline="")


class BookmarkStore:
    """Last-read page per document path, kept in a flat text file.

    *path* pins the store file; when None it is resolved from the home
    directory on every call.  *scratch_dir* is where replacement files are
    built (the store's own directory when None).
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        app_name: str = DEFAULT_APP_NAME,
        scratch_dir: Path | None = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        write_retries: int = DEFAULT_WRITE_RETRIES,
    ) -> None:
        self.path = path
        self.app_name = app_name
        self.scratch_dir = scratch_dir
        # max() turns NaN into 0; min() caps infinity
        self.lock_timeout = min(max(0.0, lock_timeout), MAX_LOCK_TIMEOUT)
        self.write_retries = max(1, write_retries)

    @classmethod
    def from_preferences(cls, prefs: Preferences) -> BookmarkStore:
        """Build a store from a ``Preferences`` instance."""
        store_prefs = prefs.store
        return cls(
            Path(store_prefs.path).expanduser() if store_prefs.path else None,
            app_name=store_prefs.app_name,
            scratch_dir=(
                Path(store_prefs.scratch_dir).expanduser()
                if store_prefs.scratch_dir
                else None
            ),
            lock_timeout=prefs.locking.timeout,
            write_retries=prefs.locking.write_retries,
        )

    def resolve_path(self) -> Path:
        """Return the store file path; raises ``StoreLocationError``."""
        if self.path is not None:
            return self.path
        return bookmarks_path(self.app_name)

    # -- read path -------------------------------------------------------------

    def get(self, docpath: str | bytes | os.PathLike | None) -> int:
        """Return the saved page for *docpath*, or ``NO_BOOKMARK``."""
        docpath = _as_key(docpath)
        if docpath is None:
            return NO_BOOKMARK
        try:
            path = self.resolve_path()
        except StoreLocationError:
            logger.warning("can't get bookmark file", exc_info=True)
            return NO_BOOKMARK

        try:
            with _open_text(path, "r") as fh, locked(fh) as acquired:
                if not acquired:
                    logger.debug("bookmark store %s is busy, no bookmark", path)
                    return NO_BOOKMARK
                return _find_pageno(fh, docpath)
        except FileNotFoundError:
            logger.debug("no bookmark store at %s", path)
        except (OSError, ValueError):
            logger.warning("failed to read bookmark store %s", path, exc_info=True)
        return NO_BOOKMARK

    def records(self) -> list[Bookmark]:
        """Return every readable record in file order.

        Later duplicates of a docpath and unparseable lines are skipped.
        """
        try:
            path = self.resolve_path()
        except StoreLocationError:
            logger.warning("can't get bookmark file", exc_info=True)
            return []

        found: list[Bookmark] = []
        seen: set[str] = set()
        try:
            with _open_text(path, "r") as fh, locked(fh) as acquired:
                if not acquired:
                    logger.debug("bookmark store %s is busy", path)
                    return []
                for line in iter_lines(fh):
                    parts = split_record(line)
                    if parts is None or parts[0] in seen:
                        continue
                    docpath, raw = parts
                    seen.add(docpath)
                    try:
                        found.append(Bookmark(docpath, parse_pageno(docpath, raw)))
                    except RecordError as exc:
                        logger.debug("skipping record: %s", exc)
        except FileNotFoundError:
            logger.debug("no bookmark store at %s", path)
        except (OSError, ValueError):
            logger.warning("failed to read bookmark store %s", path, exc_info=True)
        return found

    # -- write path ------------------------------------------------------------

    def save(self, docpath: str | bytes | os.PathLike | None, pageno: int) -> bool:
        """Persist *pageno* for *docpath*; returns True once it is on disk.

        ``NO_BOOKMARK`` (or a missing docpath) means there is nothing to save
        and leaves the store untouched.  Failures are logged, never raised,
        and leave the previous store contents in place.
        """
        docpath = _as_key(docpath)
        if docpath is None or pageno == NO_BOOKMARK:
            return False
        if not is_valid_pageno(pageno):
            logger.warning("refusing to save page %r for %s", pageno, docpath)
            return False
        try:
            path = self.resolve_path()
        except StoreLocationError:
            logger.warning("can't get bookmark file", exc_info=True)
            return False

        try:
            return self._save(path, docpath, pageno)
        except (OSError, ValueError):
            logger.warning(
                "failed to save bookmark for %s in %s", docpath, path, exc_info=True
            )
            return False

    def _save(self, path: Path, docpath: str, pageno: int) -> bool:
        for attempt in range(1, self.write_retries + 1):
            with _open_store(path) as store, locked(
                store, exclusive=True, timeout=self.lock_timeout
            ) as acquired:
                if not acquired:
                    logger.warning("bookmark store %s is locked, not saving", path)
                    return False
                if not same_file(store, path):
                    # Another writer renamed a new store into place while we
                    # waited on the old one.
                    logger.debug(
                        "bookmark store %s was replaced, reopening (attempt %d)",
                        path,
                        attempt,
                    )
                    continue
                self._rewrite(store, path, docpath, pageno)
                return True
        logger.warning(
            "bookmark store %s kept changing, gave up after %d attempts",
            path,
            self.write_retries,
        )
        return False

    def _rewrite(self, store: IO[str], path: Path, docpath: str, pageno: int) -> None:
        """Build the updated store in a temp file and swap it in.

        Caller holds the exclusive lock on *store*.
        """
        scratch = self.scratch_dir or path.parent
        fd, tmp_name = tempfile.mkstemp(
            prefix=path.name + ".", suffix=TMP_SUFFIX, dir=scratch
        )
        tmp_path = Path(tmp_name)
        try:
            with _open_text(fd, "w") as tmp:
                store.seek(0)
                _copy_with_update(store, tmp, docpath, pageno)
                tmp.flush()
                os.fsync(tmp.fileno())
            _replace(tmp_path, path, store)
        finally:
            with suppress(FileNotFoundError):
                tmp_path.unlink()


def _as_key(docpath: str | bytes | os.PathLike | None) -> str | None:
    if not docpath:
        return None
    try:
        key = os.fspath(docpath)
    except TypeError:
        logger.warning("not a document path: %r", docpath)
        return None
    # bytes paths are decoded the way the filesystem encodes them
    return os.fsdecode(key) if isinstance(key, bytes) else key


def _open_store(path: Path) -> IO[str]:
    """Open the store read+write, creating it empty if needed."""
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o600)
    try:
        return _open_text(fd, "r+")
    except BaseException:
        os.close(fd)
        raise


def _find_pageno(fh: IO[str], docpath: str) -> int:
    """Scan *fh* for the first record of *docpath* and parse its page."""
    prefix = key_prefix(docpath)
    for line in iter_lines(fh):
        if not line.startswith(prefix):
            continue
        try:
            return parse_pageno(docpath, line[len(prefix):])
        except RecordError as exc:
            logger.warning("%s", exc)
            return NO_BOOKMARK
    return NO_BOOKMARK


def _copy_with_update(src: IO[str], dst: IO[str], docpath: str, pageno: int) -> bool:
    """Copy *src* to *dst*, replacing the first record of *docpath*.

    Appends a new record when there was none.  Returns True if an existing
    record was replaced.
    """
    prefix = key_prefix(docpath)
    replaced = False
    last = ""
    for line in iter_lines(src):
        if not replaced and line.startswith(prefix):
            dst.write(format_record(docpath, pageno))
            replaced = True
        else:
            dst.write(line)
        last = line
    if not replaced:
        if last and not last.endswith(("\n", "\r")):
            dst.write("\n")
        dst.write(format_record(docpath, pageno))
    return replaced


def _replace(tmp_path: Path, path: Path, store: IO[str]) -> None:
    """Move *tmp_path* over *path*.

    Falls back to copying into the (locked) *store* handle when a rename is
    impossible: scratch dir on another filesystem, or Windows refusing to
    replace an open file.
    """
    try:
        os.replace(tmp_path, path)
        return
    except OSError as exc:
        if exc.errno != errno.EXDEV and not IS_WINDOWS:
            raise
        logger.debug("rename into %s failed (%s), copying instead", path, exc)

    with _open_text(tmp_path, "r") as tmp:
        store.seek(0)
        store.truncate()
        shutil.copyfileobj(tmp, store)
        store.flush()
        os.fsync(store.fileno())
