"""Line reading and advisory locking helpers for the flat-file stores."""

from __future__ import annotations

import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from ..constants import LOCK_POLL_INTERVAL
from ..log import logger

try:
    import fcntl
except ImportError:  # Windows: locking is a no-op there
    fcntl = None  # type: ignore[assignment]

HAVE_FLOCK = fcntl is not None


def iter_lines(fh: IO[str]) -> Iterator[str]:
    """Yield lines from *fh* one at a time, newline included.

    Only a final unterminated line comes back without its newline.  A fresh
    generator picks up wherever the handle currently is.
    """
    while True:
        line = fh.readline()
        if not line:
            return
        yield line


def lock_file(fh: IO, *, exclusive: bool = False, timeout: float = 0.0) -> bool:
    """Take a whole-file advisory lock on *fh*.

    With ``timeout=0`` this is a single non-blocking attempt; otherwise the
    attempt is repeated until *timeout* seconds have passed.  Returns False
    when the lock could not be taken.
    """
    if fcntl is None:
        return True
    operation = (fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH) | fcntl.LOCK_NB
    deadline = time.monotonic() + timeout
    while True:
        try:
            fcntl.flock(fh.fileno(), operation)
            return True
        except BlockingIOError:
            if time.monotonic() >= deadline:
                logger.debug("lock on %s is busy", getattr(fh, "name", fh))
                return False
            time.sleep(LOCK_POLL_INTERVAL)
        except OSError:
            logger.warning("flock failed on %s", getattr(fh, "name", fh), exc_info=True)
            return False


def unlock_file(fh: IO) -> None:
    """Release a lock taken with ``lock_file``.

    A failure here is only logged: closing the handle drops the lock anyway.
    """
    if fcntl is None or fh.closed:
        return
    try:
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    except OSError:
        logger.warning("flock unlock failed on %s", getattr(fh, "name", fh), exc_info=True)


@contextmanager
def locked(fh: IO, *, exclusive: bool = False, timeout: float = 0.0) -> Iterator[bool]:
    """Hold a lock on *fh* for the ``with`` body; yields whether it was taken."""
    acquired = lock_file(fh, exclusive=exclusive, timeout=timeout)
    try:
        yield acquired
    finally:
        if acquired:
            unlock_file(fh)


def same_file(fh: IO, path: Path) -> bool:
    """True when the open handle *fh* is still the file found at *path*.

    A writer that replaced the store by rename leaves earlier handles
    pointing at an orphaned inode.
    """
    try:
        return os.path.samestat(os.fstat(fh.fileno()), os.stat(path))
    except OSError:
        return False
