"""Cross-platform path resolution for pagemark.

Detects the runtime platform once at import time and works out where the
bookmark store lives.  Every other module imports from here instead of
doing its own platform or home-directory detection.

Supported platforms:
  - posix   (Linux, macOS, WSL: $HOME, then the password database)
  - windows (native Windows: %USERPROFILE%, then %HOMEDRIVE%%HOMEPATH%)
"""

from __future__ import annotations

import os
import platform
from pathlib import Path

from .constants import BOOKMARKS_FILE, DEFAULT_APP_NAME
from .errors import StoreLocationError
from .log import logger

try:
    import pwd
except ImportError:  # Windows has no password database
    pwd = None  # type: ignore[assignment]

# ---------------------------------------------------------------------------
# Platform detection (runs once at import time)
# ---------------------------------------------------------------------------

_system = platform.system()  # "Linux", "Darwin", "Windows"

IS_WINDOWS = _system == "Windows"

# ---------------------------------------------------------------------------
# Home directory
# ---------------------------------------------------------------------------


def _posix_home() -> str:
    home = os.environ.get("HOME")
    if home:
        return home
    logger.warning("env HOME not set, falling back to the password database")
    if pwd is None:
        raise StoreLocationError("HOME is not set and no password database is available")

    try:
        entry = pwd.getpwuid(os.geteuid())
    except KeyError:
        logger.debug("no passwd entry for uid %s", os.geteuid(), exc_info=True)
        entry = None
    if entry is None or not entry.pw_dir:
        # Last resort: look the login name up instead of the uid.
        user = os.environ.get("USER")
        if not user:
            raise StoreLocationError("HOME and USER are not set, no passwd entry for uid")
        try:
            entry = pwd.getpwnam(user)
        except KeyError as exc:
            raise StoreLocationError(f"no passwd entry for user {user!r}") from exc
    if not entry.pw_dir:
        raise StoreLocationError(f"passwd entry for {entry.pw_name!r} has no home directory")
    return entry.pw_dir


def _windows_home() -> str:
    profile = os.environ.get("USERPROFILE")
    if profile:
        return profile
    logger.warning("env USERPROFILE not set, falling back to HOMEDRIVE/HOMEPATH")
    drive = os.environ.get("HOMEDRIVE")
    path = os.environ.get("HOMEPATH")
    if not drive or not path:
        raise StoreLocationError(f"HOMEDRIVE: {drive!r}, HOMEPATH: {path!r}")
    return drive + path


def home_dir() -> Path:
    """Return the current user's home directory.

    Raises ``StoreLocationError`` when neither the environment nor the
    platform's user database yields one.
    """
    return Path(_windows_home() if IS_WINDOWS else _posix_home())


def bookmarks_path(app_name: str = DEFAULT_APP_NAME) -> Path:
    """Return ``<home>/.<app_name>_bookmarks``.

    Not cached: the home directory is looked up again on every call.
    """
    return home_dir() / BOOKMARKS_FILE.format(app=app_name)


def pagemark_home() -> Path:
    """Return ``~/.pagemark``, the directory holding pagemark's own config."""
    return home_dir() / ".pagemark"
