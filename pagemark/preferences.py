"""User preferences for pagemark.

Loads store and locking settings from ~/.pagemark/preferences.yaml.
Falls back to sensible defaults if the file doesn't exist or is invalid.
Creates a default file on first run so users can discover and edit it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import (
    DEFAULT_APP_NAME,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_WRITE_RETRIES,
    MAX_LOCK_TIMEOUT,
)
from .errors import StoreLocationError
from .log import logger
from .platform import pagemark_home

PREFS_FILENAME = "preferences.yaml"

_DEFAULT_YAML = """\
# pagemark preferences
# Delete this file to reset to defaults.

store:
  app_name: "pagemark"   # store file is ~/.<app_name>_bookmarks
  path: ""               # explicit store path; empty = resolve from home
  scratch_dir: ""        # where temp files are built; empty = next to store

locking:
  timeout: 1.0           # seconds a writer waits for the exclusive lock
  write_retries: 3       # reopen attempts when another writer replaced the store
"""


@dataclass
class StorePreferences:
    """Where the bookmark store lives."""

    app_name: str = DEFAULT_APP_NAME
    path: str = ""  # Empty means resolve from the home directory
    scratch_dir: str = ""  # Empty means the store's own directory


@dataclass
class LockingPreferences:
    """Writer-side locking knobs."""

    timeout: float = DEFAULT_LOCK_TIMEOUT
    write_retries: int = DEFAULT_WRITE_RETRIES


@dataclass
class Preferences:
    """Top-level pagemark preferences."""

    store: StorePreferences = field(default_factory=StorePreferences)
    locking: LockingPreferences = field(default_factory=LockingPreferences)


def default_prefs_path() -> Path:
    """Return ``~/.pagemark/preferences.yaml``."""
    return pagemark_home() / PREFS_FILENAME


def load_preferences(path: Path | None = None) -> Preferences:
    """Load preferences from YAML file.

    Falls back to sensible defaults if the file doesn't exist or is invalid.
    Creates a default preferences file on first run.
    """
    prefs = Preferences()
    try:
        path = path or default_prefs_path()
    except StoreLocationError:
        logger.warning("no home directory, using default preferences", exc_info=True)
        return prefs

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if isinstance(data.get("store"), dict):
                sdata = data["store"]
                if sdata.get("app_name"):
                    prefs.store.app_name = str(sdata["app_name"])
                if "path" in sdata:
                    prefs.store.path = str(sdata["path"] or "")
                if "scratch_dir" in sdata:
                    prefs.store.scratch_dir = str(sdata["scratch_dir"] or "")
            if isinstance(data.get("locking"), dict):
                ldata = data["locking"]
                if "timeout" in ldata:
                    prefs.locking.timeout = min(
                        max(0.0, float(ldata["timeout"])), MAX_LOCK_TIMEOUT
                    )
                if "write_retries" in ldata:
                    prefs.locking.write_retries = max(1, int(ldata["write_retries"]))
        except (OSError, yaml.YAMLError, TypeError, ValueError, AttributeError):
            logger.debug("invalid preferences in %s, using defaults", path, exc_info=True)
            return Preferences()
    else:
        # Create default file for user to customize
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(_DEFAULT_YAML, encoding="utf-8")
        except OSError:
            logger.debug("could not write default preferences to %s", path, exc_info=True)

    return prefs

