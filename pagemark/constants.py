"""Constants shared across pagemark modules."""

from __future__ import annotations

# Read result for "no saved page", and the save-side "nothing to save" signal.
NO_BOOKMARK = -1

# Largest page number accepted on read or write (32-bit signed int max).
MAX_PAGENO = 2**31 - 1

# Exactly three characters between docpath and page number.
SEPARATOR = " = "

DEFAULT_APP_NAME = "pagemark"

# Store file name template; formatted with the application name.
BOOKMARKS_FILE = ".{app}_bookmarks"

TMP_SUFFIX = ".tmp"

# Writer defaults (overridable through preferences).
DEFAULT_LOCK_TIMEOUT = 1.0
DEFAULT_WRITE_RETRIES = 3
LOCK_POLL_INTERVAL = 0.01
# Upper bound on any lock wait, whatever the configuration says.
MAX_LOCK_TIMEOUT = 60.0
