"""pagemark - remember the last-read page of each document."""

__version__ = "0.1.0"

from .api import configure, read_bookmark, reset, save_bookmark  # noqa: E402
from .constants import MAX_PAGENO, NO_BOOKMARK  # noqa: E402
from .log import configure_logging  # noqa: E402
from .persistence import Bookmark, BookmarkStore  # noqa: E402

__all__ = [
    "__version__",
    "Bookmark",
    "BookmarkStore",
    "MAX_PAGENO",
    "NO_BOOKMARK",
    "configure",
    "configure_logging",
    "read_bookmark",
    "reset",
    "save_bookmark",
]
