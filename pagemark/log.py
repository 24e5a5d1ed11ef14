"""Package-wide logger.

Every module logs through ``logger`` so a host application can route or
silence pagemark diagnostics with a single ``logging.getLogger("pagemark")``.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

logger = logging.getLogger("pagemark")


def configure_logging(level: int = logging.WARNING, stream: TextIO | None = None) -> None:
    """Attach a stderr handler to the pagemark logger (opt-in)."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("pagemark: %(levelname)s: %(message)s"))
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
