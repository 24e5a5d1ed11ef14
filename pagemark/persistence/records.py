"""Record format of the bookmark store: ``<docpath> = <pageno>\\n`` per line."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..constants import MAX_PAGENO, SEPARATOR
from ..errors import RecordError

# strtol-style: optional leading whitespace and sign, then digits; the rest
# of the line is ignored.
_NUMBER_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)


@dataclass(frozen=True)
class Bookmark:
    """One stored record."""

    docpath: str
    pageno: int


def key_prefix(docpath: str) -> str:
    """Return the prefix a line must start with to belong to *docpath*."""
    return docpath + SEPARATOR


def format_record(docpath: str, pageno: int) -> str:
    return f"{docpath}{SEPARATOR}{pageno}\n"


def parse_pageno(docpath: str, raw: str) -> int:
    """Parse the value part of a record, raising ``RecordError`` if unusable."""
    match = _NUMBER_RE.match(raw)
    if match is None:
        raise RecordError(docpath, raw, "not a number")
    pageno = int(match.group(1))
    if pageno > MAX_PAGENO:
        raise RecordError(docpath, raw, "page number is too big")
    if pageno < 1:
        raise RecordError(docpath, raw, "page number is not positive")
    return pageno


def split_record(line: str) -> tuple[str, str] | None:
    """Split a raw store line into ``(docpath, value)``.

    Uses the last separator so docpaths with ``" = "`` inside still come out
    whole when the value is clean.  Returns None for lines with no separator.
    """
    body = line.rstrip("\r\n")
    docpath, sep, raw = body.rpartition(SEPARATOR)
    if not sep:
        return None
    return docpath, raw


def is_valid_pageno(pageno: object) -> bool:
    return (
        isinstance(pageno, int)
        and not isinstance(pageno, bool)
        and 1 <= pageno <= MAX_PAGENO
    )
