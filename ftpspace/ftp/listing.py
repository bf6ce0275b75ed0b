"""Parser for UNIX ``ls -l`` style directory listings.

Turns the raw text returned by LIST into DirectoryEntry objects.
Parsing is total: malformed lines are skipped, never raised on.
"""

import re
from dataclasses import dataclass
from typing import List, Optional


MIN_FIELDS = 9
SKIPPED_NAMES = (".", "..")

# Only spaces and tabs separate fields; other control characters belong to names
FIELD_SEPARATOR = re.compile(r"[ \t]+")
BLANKS = " \t"


@dataclass(frozen=True)
class DirectoryEntry:
    """One row of a remote directory listing."""
    name: str
    size: int
    is_directory: bool
    raw_permissions: str
    path: str


def join_remote_path(parent_path: str, name: str) -> str:
    """
    Join a remote parent path and an entry name with a single slash.

    Args:
        parent_path: Directory the entry was listed from
        name: Entry name

    Returns:
        Full remote path of the entry
    """
    return f"{parent_path.rstrip('/')}/{name}"


def _parse_size(field: str) -> int:
    return int(field) if field.isdecimal() else 0


def parse_listing_line(line: str, parent_path: str) -> Optional[DirectoryEntry]:
    """
    Parse a single listing line.

    Returns:
        DirectoryEntry, or None for summary, malformed and ./.. lines
    """
    line = line.strip(BLANKS)
    if not line or line.startswith("total"):
        return None

    fields = FIELD_SEPARATOR.split(line)
    if len(fields) < MIN_FIELDS:
        return None

    permissions = fields[0]
    name = " ".join(fields[8:])
    if name in SKIPPED_NAMES:
        return None

    return DirectoryEntry(
        name=name,
        size=_parse_size(fields[4]),
        is_directory=permissions.startswith("d"),
        raw_permissions=permissions,
        path=join_remote_path(parent_path, name),
    )


def parse_listing(text: str, parent_path: str = "/") -> List[DirectoryEntry]:
    """
    Parse a full LIST response body.

    Args:
        text: Raw listing text
        parent_path: Remote directory that was listed

    Returns:
        Entries in the order the server returned them
    """
    entries = []
    for line in text.split("\n"):
        entry = parse_listing_line(line.rstrip("\r"), parent_path)
        if entry is not None:
            entries.append(entry)
    return entries
