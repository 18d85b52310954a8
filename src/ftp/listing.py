"""Directory listing parser for Remote Transfer.

Extracts entry names from raw LIST output. No structured parsing of
permissions, sizes or dates is attempted: the name is the last
whitespace-delimited token of each line, so names containing spaces
are truncated to their final word.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry of a directory listing."""
    name: str
    line: str


def parse_listing(text: str) -> List[DirectoryEntry]:
    """
    Parse raw LIST output.

    Args:
        text: Listing text as received on the data channel

    Returns:
        Entries in server order (empty if the listing has no lines)
    """
    entries: List[DirectoryEntry] = []

    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue
        entries.append(DirectoryEntry(name=line.split()[-1], line=line))

    return entries


def entry_names(entries: List[DirectoryEntry]) -> List[str]:
    """Names of the given entries, in order."""
    return [entry.name for entry in entries]
