"""Directory listing filters for ftpfacade.

Pure functions applied to the entries returned by a transport listing,
kept apart from the client so they can be used and tested on their own.
"""

import logging
import re
from typing import Iterable, List, Optional, Pattern

from ftpfacade.ftp.transport import DirectoryEntry
from ftpfacade.utils.paths import file_extension

logger = logging.getLogger("ftpfacade.listing")

# Synthetic entries some servers include in listings
SPECIAL_FOLDERS = frozenset({".", ".."})


def compile_pattern(pattern: str) -> Optional[Pattern]:
    """
    Compile a name filter.

    Returns:
        Compiled regular expression, or None if the pattern is malformed
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning(f"Invalid listing pattern {pattern!r}: {e}")
        return None


def is_special_folder(entry: DirectoryEntry) -> bool:
    """True for the "." and ".." folder entries."""
    return entry.is_folder and entry.name in SPECIAL_FOLDERS


def filter_entries(
    entries: Iterable[DirectoryEntry],
    allowed_extensions: Iterable[str] = (),
    pattern: str = ""
) -> List[DirectoryEntry]:
    """
    Keep the files and folders matching the given filters.

    Args:
        entries: Raw listing, order is preserved
        allowed_extensions: Case-insensitive extensions to keep; empty
            keeps everything. Folders are checked too, so they are
            dropped unless their name "extension" matches.
        pattern: Regular expression searched in each name; empty keeps
            everything, a malformed pattern keeps nothing

    Returns:
        Filtered entries
    """
    extensions = {extension.lower() for extension in allowed_extensions}

    regex = None
    if pattern:
        regex = compile_pattern(pattern)
        if regex is None:
            return []

    kept = []
    for entry in entries:
        if not (entry.is_file or entry.is_folder):
            continue
        if is_special_folder(entry):
            continue
        if extensions and file_extension(entry.name) not in extensions:
            continue
        if regex is not None and not regex.search(entry.name):
            continue
        kept.append(entry)
    return kept


def filter_folders(entries: Iterable[DirectoryEntry]) -> List[DirectoryEntry]:
    """Keep folder entries only, without "." and ".."."""
    return [
        entry for entry in entries
        if entry.is_folder and not is_special_folder(entry)
    ]
