"""
Selecting and depth-ordering walked entries.

Both functions are stable: entries keep their discovery order except where
order_by_level moves them into depth tiers.
"""

from collections.abc import Iterable
from datetime import datetime

from .entry import RemoteEntry, normalize_path


def filter_entries(
    entries: Iterable[RemoteEntry],
    root_path: str,
    want_dirs: bool,
    want_files: bool,
    include_root: bool,
) -> list[RemoteEntry]:
    """Select directories and/or files from a walk, in input order.

    The root directory is dropped from the directory selection unless
    include_root is set. Files are never affected by include_root.
    """
    root_path = normalize_path(root_path)
    result = []
    for entry in entries:
        if entry.is_dir:
            if want_dirs and (include_root or entry.full_path != root_path):
                result.append(entry)
        elif want_files:
            result.append(entry)
    return result


def filter_modified_before(
    entries: Iterable[RemoteEntry], cutoff: datetime
) -> list[RemoteEntry]:
    """Keep entries last modified strictly before cutoff."""
    return [entry for entry in entries if entry.mtime < cutoff]


def order_by_level(entries: Iterable[RemoteEntry], descending: bool) -> list[RemoteEntry]:
    """Group entries into depth tiers, deepest first when descending.

    Within a tier the input order is kept. Level 0 entries are left out;
    a caller that needs the root handles it separately.
    """
    entries = list(entries)
    max_level = max((entry.level for entry in entries), default=-1)

    levels = range(1, max_level + 1)
    if descending:
        levels = reversed(levels)

    result = []
    for current in levels:
        result.extend(entry for entry in entries if entry.level == current)
    return result
