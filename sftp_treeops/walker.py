"""
Directory listing and recursive tree walking.

walk_tree() discovers a remote tree one listing call at a time and returns
it as a flat list in pre-order (each directory before its contents). It does
not order by depth; see ordering.order_by_level for that.
"""

import logging
from collections.abc import Callable

from .cancel import CancelToken, check_cancelled
from .entry import RemoteEntry, normalize_path
from .errors import ListFailed
from .remote_client import RemoteClient

logger = logging.getLogger(__name__)


def list_one_level(fs: RemoteClient, dir_path: str) -> list[RemoteEntry]:
    """List one directory as RemoteEntry values.

    Issues exactly one listing call. Errors from the client propagate
    unchanged; nothing is retried.
    """
    return [RemoteEntry.from_stats(dir_path, stats) for stats in fs.list_dir(dir_path)]


def list_file_names(fs: RemoteClient, dir_path: str) -> list[str]:
    """Full paths of the files (not directories) directly inside dir_path."""
    return [entry.full_path for entry in list_one_level(fs, dir_path) if not entry.is_dir]


def walk_tree(
    fs: RemoteClient,
    root_path: str,
    include_root: bool = False,
    onerror: Callable[[ListFailed], None] | None = None,
    cancel: CancelToken | None = None,
) -> list[RemoteEntry]:
    """Walk the tree below root_path and return every entry found.

    Entries come back in pre-order: each directory is followed by its
    contents before its next sibling. With include_root the root itself is
    stat'ed and emitted first.

    Failing to list the root raises ListFailed. Failing to list any
    subdirectory does not: the directory entry stays in the result, its
    children are absent, a warning is logged and ``onerror`` (if given) is
    called with the exception so callers can tell an unexplored subtree
    from an empty one.
    """
    root_path = normalize_path(root_path)
    result: list[RemoteEntry] = []

    if include_root:
        check_cancelled(cancel, "walk")
        root_stats = fs.get_file_info(root_path)
        result.append(
            RemoteEntry(
                name=root_stats.name,
                full_path=root_path,
                is_dir=root_stats.is_dir,
                mtime=root_stats.mtime,
                size=root_stats.size,
                mode=root_stats.mode,
            )
        )

    check_cancelled(cancel, "walk")
    stack = [iter(list_one_level(fs, root_path))]

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        result.append(entry)
        if not entry.is_dir:
            continue

        check_cancelled(cancel, "walk")
        try:
            children = list_one_level(fs, entry.full_path)
        except ListFailed as e:
            logger.warning("Skipping unreadable directory %s: %s", entry.full_path, e)
            if onerror is not None:
                onerror(e)
            continue
        stack.append(iter(children))

    logger.debug("Walked %s: %d entries", root_path, len(result))
    return result
