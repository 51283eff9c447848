"""
Recursive delete/chmod and single-path remote operations.

Bulk operations walk the tree once, then issue mutating calls one at a time
and stop at the first failure, leaving the rest of the tree untouched. They
assume nothing else modifies the tree while they run.
"""

import logging

from .cancel import CancelToken, check_cancelled
from .entry import normalize_path
from .ordering import filter_entries, order_by_level
from .remote_client import RemoteClient
from .walker import walk_tree

logger = logging.getLogger(__name__)


def delete_tree(
    fs: RemoteClient,
    root_path: str,
    include_root: bool = False,
    cancel: CancelToken | None = None,
) -> int:
    """Delete everything below root_path, and root_path itself if include_root.

    Files are removed first, then directories deepest level first, so every
    directory is empty when its removal is attempted. The first failing
    removal is raised as-is and nothing after it is attempted.

    Returns:
        Number of paths removed.

    Raises:
        ValueError: If root_path is the filesystem root.
    """
    root_path = normalize_path(root_path)
    if root_path == "/":
        raise ValueError("Refusing to delete the remote filesystem root")

    entries = walk_tree(fs, root_path, cancel=cancel)
    removed = 0

    files = filter_entries(entries, root_path, want_dirs=False, want_files=True, include_root=False)
    for entry in files:
        check_cancelled(cancel, "delete")
        fs.remove(entry.full_path)
        removed += 1
        logger.debug("Removed file: %s", entry.full_path)

    dirs = filter_entries(entries, root_path, want_dirs=True, want_files=False, include_root=False)
    for entry in order_by_level(dirs, descending=True):
        check_cancelled(cancel, "delete")
        fs.remove(entry.full_path)
        removed += 1
        logger.debug("Removed directory: %s", entry.full_path)

    if include_root:
        check_cancelled(cancel, "delete")
        fs.remove(root_path)
        removed += 1
        logger.debug("Removed root directory: %s", root_path)

    logger.info(
        "Deleted %s: %d files, %d directories%s",
        root_path,
        len(files),
        len(dirs),
        " and the root" if include_root else "",
    )
    return removed


def chmod_tree(
    fs: RemoteClient,
    root_path: str,
    mode: int,
    include_root: bool = False,
    cancel: CancelToken | None = None,
) -> int:
    """Set mode on every path below root_path, and root_path if include_root.

    The root goes first, then directories in discovery order, then files.
    Stops at the first failing chmod.

    Returns:
        Number of paths changed.
    """
    root_path = normalize_path(root_path)
    entries = walk_tree(fs, root_path, cancel=cancel)
    changed = 0

    if include_root:
        check_cancelled(cancel, "chmod")
        fs.chmod(root_path, mode)
        changed += 1
        logger.debug("Changed mode of root directory: %s", root_path)

    for entry in filter_entries(entries, root_path, want_dirs=True, want_files=False, include_root=False):
        check_cancelled(cancel, "chmod")
        fs.chmod(entry.full_path, mode)
        changed += 1
        logger.debug("Changed mode of directory: %s", entry.full_path)

    for entry in filter_entries(entries, root_path, want_dirs=False, want_files=True, include_root=False):
        check_cancelled(cancel, "chmod")
        fs.chmod(entry.full_path, mode)
        changed += 1
        logger.debug("Changed mode of file: %s", entry.full_path)

    logger.info("Changed mode of %d paths under %s to %o", changed, root_path, mode)
    return changed


def rename_path(fs: RemoteClient, old_path: str, new_path: str) -> None:
    """Rename or move one file or directory. Raises RenameFailed naming old_path."""
    fs.rename(normalize_path(old_path), normalize_path(new_path))
    logger.info("Renamed %s -> %s", old_path, new_path)


def remove_path(fs: RemoteClient, path: str) -> None:
    """Remove a single file or empty directory."""
    fs.remove(normalize_path(path))
    logger.info("Removed %s", path)


def chmod_path(fs: RemoteClient, path: str, mode: int) -> None:
    """Set the permission bits of one path, without recursing."""
    fs.chmod(normalize_path(path), mode)
    logger.info("Changed mode of %s to %o", path, mode)


def create_dir(fs: RemoteClient, path: str) -> None:
    """Create one directory; the parent must already exist."""
    fs.create_dir(normalize_path(path))
    logger.info("Created directory %s", path)
