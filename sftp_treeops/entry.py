"""
Path depth helpers and the entry data model.

A RemoteEntry is one node discovered by a listing call. Its depth is never
stored: ``level`` is recomputed from ``full_path`` every time it is read.
"""

from dataclasses import dataclass
from datetime import datetime

MOD_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def level(path: str) -> int:
    """Return the depth of a ``/``-separated path.

    Counts the non-empty segments and subtracts one, so ``/a`` is 0 and
    ``/a/b/c`` is 2. Paths without segments (``/``, ``""``) are level 0.
    """
    segments = [part for part in path.split("/") if part]
    return max(len(segments) - 1, 0)


def join_path(parent: str, name: str) -> str:
    """Join a parent directory and a leaf name with a single ``/``."""
    return parent.rstrip("/") + "/" + name


def normalize_path(path: str) -> str:
    """Use forward slashes, force a leading slash, drop trailing slashes."""
    path = path.replace("\\", "/")
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


@dataclass(frozen=True)
class RemoteStats:
    """Metadata for one name as reported by a remote listing or stat call."""

    name: str
    size: int
    mtime: datetime
    is_dir: bool
    mode: int = 0


@dataclass(frozen=True)
class RemoteEntry:
    """One discovered file or directory, addressed by its absolute path."""

    name: str
    full_path: str
    is_dir: bool
    mtime: datetime
    size: int = 0
    mode: int = 0

    @classmethod
    def from_stats(cls, parent: str, stats: RemoteStats) -> "RemoteEntry":
        return cls(
            name=stats.name,
            full_path=join_path(parent, stats.name),
            is_dir=stats.is_dir,
            mtime=stats.mtime,
            size=stats.size,
            mode=stats.mode,
        )

    @property
    def level(self) -> int:
        return level(self.full_path)

    @property
    def mod_time(self) -> str:
        return self.mtime.strftime(MOD_TIME_FORMAT)
