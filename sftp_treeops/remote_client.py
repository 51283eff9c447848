"""
Remote client protocol definition.

Defines the remote filesystem capability the tree operations consume.
SFTPClient implements it over SSH; tests implement it in memory.

Implementations are not required to be safe for concurrent use: callers
serialise access to one client, or open one client per operation.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable

from .entry import RemoteStats


@runtime_checkable
class RemoteClient(Protocol):
    """Protocol defining the remote filesystem client interface.

    Every method raises a subclass of RemoteOperationError naming the
    failing path when the remote side rejects the call.
    """

    def connect(self) -> None:
        """Establish connection to the remote server."""
        ...

    def disconnect(self) -> None:
        """Close connection to the remote server."""
        ...

    def list_dir(self, path: str) -> list[RemoteStats]:
        """List contents of a directory, without ``.`` and ``..``.

        Args:
            path: Absolute remote path.

        Returns:
            List of RemoteStats objects in the order the server reports them.

        Raises:
            ListFailed: If the directory does not exist, access is denied,
                or the transport fails.
        """
        ...

    def get_file_info(self, path: str) -> RemoteStats:
        """Get metadata for a single file or directory.

        Raises:
            StatFailed: If path does not exist.
        """
        ...

    def remove(self, path: str) -> None:
        """Remove a file or an empty directory.

        Raises:
            RemoveFailed: If the path is missing or a non-empty directory.
        """
        ...

    def rename(self, old_path: str, new_path: str) -> None:
        """Rename or move a file/directory."""
        ...

    def chmod(self, path: str, mode: int) -> None:
        """Set the permission bits of a file/directory."""
        ...

    def create_dir(self, path: str) -> None:
        """Create a single directory."""
        ...

    def open_read(self, path: str) -> BinaryIO:
        """Open a remote file read-only. The result is a context manager."""
        ...

    def open_write(self, path: str) -> BinaryIO:
        """Open a remote file for writing, creating or truncating it."""
        ...
