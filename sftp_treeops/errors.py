"""
Exception hierarchy for sftp-treeops.

Remote failures are raised as subclasses of RemoteOperationError, which is
also an OSError so errno/strerror/filename survive translation from the
transport layer.
"""


class TreeOpsError(Exception):
    """Base exception for all sftp-treeops errors."""

    pass


class RemoteOperationError(TreeOpsError, OSError):
    """A single remote filesystem call failed.

    Constructed like OSError: ``RemoveFailed(errno, strerror, path)``.
    """

    operation = "remote operation"

    @property
    def path(self) -> str | None:
        return self.filename

    def __str__(self) -> str:
        detail = self.strerror or (self.args[0] if self.args else "")
        if self.filename:
            return f"{self.operation} failed for {self.filename}: {detail}"
        return f"{self.operation} failed: {detail}"


class ListFailed(RemoteOperationError):
    """Listing a remote directory failed."""

    operation = "list"


class StatFailed(RemoteOperationError):
    """Reading metadata for a remote path failed."""

    operation = "stat"


class RemoveFailed(RemoteOperationError):
    """Removing a remote file or empty directory failed."""

    operation = "remove"


class ChmodFailed(RemoteOperationError):
    """Changing permission bits of a remote path failed."""

    operation = "chmod"


class RenameFailed(RemoteOperationError):
    """Renaming a remote path failed."""

    operation = "rename"


class MkdirFailed(RemoteOperationError):
    """Creating a remote directory failed."""

    operation = "mkdir"


class OpenFailed(RemoteOperationError):
    """A local or remote file could not be opened."""

    operation = "open"


class CopyFailed(TreeOpsError):
    """A byte transfer was interrupted after both files were opened."""

    def __init__(self, source: str, destination: str, bytes_copied: int, reason: str = ""):
        self.source = source
        self.destination = destination
        self.bytes_copied = bytes_copied
        self.reason = reason
        super().__init__(
            f"copy {source} -> {destination} failed after {bytes_copied} bytes: {reason}"
        )


class OperationCancelled(TreeOpsError):
    """The caller cancelled the operation between two remote calls."""

    pass


class DeadlineExceeded(OperationCancelled):
    """The operation ran past its deadline."""

    pass
