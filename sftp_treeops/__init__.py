__version__ = "0.1.0"

# Public API exports
from .bulk import chmod_path, chmod_tree, create_dir, delete_tree, remove_path, rename_path
from .cancel import CancelToken
from .config import AppConfig, ConnectionConfig, LogConfig, SSHConfig, load_config
from .entry import RemoteEntry, RemoteStats, level
from .errors import (
    ChmodFailed,
    CopyFailed,
    DeadlineExceeded,
    ListFailed,
    MkdirFailed,
    OpenFailed,
    OperationCancelled,
    RemoteOperationError,
    RemoveFailed,
    RenameFailed,
    StatFailed,
    TreeOpsError,
)
from .ordering import filter_entries, filter_modified_before, order_by_level
from .remote_client import RemoteClient
from .sftp_client import SFTPClient
from .transfer import download, upload
from .walker import list_file_names, list_one_level, walk_tree

__all__ = [
    "__version__",
    # Configuration
    "AppConfig",
    "SSHConfig",
    "ConnectionConfig",
    "LogConfig",
    "load_config",
    # Clients
    "RemoteClient",
    "SFTPClient",
    # Model
    "RemoteEntry",
    "RemoteStats",
    "level",
    # Traversal
    "list_one_level",
    "list_file_names",
    "walk_tree",
    "filter_entries",
    "filter_modified_before",
    "order_by_level",
    # Operations
    "delete_tree",
    "chmod_tree",
    "rename_path",
    "remove_path",
    "chmod_path",
    "create_dir",
    "download",
    "upload",
    "CancelToken",
    # Errors
    "TreeOpsError",
    "RemoteOperationError",
    "ListFailed",
    "StatFailed",
    "RemoveFailed",
    "ChmodFailed",
    "RenameFailed",
    "MkdirFailed",
    "OpenFailed",
    "CopyFailed",
    "OperationCancelled",
    "DeadlineExceeded",
]
