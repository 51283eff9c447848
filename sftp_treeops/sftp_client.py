"""
SFTP client implementation using paramiko.

Implements the RemoteClient protocol over SSH/SFTP. Server-side failures are
translated into the typed errors from .errors, each naming the failing path.
"""

import logging
import os
import stat
import threading
import time
from datetime import datetime
from pathlib import Path

import paramiko

from .config import ConnectionConfig, SSHConfig
from .entry import RemoteStats, normalize_path
from .errors import (
    ChmodFailed,
    ListFailed,
    MkdirFailed,
    OpenFailed,
    RemoteOperationError,
    RemoveFailed,
    RenameFailed,
    StatFailed,
)

logger = logging.getLogger(__name__)

# Failures of the SSH channel itself, as opposed to SFTP status replies
TRANSPORT_ERRORS = (paramiko.SSHException, EOFError, ConnectionError, TimeoutError)


class TrustOnFirstUsePolicy(paramiko.MissingHostKeyPolicy):
    """
    Trust-on-first-use host key policy (same model as OpenSSH).

    - Unknown host: accept and save key to ~/.ssh/known_hosts
    - Known host, same key: accept
    - Known host, CHANGED key: reject (possible MITM attack)
    """

    def __init__(self, known_hosts_path: Path | None = None):
        self._known_hosts_path = known_hosts_path or Path.home() / ".ssh" / "known_hosts"

    def missing_host_key(self, client, hostname, key):
        host_keys = client.get_host_keys()
        existing = host_keys.lookup(hostname)

        if existing is not None:
            key_type = key.get_name()
            existing_key = existing.get(key_type)
            if existing_key is not None and existing_key != key:
                raise paramiko.SSHException(
                    f"Host key for {hostname} has CHANGED. "
                    f"If the server key was legitimately changed, remove the old "
                    f"entry from {self._known_hosts_path} and try again."
                )

        logger.info("Adding host key for %s to known_hosts", hostname)
        host_keys.add(hostname, key.get_name(), key)

        try:
            self._known_hosts_path.parent.mkdir(parents=True, exist_ok=True)
            host_keys.save(str(self._known_hosts_path))
        except OSError as e:
            logger.warning("Could not save known_hosts: %s", e)


def _stats_from_attr(name: str, attr: paramiko.SFTPAttributes) -> RemoteStats:
    mode = attr.st_mode or 0
    is_dir = stat.S_ISDIR(mode)
    size = attr.st_size if attr.st_size and not is_dir else 0
    mtime = datetime.fromtimestamp(attr.st_mtime) if attr.st_mtime else datetime.now()
    return RemoteStats(name=name, size=size, mtime=mtime, is_dir=is_dir, mode=mode)


class SFTPClient:
    """
    High-level wrapper around paramiko's SSH/SFTP with connection management.

    One instance holds one SFTP session; a lock serialises calls made
    through it.
    """

    def __init__(self, ssh_config: SSHConfig, conn_config: ConnectionConfig):
        self.ssh_config = ssh_config
        self.conn_config = conn_config
        self._ssh: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None
        self._lock = threading.Lock()
        self._connected = False

    def __enter__(self) -> "SFTPClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def connect(self) -> None:
        """Establish SSH connection and open SFTP session."""
        with self._lock:
            self._connect_internal()

    def _connect_internal(self) -> None:
        """Internal connect without lock - caller must hold lock."""
        try:
            self._ssh = paramiko.SSHClient()
            self._ssh.load_system_host_keys()
            try:
                known_hosts = str(Path.home() / ".ssh" / "known_hosts")
                self._ssh.load_host_keys(known_hosts)
            except FileNotFoundError:
                pass
            self._ssh.set_missing_host_key_policy(TrustOnFirstUsePolicy())

            connect_kwargs: dict = {
                "hostname": self.ssh_config.host,
                "port": self.ssh_config.port,
                "timeout": self.conn_config.timeout_seconds,
                "allow_agent": self.ssh_config.use_agent,
            }

            if self.ssh_config.username:
                connect_kwargs["username"] = self.ssh_config.username

            # Auth priority: key file -> password -> agent/default keys
            if self.ssh_config.key_file:
                key_path = os.path.expanduser(self.ssh_config.key_file)
                connect_kwargs["key_filename"] = key_path
                if self.ssh_config.key_passphrase:
                    connect_kwargs["passphrase"] = self.ssh_config.key_passphrase
                connect_kwargs["look_for_keys"] = True
                logger.debug(
                    "Connecting to SSH %s:%d with key file: %s",
                    self.ssh_config.host,
                    self.ssh_config.port,
                    key_path,
                )
            elif self.ssh_config.password:
                connect_kwargs["password"] = self.ssh_config.password
                connect_kwargs["look_for_keys"] = False
                logger.debug(
                    "Connecting to SSH %s:%d with password",
                    self.ssh_config.host,
                    self.ssh_config.port,
                )
            else:
                connect_kwargs["look_for_keys"] = True
                logger.debug(
                    "Connecting to SSH %s:%d with agent/default keys",
                    self.ssh_config.host,
                    self.ssh_config.port,
                )

            self._ssh.connect(**connect_kwargs)
            self._sftp = self._ssh.open_sftp()
            self._connected = True
            logger.info(
                "Connected to SSH server %s:%d",
                self.ssh_config.host,
                self.ssh_config.port,
            )

        except paramiko.AuthenticationException as e:
            self._connected = False
            self._cleanup_connections()
            logger.error("SSH authentication failed: %s", e)
            raise PermissionError(f"SSH authentication failed: {e}") from e
        except TimeoutError as e:
            self._connected = False
            self._cleanup_connections()
            logger.error("SSH connection timeout: %s", e)
            raise TimeoutError(f"SSH connection timeout: {e}") from e
        except OSError as e:
            self._connected = False
            self._cleanup_connections()
            logger.error("SSH connection failed: %s", e)
            raise ConnectionError(f"SSH connection failed: {e}") from e
        except paramiko.SSHException as e:
            self._connected = False
            self._cleanup_connections()
            logger.error("SSH error: %s", e)
            raise ConnectionError(f"SSH error: {e}") from e

    def _cleanup_connections(self) -> None:
        """Close SFTP and SSH without raising."""
        if self._sftp:
            try:
                self._sftp.close()
            except Exception as e:
                logger.debug("Ignoring error closing SFTP session: %s", e)
            self._sftp = None
        if self._ssh:
            try:
                self._ssh.close()
            except Exception as e:
                logger.debug("Ignoring error closing SSH client: %s", e)
            self._ssh = None

    def disconnect(self) -> None:
        """Close SFTP session and SSH connection."""
        with self._lock:
            self._disconnect_internal()

    def _disconnect_internal(self) -> None:
        """Internal disconnect without lock - caller must hold lock."""
        self._cleanup_connections()
        self._connected = False
        logger.debug("SSH connection closed")

    def _ensure_connected(self) -> None:
        """Ensure connection is active, reconnect if needed. Caller must hold lock."""
        if not self._connected or not self._sftp or not self._ssh:
            logger.debug("SSH connection not active, reconnecting")
            self._connect_internal()
            return

        transport = self._ssh.get_transport()
        if transport is None or not transport.is_active():
            logger.debug("SSH transport lost, reconnecting")
            self._disconnect_internal()
            self._connect_internal()

    def _call(self, operation: str, error_cls: type[RemoteOperationError], path: str, func):
        """Run one SFTP call, translating failures into ``error_cls``.

        Only transport failures are retried (and only when retry_attempts > 1);
        an SFTP status reply such as ENOENT is raised immediately.
        """
        last_exception: Exception | None = None

        for attempt in range(max(self.conn_config.retry_attempts, 1)):
            try:
                with self._lock:
                    self._ensure_connected()
                    return func()
            except TRANSPORT_ERRORS as e:
                last_exception = e
                logger.warning(
                    "%s failed (attempt %d/%d): %s",
                    operation,
                    attempt + 1,
                    self.conn_config.retry_attempts,
                    e,
                )
                if attempt < self.conn_config.retry_attempts - 1:
                    time.sleep(self.conn_config.retry_delay_seconds)
                    with self._lock:
                        self._disconnect_internal()
            except OSError as e:
                raise self._translate_io_error(e, path, error_cls) from e

        logger.error("%s failed: %s", operation, last_exception)
        raise error_cls(None, f"transport failure: {last_exception}", path) from last_exception

    def _translate_io_error(
        self, error: OSError, path: str, error_cls: type[RemoteOperationError]
    ) -> RemoteOperationError:
        """Translate SFTP IOError to the typed error for this operation."""
        errno = getattr(error, "errno", None)
        if errno == 2:  # ENOENT
            message = "No such file or directory"
        elif errno == 13:  # EACCES
            message = "Permission denied"
        elif errno == 39 or errno == 66:  # ENOTEMPTY
            message = "Directory not empty"
        else:
            message = getattr(error, "strerror", None) or str(error)
        return error_cls(errno, message, path)

    def list_dir(self, path: str) -> list[RemoteStats]:
        """List contents of a directory."""
        path = normalize_path(path)
        logger.debug("Listing directory: %s", path)

        def _list_dir_internal() -> list[RemoteStats]:
            results = []
            for attr in self._sftp.listdir_attr(path):
                name = attr.filename
                if name in (".", ".."):
                    continue
                results.append(_stats_from_attr(name, attr))

            logger.debug("Listed %d entries in %s", len(results), path)
            return results

        return self._call(f"list_dir({path})", ListFailed, path, _list_dir_internal)

    def get_file_info(self, path: str) -> RemoteStats:
        """Get metadata for a single file or directory."""
        path = normalize_path(path)
        logger.debug("Getting file info: %s", path)

        def _get_file_info_internal() -> RemoteStats:
            attr = self._sftp.stat(path)
            name = path.rsplit("/", 1)[-1] or "/"
            return _stats_from_attr(name, attr)

        return self._call(f"get_file_info({path})", StatFailed, path, _get_file_info_internal)

    def remove(self, path: str) -> None:
        """Remove a file, or a directory if it is empty."""
        path = normalize_path(path)
        logger.debug("Removing: %s", path)

        def _remove_internal() -> None:
            try:
                self._sftp.remove(path)
            except FileNotFoundError:
                raise
            except PermissionError:
                # Some servers deny unlink on a directory instead of failing generically
                if not self._is_remote_dir(path):
                    raise
                self._sftp.rmdir(path)
            except OSError:
                # SFTP has separate primitives; fall back to rmdir for directories
                self._sftp.rmdir(path)
            logger.debug("Removed: %s", path)

        self._call(f"remove({path})", RemoveFailed, path, _remove_internal)

    def _is_remote_dir(self, path: str) -> bool:
        try:
            attr = self._sftp.stat(path)
        except OSError:
            return False
        return stat.S_ISDIR(attr.st_mode or 0)

    def rename(self, old_path: str, new_path: str) -> None:
        """Rename or move a file/directory."""
        old_path = normalize_path(old_path)
        new_path = normalize_path(new_path)
        logger.debug("Renaming: %s -> %s", old_path, new_path)

        def _rename_internal() -> None:
            self._sftp.rename(old_path, new_path)
            logger.debug("Renamed: %s -> %s", old_path, new_path)

        self._call(f"rename({old_path}, {new_path})", RenameFailed, old_path, _rename_internal)

    def chmod(self, path: str, mode: int) -> None:
        """Set permission bits on a file/directory."""
        path = normalize_path(path)
        logger.debug("Changing mode: %s -> %o", path, mode)

        def _chmod_internal() -> None:
            self._sftp.chmod(path, mode)

        self._call(f"chmod({path})", ChmodFailed, path, _chmod_internal)

    def create_dir(self, path: str) -> None:
        """Create a single directory; the parent must exist."""
        path = normalize_path(path)
        logger.debug("Creating directory: %s", path)

        def _create_dir_internal() -> None:
            self._sftp.mkdir(path)
            logger.debug("Created directory: %s", path)

        self._call(f"create_dir({path})", MkdirFailed, path, _create_dir_internal)

    def open_read(self, path: str) -> paramiko.SFTPFile:
        """Open a remote file read-only."""
        path = normalize_path(path)
        logger.debug("Opening for read: %s", path)

        def _open_read_internal() -> paramiko.SFTPFile:
            handle = self._sftp.open(path, "rb")
            handle.prefetch()
            return handle

        return self._call(f"open_read({path})", OpenFailed, path, _open_read_internal)

    def open_write(self, path: str) -> paramiko.SFTPFile:
        """Open a remote file for writing, creating or truncating it."""
        path = normalize_path(path)
        logger.debug("Opening for write: %s", path)

        def _open_write_internal() -> paramiko.SFTPFile:
            return self._sftp.open(path, "wb")

        return self._call(f"open_write({path})", OpenFailed, path, _open_write_internal)
