"""
Shared pytest fixtures for sftp-treeops tests.
"""

import errno
import io
import stat as stat_module
from collections.abc import Generator
from datetime import datetime
from pathlib import Path

import pytest

from sftp_treeops.config import ConnectionConfig, LogConfig, SSHConfig
from sftp_treeops.entry import RemoteStats, join_path
from sftp_treeops.errors import (
    ChmodFailed,
    ListFailed,
    MkdirFailed,
    OpenFailed,
    RemoveFailed,
    RenameFailed,
    StatFailed,
)

FIXED_MTIME = datetime(2024, 1, 15, 10, 30, 0)


class _RemoteWriter(io.BytesIO):
    """Writable remote file that stores its content on close."""

    def __init__(self, fs: "FakeRemoteFS", path: str):
        super().__init__()
        self._fs = fs
        self._path = path

    def close(self) -> None:
        if not self.closed:
            self._fs.files[self._path] = self.getvalue()
        super().close()


class FakeRemoteFS:
    """
    In-memory RemoteClient.

    Directories live in ``dirs`` (path -> mode), files in ``files``
    (path -> bytes). Every call is appended to ``calls`` as a tuple, and
    ``fail`` maps (operation, path) to the errno to raise for that call.
    """

    def __init__(self):
        self.dirs: dict[str, int] = {"/": 0o755}
        self.files: dict[str, bytes] = {}
        self.modes: dict[str, int] = {}
        self.calls: list[tuple] = []
        self.fail: dict[tuple[str, str], int] = {}

    # Helpers for building trees

    def mkdir(self, path: str, mode: int = 0o755) -> None:
        self.dirs[path] = mode

    def mkfile(self, path: str, data: bytes = b"", mode: int = 0o644) -> None:
        self.files[path] = data
        self.modes[path] = mode

    def _check(self, operation: str, path: str, error_cls) -> None:
        code = self.fail.get((operation, path))
        if code is not None:
            raise error_cls(code, "simulated failure", path)

    def _children(self, path: str) -> list[str]:
        prefix = path.rstrip("/") + "/"
        names = []
        for candidate in list(self.dirs) + list(self.files):
            if candidate != path and candidate.startswith(prefix):
                rest = candidate[len(prefix):]
                if "/" not in rest:
                    names.append(rest)
        return names

    def _stats(self, path: str) -> RemoteStats:
        name = path.rsplit("/", 1)[-1] or "/"
        if path in self.dirs:
            return RemoteStats(
                name=name,
                size=0,
                mtime=FIXED_MTIME,
                is_dir=True,
                mode=stat_module.S_IFDIR | self.dirs[path],
            )
        return RemoteStats(
            name=name,
            size=len(self.files[path]),
            mtime=FIXED_MTIME,
            is_dir=False,
            mode=stat_module.S_IFREG | self.modes.get(path, 0o644),
        )

    # RemoteClient protocol

    def connect(self) -> None:
        self.calls.append(("connect",))

    def disconnect(self) -> None:
        self.calls.append(("disconnect",))

    def list_dir(self, path: str) -> list[RemoteStats]:
        self.calls.append(("list_dir", path))
        self._check("list_dir", path, ListFailed)
        if path not in self.dirs:
            raise ListFailed(errno.ENOENT, "No such file or directory", path)
        return [self._stats(join_path(path, name)) for name in self._children(path)]

    def get_file_info(self, path: str) -> RemoteStats:
        self.calls.append(("get_file_info", path))
        self._check("get_file_info", path, StatFailed)
        if path not in self.dirs and path not in self.files:
            raise StatFailed(errno.ENOENT, "No such file or directory", path)
        return self._stats(path)

    def remove(self, path: str) -> None:
        self.calls.append(("remove", path))
        self._check("remove", path, RemoveFailed)
        if path in self.files:
            del self.files[path]
        elif path in self.dirs:
            if self._children(path):
                raise RemoveFailed(errno.ENOTEMPTY, "Directory not empty", path)
            del self.dirs[path]
        else:
            raise RemoveFailed(errno.ENOENT, "No such file or directory", path)

    def rename(self, old_path: str, new_path: str) -> None:
        self.calls.append(("rename", old_path, new_path))
        self._check("rename", old_path, RenameFailed)
        if old_path in self.files:
            self.files[new_path] = self.files.pop(old_path)
        elif old_path in self.dirs:
            self.dirs[new_path] = self.dirs.pop(old_path)
        else:
            raise RenameFailed(errno.ENOENT, "No such file or directory", old_path)

    def chmod(self, path: str, mode: int) -> None:
        self.calls.append(("chmod", path, mode))
        self._check("chmod", path, ChmodFailed)
        if path in self.dirs:
            self.dirs[path] = mode
        elif path in self.files:
            self.modes[path] = mode
        else:
            raise ChmodFailed(errno.ENOENT, "No such file or directory", path)

    def create_dir(self, path: str) -> None:
        self.calls.append(("create_dir", path))
        self._check("create_dir", path, MkdirFailed)
        if path in self.dirs or path in self.files:
            raise MkdirFailed(errno.EEXIST, "File exists", path)
        parent = path.rsplit("/", 1)[0] or "/"
        if parent != "/" and parent not in self.dirs:
            raise MkdirFailed(errno.ENOENT, "No such file or directory", path)
        self.dirs[path] = 0o755

    def open_read(self, path: str):
        self.calls.append(("open_read", path))
        self._check("open_read", path, OpenFailed)
        if path not in self.files:
            raise OpenFailed(errno.ENOENT, "No such file or directory", path)
        return io.BytesIO(self.files[path])

    def open_write(self, path: str):
        self.calls.append(("open_write", path))
        self._check("open_write", path, OpenFailed)
        return _RemoteWriter(self, path)

    def operations(self, name: str) -> list[str]:
        """Paths passed to every call of one operation, in call order."""
        return [call[1] for call in self.calls if call[0] == name]


@pytest.fixture
def fake_fs() -> FakeRemoteFS:
    """Empty in-memory remote filesystem."""
    return FakeRemoteFS()


@pytest.fixture
def sample_tree(fake_fs: FakeRemoteFS) -> FakeRemoteFS:
    """
    /root
    /root/a        (dir)
    /root/a/f1     (file)
    /root/b        (file)
    """
    fake_fs.mkdir("/root")
    fake_fs.mkdir("/root/a")
    fake_fs.mkfile("/root/a/f1", b"one")
    fake_fs.mkfile("/root/b", b"bee")
    return fake_fs


@pytest.fixture
def deep_tree(fake_fs: FakeRemoteFS) -> FakeRemoteFS:
    """
    /data
      x/            x/y/            x/y/z/          x/y/z/deep.txt
      x/top.txt     x/y/mid.txt     w/              w/leaf.txt
      readme.md
    """
    fake_fs.mkdir("/data")
    fake_fs.mkdir("/data/x")
    fake_fs.mkfile("/data/x/top.txt", b"t")
    fake_fs.mkdir("/data/x/y")
    fake_fs.mkfile("/data/x/y/mid.txt", b"mm")
    fake_fs.mkdir("/data/x/y/z")
    fake_fs.mkfile("/data/x/y/z/deep.txt", b"ddd")
    fake_fs.mkdir("/data/w")
    fake_fs.mkfile("/data/w/leaf.txt", b"llll")
    fake_fs.mkfile("/data/readme.md", b"readme")
    return fake_fs


@pytest.fixture
def tmp_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Creates a temporary INI configuration file for config tests.

    Returns:
        Path to the temporary config file.
    """
    config_content = """[ssh]
host = testserver.local
port = 2222
username = testuser
password = testpass
key_file = ~/.ssh/id_test
use_agent = false

[connection]
timeout_seconds = 45
retry_attempts = 3
retry_delay_seconds = 2

[logging]
level = DEBUG
file = test.log
console = false
"""
    config_path = tmp_path / "test_config.ini"
    config_path.write_text(config_content, encoding="utf-8")
    yield config_path


@pytest.fixture
def minimal_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Creates a minimal INI configuration file with only the host."""
    config_path = tmp_path / "minimal_config.ini"
    config_path.write_text("[ssh]\nhost = minimal.server.com\n", encoding="utf-8")
    yield config_path


@pytest.fixture
def ssh_config() -> SSHConfig:
    """Creates a standard SSHConfig for testing."""
    return SSHConfig(
        host="test.ssh.local",
        port=22,
        username="testuser",
        password="testpass",
        use_agent=False,
    )


@pytest.fixture
def conn_config() -> ConnectionConfig:
    """Creates a standard ConnectionConfig for testing."""
    return ConnectionConfig(
        timeout_seconds=30,
        retry_attempts=1,
        retry_delay_seconds=0,  # No delay in tests
    )


@pytest.fixture
def log_config() -> LogConfig:
    return LogConfig(level="DEBUG", file="", console=False)
