"""
Single-file upload and download.

Both directions open the source, then the destination, and copy in chunks.
Failure to open either side raises OpenFailed; a failure once both are open
raises CopyFailed carrying the number of bytes already written.
"""

import logging
from typing import BinaryIO

from .cancel import CancelToken, check_cancelled
from .entry import normalize_path
from .errors import CopyFailed, OpenFailed
from .remote_client import RemoteClient
from .sftp_client import TRANSPORT_ERRORS

logger = logging.getLogger(__name__)

CHUNK_SIZE = 32768

# A dropped SSH channel raises SSHException or EOFError, not OSError
COPY_ERRORS = (OSError, *TRANSPORT_ERRORS)


def _open_local(path: str, mode: str) -> BinaryIO:
    try:
        return open(path, mode)
    except OSError as e:
        raise OpenFailed(e.errno, e.strerror or str(e), path) from e


def _copy(
    source: BinaryIO,
    destination: BinaryIO,
    source_name: str,
    destination_name: str,
    cancel: CancelToken | None,
) -> int:
    copied = 0
    try:
        while True:
            check_cancelled(cancel, "transfer")
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            destination.write(chunk)
            copied += len(chunk)
        # Buffered remote writes surface their errors here rather than at close
        destination.flush()
    except COPY_ERRORS as e:
        logger.error("Copy %s -> %s failed after %d bytes: %s", source_name, destination_name, copied, e)
        raise CopyFailed(source_name, destination_name, copied, str(e)) from e
    return copied


def _copy_and_close(
    source: BinaryIO,
    destination: BinaryIO,
    source_name: str,
    destination_name: str,
    cancel: CancelToken | None,
) -> int:
    """Copy, then close the destination; a failed close is a failed copy."""
    try:
        copied = _copy(source, destination, source_name, destination_name, cancel)
    except BaseException:
        try:
            destination.close()
        except COPY_ERRORS as e:
            logger.debug("Ignoring error closing %s after failed copy: %s", destination_name, e)
        raise

    try:
        destination.close()
    except COPY_ERRORS as e:
        logger.error("Closing %s failed after %d bytes: %s", destination_name, copied, e)
        raise CopyFailed(source_name, destination_name, copied, str(e)) from e
    return copied


def download(
    fs: RemoteClient,
    remote_path: str,
    local_path: str,
    cancel: CancelToken | None = None,
) -> int:
    """Copy a remote file to local_path, replacing it. Returns bytes copied."""
    remote_path = normalize_path(remote_path)
    logger.info("Downloading [%s] to [%s] ...", remote_path, local_path)

    check_cancelled(cancel, "download")
    with fs.open_read(remote_path) as src_file:
        dst_file = _open_local(local_path, "wb")
        copied = _copy_and_close(src_file, dst_file, remote_path, local_path, cancel)

    logger.info("%d bytes copied", copied)
    return copied


def upload(
    fs: RemoteClient,
    local_path: str,
    remote_path: str,
    cancel: CancelToken | None = None,
) -> int:
    """Copy local_path to a remote file, creating or truncating it. Returns bytes copied."""
    remote_path = normalize_path(remote_path)
    logger.info("Uploading [%s] to [%s] ...", local_path, remote_path)

    check_cancelled(cancel, "upload")
    with _open_local(local_path, "rb") as src_file:
        dst_file = fs.open_write(remote_path)
        copied = _copy_and_close(src_file, dst_file, local_path, remote_path, cancel)

    logger.info("%d bytes copied", copied)
    return copied
