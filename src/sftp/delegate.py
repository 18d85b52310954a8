"""SFTP backend for Remote Transfer.

Forwards every operation to a paramiko SSH/SFTP session opened for the
call. The size limit and the three-way make-directory outcome are the
same as for FTP; the FTP command state machine is not involved.
"""

import errno
import logging
import posixpath
import socket
import stat
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

import paramiko

from src.config.settings import TransferSettings
from src.config.target import ConnectionTarget
from src.ftp.listing import DirectoryEntry
from src.transfer.backend import RemoteBackend, require_path
from src.transfer.exceptions import (
    AuthFailedError,
    ConnectFailedError,
    DelegateError,
    TransferError,
    TransferTimeoutError,
    TransferTooLargeError,
)
from src.transfer.outcome import TransferStatus
from src.utils.deadline import Deadline

logger = logging.getLogger("remote_transfer.sftp")


def _is_missing(error: Exception) -> bool:
    """True if an SFTP error means the path does not exist."""
    return isinstance(error, FileNotFoundError) or getattr(error, "errno", None) == errno.ENOENT


class SftpBackend(RemoteBackend):
    """RemoteBackend delegating to paramiko."""

    def __init__(
        self,
        target: ConnectionTarget,
        settings: Optional[TransferSettings] = None,
        client_factory: Callable[[], paramiko.SSHClient] = paramiko.SSHClient
    ):
        """
        Initialize the backend.

        Args:
            target: Resolved sftp:// target
            settings: Timeout and size limit (defaults if omitted)
            client_factory: Creates the SSH client (replaced in tests)
        """
        super().__init__(target, settings or TransferSettings())
        self._client_factory = client_factory

    @contextmanager
    def _session(self, operation: str, path: Optional[str] = None) -> Iterator[paramiko.SFTPClient]:
        """
        Open an SSH connection and SFTP session for one operation.

        paramiko errors raised inside the block are reported as
        DelegateError; transfer errors pass through unchanged.
        """
        deadline = Deadline(self._settings.timeout)
        ssh = self._client_factory()
        sftp = None

        try:
            ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
            remaining = deadline.remaining("Connection")
            try:
                ssh.connect(
                    hostname=self._target.host,
                    port=self._target.port,
                    username=self._target.username,
                    password=self._target.password,
                    timeout=remaining,
                    banner_timeout=remaining,
                    auth_timeout=remaining,
                    look_for_keys=False,
                    allow_agent=False,
                )
            except paramiko.AuthenticationException as e:
                raise AuthFailedError(self._target.username, e)
            except socket.timeout:
                raise TransferTimeoutError("Connection", deadline.seconds)
            except (paramiko.SSHException, OSError) as e:
                raise ConnectFailedError(self._target.host, self._target.port, e)

            try:
                sftp = ssh.open_sftp()
                sftp.get_channel().settimeout(deadline.remaining(operation))
                yield sftp
            except TransferError:
                raise
            except socket.timeout:
                raise TransferTimeoutError(operation, deadline.seconds)
            except (paramiko.SSHException, OSError) as e:
                raise DelegateError(operation, path, e)
        finally:
            if sftp is not None:
                try:
                    sftp.close()
                except Exception as e:
                    logger.debug(f"Error closing SFTP session: {e}")
            ssh.close()

    def download(self, path: str, binary: bool = True) -> bytes:
        """Read a remote file in blocks, bounded by the size limit."""
        require_path(path)
        limit = self._settings.max_transfer_size
        chunks: List[bytes] = []
        received = 0

        with self._session("download", path) as sftp:
            with sftp.open(path, "rb") as handle:
                while True:
                    chunk = handle.read(min(self._settings.block_size, limit - received))
                    if not chunk:
                        break
                    chunks.append(chunk)
                    received += len(chunk)
                    if received >= limit:
                        raise TransferTooLargeError(limit)

        self._bytes_transferred = received
        logger.debug(f"Downloaded {received} bytes from {path}")
        return b"".join(chunks)

    def upload(self, path: str, data: bytes, binary: bool = True) -> None:
        """Create parent directories as needed, then write the file."""
        require_path(path)

        with self._session("upload", path) as sftp:
            parent = posixpath.dirname(path)
            if parent and parent != "/":
                self._mkdir_all(sftp, parent)
            with sftp.open(path, "wb") as handle:
                handle.write(data)

        self._bytes_transferred = len(data)
        logger.debug(f"Uploaded {len(data)} bytes to {path}")

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        """Read a remote directory in server order."""
        directory = path or "."

        with self._session("list", directory) as sftp:
            names = sftp.listdir(directory)

        return [DirectoryEntry(name=name, line=name) for name in names]

    def make_directory(self, path: str) -> TransferStatus:
        """Stat the path, then create it (with parents) if missing."""
        require_path(path)

        with self._session("mkdir", path) as sftp:
            try:
                attributes = sftp.stat(path)
            except IOError as e:
                if not _is_missing(e):
                    raise
            else:
                if stat.S_ISDIR(attributes.st_mode or 0):
                    return TransferStatus.ALREADY_EXISTS
                return TransferStatus.CONFLICT

            self._mkdir_all(sftp, path)

        return TransferStatus.CREATED

    def _mkdir_all(self, sftp: paramiko.SFTPClient, path: str) -> None:
        """
        Create a directory and any missing parents.

        Raises:
            DelegateError: If a path component exists but is not a directory
        """
        current = "/" if path.startswith("/") else ""
        for part in [p for p in path.split("/") if p]:
            current = posixpath.join(current, part) if current else part
            try:
                attributes = sftp.stat(current)
            except IOError as e:
                if not _is_missing(e):
                    raise
                logger.debug(f"Creating remote directory {current}")
                sftp.mkdir(current)
                continue

            if not stat.S_ISDIR(attributes.st_mode or 0):
                raise DelegateError("mkdir", current)
