"""Backend capability interface for Remote Transfer.

The FTP engine and the SFTP delegate are interchangeable variants of
RemoteBackend, so TransferService never branches on protocol details.
"""

from abc import ABC, abstractmethod
from typing import List

from src.config.settings import TransferSettings
from src.config.target import ConnectionTarget
from src.ftp.listing import DirectoryEntry
from src.transfer.exceptions import InputInvalidError
from src.transfer.outcome import TransferStatus
from src.utils.validators import validate_remote_path


class RemoteBackend(ABC):
    """Operations every transfer backend provides."""

    def __init__(self, target: ConnectionTarget, settings: TransferSettings):
        """
        Bind the backend to one target.

        Args:
            target: Resolved connection target
            settings: Timeout, size limit and codec settings
        """
        self._target = target
        self._settings = settings
        self._bytes_transferred = 0

    @property
    def target(self) -> ConnectionTarget:
        """Connection target this backend talks to."""
        return self._target

    @property
    def settings(self) -> TransferSettings:
        """Settings applied to every operation."""
        return self._settings

    @property
    def bytes_transferred(self) -> int:
        """Bytes read or written on the data path by the last operation."""
        return self._bytes_transferred

    @abstractmethod
    def download(self, path: str, binary: bool = True) -> bytes:
        """
        Fetch a remote file.

        Args:
            path: Remote file path
            binary: Binary (True) or ASCII/text (False) transfer

        Returns:
            Raw bytes, possibly empty

        Raises:
            TransferError: On any failure
        """

    @abstractmethod
    def upload(self, path: str, data: bytes, binary: bool = True) -> None:
        """
        Store bytes at a remote path.

        Raises:
            TransferError: On any failure
        """

    @abstractmethod
    def list_directory(self, path: str) -> List[DirectoryEntry]:
        """
        List a remote directory.

        Raises:
            TransferError: On any failure
        """

    @abstractmethod
    def make_directory(self, path: str) -> TransferStatus:
        """
        Create a remote directory.

        Returns:
            CREATED, ALREADY_EXISTS or CONFLICT

        Raises:
            TransferError: On any failure
        """


def require_path(path: str) -> None:
    """
    Reject paths that are empty or would break a command line.

    Raises:
        InputInvalidError: If the path is unusable
    """
    is_valid, error = validate_remote_path(path)
    if not is_valid:
        raise InputInvalidError(error)
