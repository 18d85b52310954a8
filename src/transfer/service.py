"""Transfer service for Remote Transfer.

Host-facing entry points. Each call resolves its URI, picks the backend
for the scheme, runs exactly one operation and reports the result as a
TransferOutcome; transfer failures never escape as exceptions.
"""

import logging
import time
from typing import Callable, Optional

from src.config.credentials import CredentialManager
from src.config.settings import TransferSettings
from src.config.target import ConnectionTarget, Scheme, parse_target
from src.ftp.executor import FtpBackend
from src.ftp.listing import entry_names
from src.sftp.delegate import SftpBackend
from src.transfer import codec
from src.transfer.backend import RemoteBackend
from src.transfer.exceptions import TransferError
from src.transfer.outcome import ErrorKind, TransferOutcome, TransferStatus
from src.utils.logging import redact

logger = logging.getLogger("remote_transfer.service")


BackendFactory = Callable[[ConnectionTarget, TransferSettings], RemoteBackend]


def backend_for(target: ConnectionTarget, settings: TransferSettings) -> RemoteBackend:
    """
    Pick the backend for a target's scheme.

    Args:
        target: Resolved connection target
        settings: Transfer settings

    Returns:
        FtpBackend for ftp://, SftpBackend for sftp://
    """
    if target.scheme == Scheme.SFTP:
        return SftpBackend(target, settings)
    return FtpBackend(target, settings)


class TransferService:
    """Runs transfer operations and reports TransferOutcome results."""

    def __init__(
        self,
        settings: Optional[TransferSettings] = None,
        credentials: Optional[CredentialManager] = None,
        backend_factory: BackendFactory = backend_for
    ):
        """
        Initialize the service.

        Args:
            settings: Transfer settings (defaults if omitted)
            credentials: Keyring access for URIs without a password
            backend_factory: Creates the backend for a target
        """
        self._settings = settings or TransferSettings()
        self._credentials = credentials
        if self._credentials is None and self._settings.use_keyring:
            self._credentials = CredentialManager()
        self._backend_factory = backend_factory

    @property
    def settings(self) -> TransferSettings:
        """Settings applied to every call."""
        return self._settings

    def get_file(self, uri: str) -> TransferOutcome:
        """
        Download a file in binary mode.

        Returns:
            Outcome whose payload is the base64-encoded content
        """
        def run(backend: RemoteBackend, target: ConnectionTarget) -> TransferOutcome:
            data = backend.download(target.remote_path, binary=True)
            if not data:
                return TransferOutcome.failure(
                    "get_file", target.display_uri, ErrorKind.EMPTY_RESULT, "File is empty"
                )
            return TransferOutcome.with_payload(
                "get_file", target.display_uri, codec.encode_binary(data), len(data)
            )

        return self._execute("get_file", uri, run)

    def get_text(self, uri: str) -> TransferOutcome:
        """
        Download a file in ASCII mode.

        Returns:
            Outcome whose payload is the text with LF line endings, trimmed
        """
        def run(backend: RemoteBackend, target: ConnectionTarget) -> TransferOutcome:
            data = backend.download(target.remote_path, binary=False)
            if not data:
                return TransferOutcome.failure(
                    "get_text", target.display_uri, ErrorKind.EMPTY_RESULT, "File is empty"
                )
            text = codec.text_from_wire(data, self._settings.text_encoding)
            return TransferOutcome.with_payload("get_text", target.display_uri, text, len(data))

        return self._execute("get_text", uri, run)

    def put_file(self, uri: str, payload: str) -> TransferOutcome:
        """
        Upload base64 content in binary mode.

        Args:
            uri: Destination URI
            payload: Base64-encoded file content

        Returns:
            Outcome with status CREATED on success
        """
        def run(backend: RemoteBackend, target: ConnectionTarget) -> TransferOutcome:
            data = codec.decode_binary(payload)
            backend.upload(target.remote_path, data, binary=True)
            return TransferOutcome.with_status(
                "put_file", target.display_uri, TransferStatus.CREATED, len(data)
            )

        return self._execute("put_file", uri, run)

    def put_text(self, uri: str, text: str) -> TransferOutcome:
        """
        Upload text in ASCII mode, LF line endings sent as CRLF.

        Returns:
            Outcome with status CREATED on success
        """
        def run(backend: RemoteBackend, target: ConnectionTarget) -> TransferOutcome:
            data = codec.text_to_wire(text, self._settings.text_encoding)
            backend.upload(target.remote_path, data, binary=False)
            return TransferOutcome.with_status(
                "put_text", target.display_uri, TransferStatus.CREATED, len(data)
            )

        return self._execute("put_text", uri, run)

    def create_directory(self, uri: str) -> TransferOutcome:
        """
        Create a directory.

        Returns:
            CREATED, ALREADY_EXISTS (soft success) or CONFLICT (failure)
        """
        def run(backend: RemoteBackend, target: ConnectionTarget) -> TransferOutcome:
            status = backend.make_directory(target.remote_path)
            return TransferOutcome.with_status("create_directory", target.display_uri, status)

        return self._execute("create_directory", uri, run)

    def list_files(self, uri: str) -> TransferOutcome:
        """
        List a directory.

        Returns:
            Outcome whose payload is the ordered list of entry names;
            an empty directory is a soft EMPTY_RESULT
        """
        def run(backend: RemoteBackend, target: ConnectionTarget) -> TransferOutcome:
            names = entry_names(backend.list_directory(target.remote_path))
            if not names:
                outcome = TransferOutcome.failure(
                    "list_files", target.display_uri, ErrorKind.EMPTY_RESULT, "No entries"
                )
                outcome.payload = []
                return outcome
            return TransferOutcome.with_payload(
                "list_files", target.display_uri, names, backend.bytes_transferred
            )

        return self._execute("list_files", uri, run)

    def _resolve(self, uri: str) -> ConnectionTarget:
        target = parse_target(uri)
        if self._credentials is not None:
            target = self._credentials.resolve(target)
        return target

    def _execute(
        self,
        operation: str,
        uri: str,
        run: Callable[[RemoteBackend, ConnectionTarget], TransferOutcome]
    ) -> TransferOutcome:
        """Resolve the URI, run the operation and convert failures."""
        start_time = time.time()
        display = redact(uri or "")
        target: Optional[ConnectionTarget] = None

        try:
            target = self._resolve(uri)
            display = target.display_uri
            outcome = run(self._backend_factory(target, self._settings), target)
        except TransferError as e:
            logger.warning(f"{operation} {display} failed: {e}")
            outcome = TransferOutcome.failure(operation, display, e.kind, str(e))
        except Exception as e:
            logger.exception(f"{operation} {display} failed unexpectedly")
            kind = ErrorKind.PROTOCOL_ERROR
            if target is not None and target.scheme == Scheme.SFTP:
                kind = ErrorKind.DELEGATE_FAILURE
            outcome = TransferOutcome.failure(operation, display, kind, str(e))

        outcome.duration_seconds = time.time() - start_time
        if outcome.success:
            logger.info(f"{operation} {display} succeeded")
        elif outcome.is_soft:
            logger.info(f"{operation} {display}: {outcome.error_kind.value}")
        return outcome


_default_service: Optional[TransferService] = None


def default_service() -> TransferService:
    """Shared service with default settings."""
    global _default_service
    if _default_service is None:
        _default_service = TransferService()
    return _default_service


def get_file(uri: str) -> TransferOutcome:
    """Download a file as base64 using the default service."""
    return default_service().get_file(uri)


def get_text(uri: str) -> TransferOutcome:
    """Download a text file using the default service."""
    return default_service().get_text(uri)


def put_file(uri: str, payload: str) -> TransferOutcome:
    """Upload base64 content using the default service."""
    return default_service().put_file(uri, payload)


def put_text(uri: str, text: str) -> TransferOutcome:
    """Upload text using the default service."""
    return default_service().put_text(uri, text)


def create_directory(uri: str) -> TransferOutcome:
    """Create a directory using the default service."""
    return default_service().create_directory(uri)


def list_files(uri: str) -> TransferOutcome:
    """List a directory using the default service."""
    return default_service().list_files(uri)
