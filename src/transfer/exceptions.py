"""Transfer exceptions for Remote Transfer.

Custom exception hierarchy shared by the FTP engine and the SFTP
delegate. Each class maps to exactly one ErrorKind so failures can be
reported to the caller as a TransferOutcome.
"""

from typing import Iterable, Optional

from src.transfer.outcome import ErrorKind


class TransferError(Exception):
    """Base exception for all transfer errors."""

    kind = ErrorKind.PROTOCOL_ERROR

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class InputInvalidError(TransferError, ValueError):
    """Caller input (URI, path, payload, settings) is unusable."""

    kind = ErrorKind.INPUT_INVALID


class ConnectFailedError(TransferError):
    """Failed to establish (or keep) a TCP connection."""

    kind = ErrorKind.CONNECT_FAILED

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class AuthFailedError(TransferError):
    """Login was rejected."""

    kind = ErrorKind.AUTH_FAILED

    def __init__(self, username: str, original_error: Exception = None):
        self.username = username
        message = f"Authentication failed for user '{username}'"
        super().__init__(message, original_error)


class ProtocolError(TransferError):
    """Server reply could not be parsed or was not the one required."""

    kind = ErrorKind.PROTOCOL_ERROR


class UnexpectedReplyError(ProtocolError):
    """Reply code did not match the code required by the protocol step."""

    def __init__(self, command: str, expected: Iterable[int], reply):
        self.command = command
        self.expected = tuple(expected)
        self.reply = reply
        wanted = "/".join(str(code) for code in self.expected)
        message = f"'{command}' expected {wanted}, got {reply}"
        super().__init__(message)


class TransferTooLargeError(TransferError):
    """Data exceeded the configured size limit."""

    kind = ErrorKind.TOO_LARGE

    def __init__(self, limit: int):
        self.limit = limit
        message = f"Transfer exceeds the maximum size of {limit} bytes"
        super().__init__(message)


class TransferTimeoutError(TransferError):
    """Operation ran past its deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, operation: str = "Operation", timeout: float = 30):
        self.timeout = timeout
        message = f"{operation} timed out after {timeout:g} seconds"
        super().__init__(message)


class DelegateError(TransferError):
    """SFTP client reported an error."""

    kind = ErrorKind.DELEGATE_FAILURE

    def __init__(
        self,
        operation: str,
        path: Optional[str] = None,
        original_error: Exception = None
    ):
        self.operation = operation
        self.path = path
        if path:
            message = f"SFTP {operation} failed for '{path}'"
        else:
            message = f"SFTP {operation} failed"
        super().__init__(message, original_error)
