"""Transfer outcome types for Remote Transfer.

Every public operation returns a TransferOutcome instead of raising,
so the host application only ever deals with one discriminated result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union


class ErrorKind(Enum):
    """Failure classification reported to the caller."""
    INPUT_INVALID = "input_invalid"
    CONNECT_FAILED = "connect_failed"
    AUTH_FAILED = "auth_failed"
    PROTOCOL_ERROR = "protocol_error"
    TOO_LARGE = "too_large"
    EMPTY_RESULT = "empty_result"
    CONFLICT = "conflict"
    ALREADY_EXISTS = "already_exists"
    TIMEOUT = "timeout"
    DELEGATE_FAILURE = "delegate_failure"


# Kinds that are reported but do not count as hard failures
SOFT_KINDS = frozenset({ErrorKind.EMPTY_RESULT, ErrorKind.ALREADY_EXISTS})


class TransferStatus(Enum):
    """Status of an operation that does not return a payload."""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    CONFLICT = "conflict"


Payload = Union[str, List[str]]


@dataclass
class TransferOutcome:
    """Result of a single transfer operation."""
    operation: str
    target: str
    success: bool
    payload: Optional[Payload] = None
    status: Optional[TransferStatus] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    bytes_transferred: int = 0
    duration_seconds: float = 0.0

    @property
    def is_soft(self) -> bool:
        """True for success-adjacent results (empty result, already exists)."""
        if self.status == TransferStatus.ALREADY_EXISTS:
            return True
        return self.error_kind in SOFT_KINDS

    @property
    def is_failure(self) -> bool:
        """True for hard failures only."""
        return not self.success and not self.is_soft

    @classmethod
    def with_payload(
        cls,
        operation: str,
        target: str,
        payload: Payload,
        bytes_transferred: int = 0
    ) -> "TransferOutcome":
        """Successful outcome carrying data."""
        return cls(
            operation=operation,
            target=target,
            success=True,
            payload=payload,
            bytes_transferred=bytes_transferred,
        )

    @classmethod
    def with_status(
        cls,
        operation: str,
        target: str,
        status: TransferStatus,
        bytes_transferred: int = 0
    ) -> "TransferOutcome":
        """
        Outcome carrying a status.

        CONFLICT is reported as a failure with the matching error kind;
        CREATED and ALREADY_EXISTS are successes.
        """
        if status == TransferStatus.CONFLICT:
            return cls(
                operation=operation,
                target=target,
                success=False,
                status=status,
                error_kind=ErrorKind.CONFLICT,
                error_message="A file already occupies the path",
            )
        return cls(
            operation=operation,
            target=target,
            success=True,
            status=status,
            bytes_transferred=bytes_transferred,
        )

    @classmethod
    def failure(
        cls,
        operation: str,
        target: str,
        kind: ErrorKind,
        message: Optional[str] = None
    ) -> "TransferOutcome":
        """Failed (or soft) outcome."""
        return cls(
            operation=operation,
            target=target,
            success=False,
            error_kind=kind,
            error_message=message,
        )
