"""Per-call deadline for Remote Transfer.

One Deadline is created per public operation and consulted before every
connect, read and write on both channels, so the configured timeout is a
wall-clock budget for the whole call rather than a per-socket timeout.
"""

import time

from src.transfer.exceptions import TransferTimeoutError


class Deadline:
    """Wall-clock budget shared by every socket operation of one call."""

    def __init__(self, seconds: float):
        """
        Start the clock.

        Args:
            seconds: Total budget in seconds
        """
        self._seconds = seconds
        self._expires_at = time.monotonic() + seconds

    @property
    def seconds(self) -> float:
        """Total budget in seconds."""
        return self._seconds

    def remaining(self, operation: str = "Operation") -> float:
        """
        Get the time left.

        Args:
            operation: Name used in the timeout message

        Returns:
            Seconds left (always positive)

        Raises:
            TransferTimeoutError: If the budget is used up
        """
        left = self._expires_at - time.monotonic()
        if left <= 0:
            raise TransferTimeoutError(operation, self._seconds)
        return left

    def apply(self, sock, operation: str = "Operation") -> None:
        """Set the socket timeout to the time left."""
        sock.settimeout(self.remaining(operation))
