"""Passive-mode data channel for Remote Transfer.

Issues PASV on the control channel, parses the advertised address and
opens the data connection. DataChannel enforces the size limit on every
read.
"""

import logging
import socket
from dataclasses import dataclass
from typing import List, Optional

from src.ftp.control import ControlChannel, Reply
from src.transfer.exceptions import (
    ConnectFailedError,
    ProtocolError,
    TransferTimeoutError,
    TransferTooLargeError,
)
from src.utils.deadline import Deadline

logger = logging.getLogger("remote_transfer.ftp.passive")


@dataclass(frozen=True)
class PassiveAddress:
    """Data connection address advertised by a PASV reply."""
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_pasv_reply(text: str) -> PassiveAddress:
    """
    Parse a PASV reply such as "227 Entering Passive Mode (h1,h2,h3,h4,p1,p2).".

    Args:
        text: Reply text

    Returns:
        PassiveAddress with host "h1.h2.h3.h4" and port p1*256+p2

    Raises:
        ProtocolError: If the address group is missing or malformed
    """
    start = text.find("(")
    end = text.find(")", start + 1)
    if start == -1 or end == -1:
        raise ProtocolError(f"Invalid PASV reply: {text.strip()!r}")

    fields = text[start + 1:end].split(",")
    if len(fields) < 6:
        raise ProtocolError(f"Invalid PASV reply: {text.strip()!r}")

    try:
        numbers = [int(field.strip()) for field in fields[:6]]
    except ValueError:
        raise ProtocolError(f"Invalid PASV address: {text.strip()!r}")

    if any(not 0 <= number <= 255 for number in numbers):
        raise ProtocolError(f"Invalid PASV address: {text.strip()!r}")

    host = ".".join(str(number) for number in numbers[:4])
    port = numbers[4] * 256 + numbers[5]
    return PassiveAddress(host=host, port=port)


class DataChannel:
    """Ephemeral data connection owned by one transfer."""

    def __init__(self, sock: socket.socket, deadline: Deadline, block_size: int = 8192):
        """
        Wrap a connected data socket.

        Args:
            sock: Connected socket
            deadline: Budget shared with the control channel
            block_size: Bytes per read/write
        """
        self._sock: Optional[socket.socket] = sock
        self._deadline = deadline
        self._block_size = block_size

    @property
    def is_open(self) -> bool:
        """True until close() is called."""
        return self._sock is not None

    def read_bounded(self, limit: int) -> bytes:
        """
        Read until the server closes the connection.

        Args:
            limit: Maximum number of bytes accepted

        Returns:
            Everything received

        Raises:
            TransferTooLargeError: If limit bytes arrive before EOF
            TransferTimeoutError: If the deadline expires
        """
        chunks: List[bytes] = []
        received = 0

        while True:
            try:
                self._deadline.apply(self._sock, "Data transfer")
                chunk = self._sock.recv(min(self._block_size, limit - received))
            except socket.timeout:
                raise TransferTimeoutError("Data transfer", self._deadline.seconds)
            except OSError as e:
                raise ProtocolError("Data connection failed", e)

            if not chunk:
                break

            chunks.append(chunk)
            received += len(chunk)
            if received >= limit:
                raise TransferTooLargeError(limit)

        return b"".join(chunks)

    def write_all(self, data: bytes) -> int:
        """
        Send every byte of data.

        Returns:
            Number of bytes sent

        Raises:
            TransferTimeoutError: If the deadline expires
        """
        view = memoryview(data)
        sent = 0

        while sent < len(view):
            block = view[sent:sent + self._block_size]
            try:
                self._deadline.apply(self._sock, "Data transfer")
                self._sock.sendall(block)
            except socket.timeout:
                raise TransferTimeoutError("Data transfer", self._deadline.seconds)
            except OSError as e:
                raise ProtocolError("Data connection failed", e)
            sent += len(block)

        return sent

    def close(self) -> None:
        """Close the data connection (signals EOF on uploads)."""
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
        self._sock = None


class PassiveNegotiator:
    """Negotiates passive-mode data connections over a control channel."""

    def __init__(self, control: ControlChannel, block_size: int = 8192):
        """
        Initialize the negotiator.

        Args:
            control: Authenticated control channel
            block_size: Bytes per data channel read/write
        """
        self._control = control
        self._block_size = block_size

    def request_passive(self) -> PassiveAddress:
        """
        Send PASV and parse the advertised address.

        Raises:
            ProtocolError: If the reply carries no valid address
        """
        self._control.send_command("PASV")
        reply: Reply = self._control.read_reply()
        address = parse_pasv_reply(reply.text)
        logger.debug(f"Passive data address: {address}")
        return address

    def open_data_connection(self, address: PassiveAddress) -> DataChannel:
        """
        Dial the advertised data address.

        Raises:
            ConnectFailedError: If the connection cannot be established
            TransferTimeoutError: If the deadline expires
        """
        deadline = self._control.deadline
        try:
            sock = socket.create_connection(
                (address.host, address.port),
                timeout=deadline.remaining("Data connection")
            )
        except socket.timeout:
            raise TransferTimeoutError("Data connection", deadline.seconds)
        except OSError as e:
            raise ConnectFailedError(address.host, address.port, e)

        return DataChannel(sock, deadline, self._block_size)
