"""FTP control channel for Remote Transfer.

Provides ChannelState enum, Reply dataclass and ControlChannel, the
hand-driven TCP connection that carries commands and replies for a
single operation.
"""

import logging
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from src.transfer.exceptions import (
    AuthFailedError,
    ConnectFailedError,
    InputInvalidError,
    ProtocolError,
    TransferTimeoutError,
    UnexpectedReplyError,
)
from src.utils.deadline import Deadline

logger = logging.getLogger("remote_transfer.ftp.control")


class ChannelState(Enum):
    """Control channel state."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    MODE_SELECTED = "mode_selected"
    AWAITING_DATA_REPLY = "awaiting_data_reply"
    TRANSFERRING = "transferring"
    CLOSED = "closed"


@dataclass(frozen=True)
class Reply:
    """A complete (possibly multi-line) server reply."""
    code: int
    message: str
    lines: Tuple[str, ...] = ()

    @property
    def text(self) -> str:
        """Full reply text, lines joined with LF."""
        if self.lines:
            return "\n".join(self.lines)
        return f"{self.code} {self.message}"

    def __str__(self) -> str:
        return f"{self.code} {self.message}".strip()


def parse_reply_code(line: str) -> Optional[int]:
    """
    Extract the 3-digit code that starts a reply line.

    Args:
        line: One reply line without its terminator

    Returns:
        The code, or None if the line does not start with one
    """
    head = line[:3]
    if len(head) == 3 and head.isdigit():
        return int(head)
    return None


class ControlChannel:
    """FTP control connection serving exactly one operation."""

    # Bytes requested per socket read
    RECV_SIZE = 1024

    def __init__(self, deadline: Deadline, encoding: str = "utf-8"):
        """
        Initialize the control channel.

        Args:
            deadline: Budget shared by every socket operation of the call
            encoding: Encoding for command and reply text
        """
        self._deadline = deadline
        self._encoding = encoding
        self._sock: Optional[socket.socket] = None
        self._buffer = b""
        self._state = ChannelState.DISCONNECTED
        self._host: Optional[str] = None
        self._port: Optional[int] = None
        self._greeting: Optional[Reply] = None

    @property
    def state(self) -> ChannelState:
        """Current channel state."""
        return self._state

    @state.setter
    def state(self, value: ChannelState) -> None:
        logger.debug(f"Control channel: {self._state.value} -> {value.value}")
        self._state = value

    @property
    def is_open(self) -> bool:
        """True while the socket is open."""
        return self._sock is not None

    @property
    def greeting(self) -> Optional[Reply]:
        """Greeting sent by the server on connect."""
        return self._greeting

    @property
    def deadline(self) -> Deadline:
        """Deadline shared with the data channel."""
        return self._deadline

    def connect(self, host: str, port: int) -> Reply:
        """
        Dial the server and consume its greeting.

        Args:
            host: Server host
            port: Server port

        Returns:
            The greeting reply

        Raises:
            ConnectFailedError: If the connection cannot be established
            TransferTimeoutError: If the deadline expires
        """
        self._host = host
        self._port = port

        try:
            self._sock = socket.create_connection(
                (host, port),
                timeout=self._deadline.remaining("Connection")
            )
        except socket.timeout:
            raise TransferTimeoutError("Connection", self._deadline.seconds)
        except OSError as e:
            raise ConnectFailedError(host, port, e)

        self.state = ChannelState.CONNECTED
        logger.debug(f"Connected to {host}:{port}")

        self._greeting = self.read_reply()
        return self._greeting

    def authenticate(self, username: str, password: str) -> None:
        """
        Log in with USER/PASS.

        Args:
            username: FTP user name
            password: FTP password

        Raises:
            AuthFailedError: If USER is not answered with 331 or PASS with 230
        """
        self.state = ChannelState.AUTHENTICATING

        try:
            self.expect(f"USER {username}", 331)
            self.expect(f"PASS {password}", 230)
        except UnexpectedReplyError as e:
            raise AuthFailedError(username, e)

        self.state = ChannelState.READY

    def select_mode(self, binary: bool) -> Reply:
        """
        Select binary (TYPE I) or ASCII (TYPE A) transfer mode.

        The reply is read but not validated.
        """
        self.send_command("TYPE I" if binary else "TYPE A")
        reply = self.read_reply()
        self.state = ChannelState.MODE_SELECTED
        return reply

    def send_command(self, line: str) -> None:
        """
        Send one CRLF-terminated command.

        Raises:
            ConnectFailedError: If the connection is gone
            InputInvalidError: If the line cannot be encoded
            TransferTimeoutError: If the deadline expires
        """
        if self._sock is None:
            raise ConnectFailedError(self._host or "", self._port or 0)

        try:
            wire = f"{line}\r\n".encode(self._encoding)
        except UnicodeEncodeError as e:
            verb = line.split(" ", 1)[0]
            raise InputInvalidError(f"Cannot encode {verb} command as {self._encoding}") from e

        if line.startswith("PASS "):
            logger.debug(">>> PASS ****")
        else:
            logger.debug(f">>> {line}")

        try:
            self._deadline.apply(self._sock, "Command")
            self._sock.sendall(wire)
        except socket.timeout:
            raise TransferTimeoutError("Command", self._deadline.seconds)
        except OSError as e:
            raise ConnectFailedError(self._host, self._port, e)

    def read_reply(self) -> Reply:
        """
        Read one complete reply.

        Follows multi-line replies ("123-..." up to "123 ...") and keeps
        bytes that arrive after the reply for the next call.

        Returns:
            The parsed reply

        Raises:
            ProtocolError: If the reply is malformed or the server hangs up
            TransferTimeoutError: If the deadline expires
        """
        first = self._read_line()
        code = parse_reply_code(first)
        if code is None:
            raise ProtocolError(f"Malformed reply: {first!r}")

        lines = [first]
        if first[3:4] == "-":
            terminator = f"{code} "
            while True:
                line = self._read_line()
                lines.append(line)
                if line.startswith(terminator) or line == str(code):
                    break

        reply = Reply(code=code, message=first[4:].strip(), lines=tuple(lines))
        logger.debug(f"<<< {reply}")
        return reply

    def expect(self, line: str, *codes: int) -> Reply:
        """
        Send a command and require one of the given reply codes.

        Raises:
            UnexpectedReplyError: If the reply code is not one of codes
        """
        self.send_command(line)
        reply = self.read_reply()
        if reply.code not in codes:
            command = "PASS ****" if line.startswith("PASS ") else line
            raise UnexpectedReplyError(command, codes, reply)
        return reply

    def close(self) -> None:
        """Close the control connection."""
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                # Already torn down by the peer
                pass
        self._sock = None
        self._buffer = b""
        self.state = ChannelState.CLOSED

    def _read_line(self) -> str:
        """Read up to and excluding the next LF, dropping a trailing CR."""
        while b"\n" not in self._buffer:
            if self._sock is None:
                raise ProtocolError("Control connection is closed")
            try:
                self._deadline.apply(self._sock, "Reply")
                chunk = self._sock.recv(self.RECV_SIZE)
            except socket.timeout:
                raise TransferTimeoutError("Reply", self._deadline.seconds)
            except OSError as e:
                raise ConnectFailedError(self._host, self._port, e)
            if not chunk:
                raise ProtocolError("Control connection closed by server")
            self._buffer += chunk

        raw, self._buffer = self._buffer.split(b"\n", 1)
        return raw.rstrip(b"\r").decode(self._encoding, errors="replace")

    def __enter__(self) -> "ControlChannel":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
