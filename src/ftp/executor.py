"""FTP transfer executor for Remote Transfer.

Drives one operation (download, upload, list, make directory) through
its command sequence on a fresh control channel, coordinating the
passive data channel and the size limit. Nothing is retried: the first
unexpected reply aborts the call and closes both channels.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional

from src.config.settings import TransferSettings
from src.config.target import ConnectionTarget
from src.ftp.control import ChannelState, ControlChannel
from src.ftp.listing import DirectoryEntry, parse_listing
from src.ftp.passive import DataChannel, PassiveNegotiator
from src.transfer.backend import RemoteBackend, require_path
from src.transfer.exceptions import UnexpectedReplyError
from src.transfer.outcome import TransferStatus
from src.utils.deadline import Deadline

logger = logging.getLogger("remote_transfer.ftp.executor")

# Positive preliminary replies to RETR/STOR/LIST. 125 is sent instead of
# 150 by servers that see the data connection already open.
PRELIMINARY_CODES = (150, 125)
TRANSFER_COMPLETE = 226
FILE_STATUS = 213
ACTION_OK = 250
PATH_CREATED = 257


class ExecutorState(Enum):
    """Progress of a single operation."""
    INIT = "init"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    MODE_SET = "mode_set"
    PASSIVE_NEGOTIATED = "passive_negotiated"
    DATA_OPEN = "data_open"
    COMMAND_SENT = "command_sent"
    PRELIMINARY = "preliminary"
    TRANSFERRING = "transferring"
    COMPLETED = "completed"
    FAILED = "failed"


class TransferExecutor:
    """Runs one FTP operation end-to-end."""

    def __init__(self, target: ConnectionTarget, settings: Optional[TransferSettings] = None):
        """
        Initialize the executor.

        Args:
            target: Resolved connection target
            settings: Timeout and size limit (defaults if omitted)
        """
        self._target = target
        self._settings = settings or TransferSettings()
        self._state = ExecutorState.INIT
        self._control: Optional[ControlChannel] = None
        self._data: Optional[DataChannel] = None
        self._bytes_transferred = 0

    @property
    def state(self) -> ExecutorState:
        """Current operation state."""
        return self._state

    @property
    def bytes_transferred(self) -> int:
        """Bytes moved over the data channel by the last operation."""
        return self._bytes_transferred

    def _advance(self, state: ExecutorState) -> None:
        logger.debug(f"Executor: {self._state.value} -> {state.value}")
        self._state = state

    @contextmanager
    def _session(self) -> Iterator[ControlChannel]:
        """
        Connect and authenticate a fresh control channel.

        Both channels are closed on exit whether or not the operation
        succeeded.
        """
        if self._state != ExecutorState.INIT:
            raise RuntimeError("TransferExecutor runs exactly one operation")

        deadline = Deadline(self._settings.timeout)
        self._control = ControlChannel(deadline, self._settings.text_encoding)
        try:
            self._control.connect(self._target.host, self._target.port)
            self._advance(ExecutorState.CONNECTED)

            self._control.authenticate(self._target.username, self._target.password)
            self._advance(ExecutorState.AUTHENTICATED)

            yield self._control
            self._advance(ExecutorState.COMPLETED)
        except Exception:
            self._advance(ExecutorState.FAILED)
            raise
        finally:
            self._close_data()
            self._control.close()

    def _open_data_channel(self, control: ControlChannel, binary: bool) -> DataChannel:
        """Select the transfer mode, negotiate PASV and dial the data channel."""
        control.select_mode(binary)
        self._advance(ExecutorState.MODE_SET)

        negotiator = PassiveNegotiator(control, self._settings.block_size)
        address = negotiator.request_passive()
        self._advance(ExecutorState.PASSIVE_NEGOTIATED)

        self._data = negotiator.open_data_connection(address)
        self._advance(ExecutorState.DATA_OPEN)
        return self._data

    def _start_transfer(self, control: ControlChannel, command: str) -> None:
        """Send the transfer command and require a preliminary reply."""
        control.send_command(command)
        self._advance(ExecutorState.COMMAND_SENT)
        control.state = ChannelState.AWAITING_DATA_REPLY

        reply = control.read_reply()
        if reply.code not in PRELIMINARY_CODES:
            raise UnexpectedReplyError(command, PRELIMINARY_CODES, reply)
        self._advance(ExecutorState.PRELIMINARY)

        self._advance(ExecutorState.TRANSFERRING)
        control.state = ChannelState.TRANSFERRING

    def _finish_transfer(self, control: ControlChannel, command: str) -> None:
        """Close the data channel, then require the completion reply."""
        self._close_data()
        reply = control.read_reply()
        if reply.code != TRANSFER_COMPLETE:
            raise UnexpectedReplyError(command, (TRANSFER_COMPLETE,), reply)

    def _close_data(self) -> None:
        if self._data is not None:
            self._data.close()
            self._data = None

    def download(self, path: str, binary: bool = True) -> bytes:
        """
        Retrieve a file with RETR.

        Args:
            path: Remote file path
            binary: TYPE I when True, TYPE A otherwise

        Returns:
            Raw bytes (empty if the file is empty)

        Raises:
            TransferTooLargeError: If the file reaches the size limit
            TransferError: On any other failure
        """
        require_path(path)
        command = f"RETR {path}"

        with self._session() as control:
            data = self._open_data_channel(control, binary)
            self._start_transfer(control, command)

            payload = data.read_bounded(self._settings.max_transfer_size)
            self._bytes_transferred = len(payload)

            self._finish_transfer(control, command)

        logger.debug(f"Downloaded {len(payload)} bytes from {path}")
        return payload

    def upload(self, path: str, payload: bytes, binary: bool = True) -> None:
        """
        Store a file with STOR.

        The data channel is closed before the completion reply is read,
        since the server only sees end-of-file once it is closed.

        Args:
            path: Remote file path
            payload: Bytes to send, already in wire form
            binary: TYPE I when True, TYPE A otherwise
        """
        require_path(path)
        command = f"STOR {path}"

        with self._session() as control:
            data = self._open_data_channel(control, binary)
            self._start_transfer(control, command)

            self._bytes_transferred = data.write_all(payload)

            self._finish_transfer(control, command)

        logger.debug(f"Uploaded {len(payload)} bytes to {path}")

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        """
        List a directory with LIST.

        Args:
            path: Remote directory path; empty lists the login directory

        Returns:
            Entries in server order (empty if the listing is empty)
        """
        if path:
            require_path(path)
            command = f"LIST {path}"
        else:
            command = "LIST"

        with self._session() as control:
            data = self._open_data_channel(control, binary=False)
            self._start_transfer(control, command)

            raw = data.read_bounded(self._settings.max_transfer_size)
            self._bytes_transferred = len(raw)

            self._finish_transfer(control, command)

        return parse_listing(raw.decode(self._settings.text_encoding, errors="replace"))

    def make_directory(self, path: str) -> TransferStatus:
        """
        Create a directory unless something already occupies the path.

        SIZE answering 213 means a file is there (CONFLICT). Otherwise CWD
        answering 250 means the directory exists: CDUP is sent without
        waiting for its reply and ALREADY_EXISTS is returned. Otherwise MKD
        must answer 257.

        Args:
            path: Remote directory path; one leading "/" is stripped

        Returns:
            CREATED, ALREADY_EXISTS or CONFLICT
        """
        if path.startswith("/"):
            path = path[1:]
        require_path(path)

        with self._session() as control:
            # SIZE is only answered in binary mode by some servers
            control.select_mode(binary=True)
            self._advance(ExecutorState.MODE_SET)

            control.send_command(f"SIZE {path}")
            if control.read_reply().code == FILE_STATUS:
                logger.debug(f"'{path}' is a file")
                return TransferStatus.CONFLICT

            control.send_command(f"CWD {path}")
            if control.read_reply().code == ACTION_OK:
                control.send_command("CDUP")
                logger.debug(f"'{path}' is already a directory")
                return TransferStatus.ALREADY_EXISTS

            command = f"MKD {path}"
            control.send_command(command)
            reply = control.read_reply()
            if reply.code != PATH_CREATED:
                raise UnexpectedReplyError(command, (PATH_CREATED,), reply)

        return TransferStatus.CREATED


class FtpBackend(RemoteBackend):
    """RemoteBackend driving the hand-rolled FTP engine."""

    def _run(self, operation: str, *args):
        executor = TransferExecutor(self._target, self._settings)
        try:
            return getattr(executor, operation)(*args)
        finally:
            self._bytes_transferred = executor.bytes_transferred

    def download(self, path: str, binary: bool = True) -> bytes:
        return self._run("download", path, binary)

    def upload(self, path: str, data: bytes, binary: bool = True) -> None:
        self._run("upload", path, data, binary)

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        return self._run("list_directory", path)

    def make_directory(self, path: str) -> TransferStatus:
        return self._run("make_directory", path)
