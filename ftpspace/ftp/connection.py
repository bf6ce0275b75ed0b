"""FTP control channel for the FTP space calculator.

Provides ConnectionState enum, FTPConnectionConfig dataclass,
and ControlChannel, which speaks the control connection over a raw socket.
"""

import logging
import socket
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ftpspace.ftp.exceptions import (
    FTPError,
    FTPConnectionError,
    FTPConnectionClosedError,
    FTPAuthenticationError,
    FTPNotConnectedError,
    FTPTimeoutError,
)
from ftpspace.ftp.replies import (
    REPLY_CODE_PATTERN,
    is_positive_preliminary,
    parse_reply_code,
)

logger = logging.getLogger("ftpspace.connection")


CRLF = "\r\n"
ENCODING = "utf-8"
RECV_BUFFER_SIZE = 4096
QUIT_TIMEOUT = 5


class ConnectionState(Enum):
    """Control channel state."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass
class FTPConnectionConfig:
    """FTP connection configuration."""
    host: str
    port: int = 21
    username: str = "anonymous"
    timeout: int = 30
    connect_timeout: int = 15
    trust_pasv_address: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.host:
            raise ValueError("Host is required")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")
        if not 1 <= self.timeout <= 300:
            raise ValueError(f"Timeout must be between 1 and 300, got {self.timeout}")
        if not 1 <= self.connect_timeout <= 300:
            raise ValueError(
                f"Connect timeout must be between 1 and 300, got {self.connect_timeout}"
            )


def _loggable(command: str) -> str:
    """Mask the argument of PASS so it never reaches a log record."""
    if command[:5].upper() == "PASS ":
        return "PASS ****"
    return command


class ControlChannel:
    """
    Owns the control connection to one FTP server.

    Commands are strictly request/response: every send_command() call
    writes one line and reads back one complete reply before returning.

    Usage:
        with ControlChannel(config) as channel:
            channel.connect()
            channel.authenticate("user", "secret")
            reply = channel.send_command("PWD")
    """

    def __init__(self, config: FTPConnectionConfig):
        """
        Initialize the control channel.

        Args:
            config: Connection configuration
        """
        self._config = config
        self._sock: Optional[socket.socket] = None
        self._buffer = b""
        # Replies to timed-out commands that the server may still send
        self._owed_replies = 0
        self._state = ConnectionState.DISCONNECTED
        self._connected_at: Optional[datetime] = None

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True while the socket is open (before or after login)."""
        return self._state in (ConnectionState.CONNECTED, ConnectionState.AUTHENTICATED)

    @property
    def config(self) -> FTPConnectionConfig:
        """Connection configuration."""
        return self._config

    @property
    def connected_at(self) -> Optional[datetime]:
        """Timestamp when the greeting was received."""
        return self._connected_at

    @property
    def peer_host(self) -> str:
        """Address of the server end of the control connection."""
        if self._sock is not None:
            try:
                return self._sock.getpeername()[0]
            except OSError:
                pass
        return self._config.host

    def connect(self, host: Optional[str] = None, port: Optional[int] = None) -> str:
        """
        Open the control connection and consume the server greeting.

        Args:
            host: Server host, defaults to the configured host
            port: Server port, defaults to the configured port

        Returns:
            Greeting reply text

        Raises:
            FTPConnectionError: If the socket cannot be opened or the
                server refuses service
            FTPTimeoutError: If connecting or the greeting times out
        """
        if self.is_connected:
            raise FTPError("Control channel is already connected")

        host = host or self._config.host
        port = port or self._config.port
        timeout = self._config.connect_timeout

        logger.info(f"Connecting to {host}:{port}")
        try:
            self._sock = socket.create_connection((host, port), timeout=timeout)
        except socket.timeout:
            raise FTPTimeoutError("Connection", timeout)
        except OSError as e:
            raise FTPConnectionError(host, port, e)

        self._buffer = b""
        try:
            greeting = self.read_response(timeout=timeout)
            code = parse_reply_code(greeting)
            # 120: service ready in nnn minutes, a 220 follows
            while code == 120:
                greeting = self.read_response(timeout=timeout)
                code = parse_reply_code(greeting)
            if code != 220:
                raise FTPConnectionError(
                    host, port, FTPError(f"Unexpected greeting: {greeting.strip()}")
                )
        except FTPError:
            self._drop_socket()
            raise

        self._state = ConnectionState.CONNECTED
        self._connected_at = datetime.now()
        logger.debug(f"Greeting: {greeting.strip()}")
        return greeting

    def authenticate(self, username: str, password: str) -> None:
        """
        Log in with the USER/PASS command pair.

        Args:
            username: FTP username
            password: FTP password

        Raises:
            FTPNotConnectedError: If connect() has not succeeded
            FTPAuthenticationError: If the server rejects either step
            FTPTimeoutError: If the server does not answer in time
        """
        if self._state != ConnectionState.CONNECTED:
            raise FTPNotConnectedError("Authentication")

        reply = self.send_command(f"USER {username}")
        code = parse_reply_code(reply)

        if code == 331:
            reply = self.send_command(f"PASS {password}")
            code = parse_reply_code(reply)
            if code not in (230, 202):
                raise FTPAuthenticationError(username, reply)
        elif code != 230:
            raise FTPAuthenticationError(username, reply)

        self._state = ConnectionState.AUTHENTICATED
        logger.info(f"Logged in as {username}")

    def send_command(self, command: str) -> str:
        """
        Send one command and wait for its complete reply.

        Args:
            command: Command line without terminator

        Returns:
            Full reply text

        Raises:
            FTPNotConnectedError: If the socket is not open
            FTPTimeoutError: If no complete reply arrives in time
            FTPConnectionError: If the socket fails
        """
        sock = self._require_socket(command.split(" ", 1)[0])

        if self._owed_replies:
            self._discard_owed_replies()

        logger.debug(f"> {_loggable(command)}")
        try:
            sock.settimeout(self._config.timeout)
            sock.sendall((command + CRLF).encode(ENCODING))
        except socket.timeout:
            raise FTPTimeoutError(f"Sending {command.split(' ', 1)[0]}", self._config.timeout)
        except OSError as e:
            raise FTPConnectionError(self._config.host, self._config.port, e)

        return self.read_response()

    def read_response(self, timeout: Optional[float] = None) -> str:
        """
        Read one complete reply, following multi-line continuation.

        Args:
            timeout: Seconds to wait for the whole reply, defaults to
                the configured command timeout

        Returns:
            Reply text, lines joined with newlines

        Raises:
            FTPTimeoutError: If the reply does not complete in time
            FTPConnectionClosedError: If the server hangs up mid-reply
        """
        try:
            return self._read_reply(timeout)
        except FTPTimeoutError:
            # A late reply must not be taken as the answer to the next command
            self._owed_replies += 1
            raise

    def _discard_owed_replies(self) -> None:
        """
        Read and drop late replies to commands that timed out.

        A 1yz reply means a further reply is still owed.

        Raises:
            FTPTimeoutError: If the server stays silent
        """
        while self._owed_replies:
            reply = self._read_reply(None)
            code = parse_reply_code(reply)
            if code is None:
                # Tail of a multi-line reply cut off by the timeout
                continue
            logger.debug(f"Discarded late reply: {reply}")
            if not is_positive_preliminary(code):
                self._owed_replies -= 1

    def _read_reply(self, timeout: Optional[float]) -> str:
        self._require_socket("Read response")
        if timeout is None:
            timeout = self._config.timeout
        deadline = time.monotonic() + timeout

        first = self._read_line(deadline, timeout)
        lines = [first]

        match = REPLY_CODE_PATTERN.match(first)
        if match and first[3:4] == "-":
            terminator = match.group(1) + " "
            while True:
                line = self._read_line(deadline, timeout)
                lines.append(line)
                if line.startswith(terminator) or line == match.group(1):
                    break

        reply = "\n".join(lines)
        logger.debug(f"< {reply}")
        return reply

    def close(self) -> None:
        """Send QUIT if possible and close the socket. Safe to call repeatedly."""
        if self._sock is not None:
            try:
                self._quit()
            except (FTPError, OSError) as e:
                # Server may already have hung up
                logger.debug(f"QUIT failed: {e}")
            finally:
                self._drop_socket()
            logger.info("Control connection closed")

        self._state = ConnectionState.CLOSED

    def _quit(self) -> None:
        """Send QUIT with a short reply window."""
        sock = self._require_socket("QUIT")
        sock.settimeout(QUIT_TIMEOUT)
        sock.sendall(("QUIT" + CRLF).encode(ENCODING))
        self.read_response(timeout=min(self._config.timeout, QUIT_TIMEOUT))

    def _require_socket(self, operation: str) -> socket.socket:
        if self._sock is None:
            raise FTPNotConnectedError(operation)
        return self._sock

    def _read_line(self, deadline: float, timeout: float) -> str:
        """Read up to the next line terminator, keeping any excess buffered."""
        sock = self._require_socket("Read response")

        while b"\n" not in self._buffer:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise FTPTimeoutError("Waiting for server reply", timeout)
            try:
                sock.settimeout(remaining)
                chunk = sock.recv(RECV_BUFFER_SIZE)
            except socket.timeout:
                raise FTPTimeoutError("Waiting for server reply", timeout)
            except OSError as e:
                raise FTPConnectionError(self._config.host, self._config.port, e)

            if not chunk:
                partial = self._buffer.decode(ENCODING, errors="replace")
                self._buffer = b""
                raise FTPConnectionClosedError(partial)
            self._buffer += chunk

        line, _, self._buffer = self._buffer.partition(b"\n")
        return line.rstrip(b"\r").decode(ENCODING, errors="replace")

    def _drop_socket(self) -> None:
        sock, self._sock = self._sock, None
        self._buffer = b""
        self._owed_replies = 0
        if sock is not None:
            try:
                sock.close()
            except OSError:
                pass

    def __enter__(self) -> "ControlChannel":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
