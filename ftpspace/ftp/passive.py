"""Passive-mode directory listing for the FTP space calculator.

Negotiates a data connection with PASV on the control channel and reads
one directory listing through it.
"""

import logging
import socket
from typing import List, Tuple

from ftpspace.ftp.connection import ControlChannel, ENCODING
from ftpspace.ftp.exceptions import (
    FTPError,
    FTPDataChannelError,
    FTPPathError,
    FTPProtocolParseError,
    FTPTimeoutError,
)
from ftpspace.ftp.listing import DirectoryEntry, parse_listing
from ftpspace.ftp.replies import (
    is_error,
    is_positive_completion,
    is_positive_preliminary,
    parse_pasv_response,
    parse_reply_code,
)

logger = logging.getLogger("ftpspace.passive")


DATA_BUFFER_SIZE = 65536


class PassiveDirectoryLister:
    """Lists remote directories over passive data connections."""

    def __init__(self, channel: ControlChannel):
        """
        Initialize the lister.

        Args:
            channel: Authenticated control channel, used for PASV and LIST
        """
        self._channel = channel

    def negotiate(self) -> Tuple[str, int]:
        """
        Send PASV and work out where to open the data connection.

        Returns:
            Tuple of (host, port)

        Raises:
            FTPProtocolParseError: If the reply has no address sextuple
        """
        reply = self._channel.send_command("PASV")
        address = parse_pasv_response(reply)
        if parse_reply_code(reply) != 227 or address is None:
            raise FTPProtocolParseError("PASV", reply)

        host, port = address
        if not self._channel.config.trust_pasv_address:
            host = self._channel.peer_host
        return host, port

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        """
        Fetch and parse the listing of one remote directory.

        Args:
            path: Remote directory path

        Returns:
            Parsed entries in server order

        Raises:
            FTPProtocolParseError: If PASV negotiation fails
            FTPDataChannelError: If the data connection fails
            FTPPathError: If the server refuses to list the path
            FTPTimeoutError: If the server stalls
        """
        host, port = self.negotiate()
        timeout = self._channel.config.timeout
        logger.debug(f"Data connection: {host}:{port}")

        try:
            data_sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise FTPDataChannelError(host, port, e)

        code = None
        try:
            reply = self._channel.send_command(f"LIST {path}")
            code = parse_reply_code(reply)
            if is_error(code):
                raise FTPPathError(path, "list", reply)

            raw = self._read_until_eof(data_sock, host, port, timeout)
        except (FTPDataChannelError, FTPTimeoutError):
            data_sock.close()
            if is_positive_preliminary(code):
                self._discard_completion()
            raise
        finally:
            data_sock.close()

        if is_positive_preliminary(code):
            done = self._channel.read_response()
            if not is_positive_completion(parse_reply_code(done)):
                raise FTPDataChannelError(host, port, FTPPathError(path, "list", done))

        text = raw.decode(ENCODING, errors="replace")
        entries = parse_listing(text, path)
        logger.debug(f"Listed {path}: {len(entries)} entries")
        return entries

    def _discard_completion(self) -> None:
        """Consume the 4yz reply that follows an aborted transfer."""
        try:
            reply = self._channel.read_response()
            logger.debug(f"Discarded reply after failed transfer: {reply.strip()}")
        except FTPError as e:
            logger.debug(f"No reply after failed transfer: {e}")

    @staticmethod
    def _read_until_eof(
        data_sock: socket.socket,
        host: str,
        port: int,
        timeout: float
    ) -> bytes:
        """Accumulate the data connection until the server closes it."""
        chunks = []
        try:
            while True:
                chunk = data_sock.recv(DATA_BUFFER_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
        except socket.timeout:
            raise FTPTimeoutError("Reading directory listing", timeout)
        except OSError as e:
            raise FTPDataChannelError(host, port, e)
        return b"".join(chunks)
