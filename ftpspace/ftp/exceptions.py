"""FTP-specific exceptions for the FTP space calculator.

Custom exception hierarchy separating run-fatal failures (connect,
login) from failures scoped to a single directory listing.
"""


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPConnectionError(FTPError):
    """Failed to establish the control connection."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class FTPConnectionClosedError(FTPError):
    """Server closed the control connection before a reply completed."""

    def __init__(self, partial: str = ""):
        self.partial = partial
        message = "Control connection closed by server"
        if partial:
            message = f"{message} (partial reply: {partial.strip()!r})"
        super().__init__(message)


class FTPAuthenticationError(FTPError):
    """FTP authentication (login) failed."""

    def __init__(self, username: str, reply: str = ""):
        self.username = username
        self.reply = reply
        message = f"Authentication failed for user '{username}'"
        if reply:
            message = f"{message}: {reply.strip()}"
        super().__init__(message)


class FTPNotConnectedError(FTPError):
    """Operation attempted without active FTP connection."""

    def __init__(self, operation: str = "Operation"):
        message = f"{operation} requires an active FTP connection"
        super().__init__(message)


class FTPTimeoutError(FTPError):
    """FTP operation timed out."""

    def __init__(self, operation: str = "Operation", timeout: float = 30):
        self.timeout = timeout
        message = f"{operation} timed out after {timeout:g} seconds"
        super().__init__(message)


class FTPProtocolParseError(FTPError):
    """Server reply did not have the expected shape."""

    def __init__(self, command: str, reply: str):
        self.command = command
        self.reply = reply
        message = f"Failed to parse {command} response: {reply.strip()!r}"
        super().__init__(message)


class FTPDataChannelError(FTPError):
    """Passive data connection could not be opened or was broken."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Data connection to {host}:{port} failed"
        super().__init__(message, original_error)


class FTPPathError(FTPError):
    """Server rejected an operation on a path (list, etc.)."""

    def __init__(self, path: str, operation: str, reply: str = ""):
        self.path = path
        self.operation = operation
        self.reply = reply
        message = f"Failed to {operation} path '{path}'"
        if reply:
            message = f"{message}: {reply.strip()}"
        super().__init__(message)
