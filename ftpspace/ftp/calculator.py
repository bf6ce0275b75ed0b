"""Space calculation entry points for the FTP space calculator.

Wires the control channel, passive lister and traversal together and
exposes the request/response contract used by callers.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ftpspace.ftp.connection import ControlChannel, FTPConnectionConfig
from ftpspace.ftp.exceptions import FTPError
from ftpspace.ftp.passive import PassiveDirectoryLister
from ftpspace.ftp.traversal import DEFAULT_MAX_DEPTH, SpaceTraversal, TraversalResult
from ftpspace.utils.threading import TaskResult, ThreadedTask
from ftpspace.utils.validators import (
    validate_ftp_path,
    validate_host,
    validate_max_depth,
    validate_port,
)

logger = logging.getLogger("ftpspace.calculator")


@dataclass
class SpaceCalculationRequest:
    """Parameters of one space calculation."""
    host: str
    port: int = 21
    username: str = "anonymous"
    password: str = ""
    path: str = "/"

    def __repr__(self) -> str:
        return (
            f"SpaceCalculationRequest(host={self.host!r}, port={self.port!r}, "
            f"username={self.username!r}, path={self.path!r})"
        )

    @classmethod
    def from_dict(cls, data: dict) -> "SpaceCalculationRequest":
        """Create a request from a dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields and v is not None}
        if not filtered.get("host"):
            raise ValueError("Host is required")
        return cls(**filtered)

    def validate(self) -> None:
        """
        Check the request before any network I/O.

        Raises:
            ValueError: If host, port or path is invalid
        """
        for is_valid, error in (
            validate_host(self.host),
            validate_port(self.port),
            validate_ftp_path(self.path),
        ):
            if not is_valid:
                raise ValueError(error)


class SpaceCalculator:
    """Runs one traversal over a dedicated control connection."""

    def __init__(self, config: FTPConnectionConfig, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the calculator.

        Args:
            config: Connection configuration
            max_depth: Depth bound for the traversal
        """
        self._config = config
        self._max_depth = max_depth

    @property
    def config(self) -> FTPConnectionConfig:
        """Connection configuration."""
        return self._config

    def calculate(
        self,
        password: str,
        path: str = "/",
        on_directory: Optional[Callable[[str], None]] = None
    ) -> TraversalResult:
        """
        Connect, log in and total the tree under path.

        Args:
            password: FTP password
            path: Remote directory to start from
            on_directory: Progress callback, called per listed directory

        Returns:
            TraversalResult, possibly with per-directory errors

        Raises:
            FTPConnectionError: If the server cannot be reached
            FTPAuthenticationError: If login is rejected
            FTPTimeoutError: If connect or login times out
        """
        with ControlChannel(self._config) as channel:
            channel.connect()
            channel.authenticate(self._config.username, password)

            traversal = SpaceTraversal(
                PassiveDirectoryLister(channel),
                max_depth=self._max_depth,
                on_directory=on_directory,
            )
            return traversal.run(path)


def failure_response(message: str) -> dict:
    """Response for a run in which no traversal could begin."""
    return {
        "success": False,
        "error": message,
        **TraversalResult.empty(errors=(message,)).to_dict(),
    }


def calculate_space(
    request: SpaceCalculationRequest,
    max_depth: int = DEFAULT_MAX_DEPTH,
    timeout: int = 30,
    connect_timeout: int = 15,
    trust_pasv_address: bool = True,
    on_directory: Optional[Callable[[str], None]] = None
) -> dict:
    """
    Run a complete space calculation and build the response.

    Args:
        request: Connection parameters and start path
        max_depth: Depth bound for the traversal
        timeout: Per-command reply window in seconds
        connect_timeout: Connect and greeting window in seconds
        trust_pasv_address: Use the address advertised by PASV
        on_directory: Progress callback, called per listed directory

    Returns:
        Success or failure response dictionary
    """
    logger.info(f"Space calculation requested: {request!r}")

    try:
        request.validate()
        is_valid, error = validate_max_depth(max_depth)
        if not is_valid:
            raise ValueError(error)
        config = FTPConnectionConfig(
            host=request.host.strip(),
            port=int(request.port),
            username=request.username,
            timeout=timeout,
            connect_timeout=connect_timeout,
            trust_pasv_address=trust_pasv_address,
        )
    except ValueError as e:
        logger.error(f"Invalid request: {e}")
        return failure_response(str(e))

    try:
        result = SpaceCalculator(config, max_depth=max_depth).calculate(
            request.password,
            request.path.strip(),
            on_directory=on_directory,
        )
    except FTPError as e:
        logger.error(f"Space calculation failed: {e}")
        return failure_response(str(e))

    logger.info(
        f"Space calculation completed: {result.total_size} bytes in "
        f"{result.total_files} files, {len(result.errors)} errors"
    )
    return {"success": True, **result.to_dict()}


def start_space_calculation(
    request: SpaceCalculationRequest,
    on_complete: Optional[Callable[[TaskResult[dict]], None]] = None,
    **kwargs
) -> ThreadedTask[dict]:
    """
    Run calculate_space in a background thread.

    Args:
        request: Connection parameters and start path
        on_complete: Called from the worker thread when the run ends
        **kwargs: Passed through to calculate_space

    Returns:
        Started ThreadedTask; listed paths arrive via get_progress()
    """
    task: ThreadedTask[dict] = ThreadedTask(
        calculate_space,
        args=(request,),
        kwargs=kwargs,
        on_complete=on_complete,
        progress_kwarg="on_directory",
    )
    task.start()
    return task
