"""Command-line entry point for the FTP space calculator.

Loads settings and saved credentials, runs a space calculation in the
background while reporting progress, and prints the result.
"""

import json
import logging
import time
from typing import Optional

import click

from .config.credentials import CredentialManager
from .config.paths import get_log_file_path
from .config.settings import SettingsManager
from .ftp.calculator import SpaceCalculationRequest, start_space_calculation
from .utils.logging import setup_logging, get_logger
from .utils.threading import TaskStatus
from .utils.validators import MAX_TRAVERSAL_DEPTH


POLL_INTERVAL = 0.1


def format_bytes(num_bytes: int) -> str:
    """Format a byte count as a human-readable string."""
    if num_bytes < 1024:
        return f"{num_bytes} B"

    size = float(num_bytes)
    for unit in ("KB", "MB", "GB"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f} {unit}"
    return f"{size / 1024:.1f} TB"


def _print_summary(response: dict) -> None:
    """Print a response in human-readable form."""
    if response["success"]:
        click.echo(f"Total size:   {format_bytes(response['totalSize'])} ({response['totalSize']} bytes)")
        click.echo(f"Files:        {response['totalFiles']}")
        click.echo(f"Directories:  {response['totalDirectories']}")
        click.echo(f"Listed paths: {len(response['processedPaths'])}")
    else:
        click.echo(f"Calculation failed: {response['error']}", err=True)

    if response["errors"]:
        click.echo(f"Errors ({len(response['errors'])}):", err=True)
        for error in response["errors"]:
            click.echo(f"  - {error}", err=True)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log progress to stderr')
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Calculate storage used under a directory on an FTP server."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    setup_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        log_file=get_log_file_path(),
        console=verbose,
    )


@cli.command()
@click.argument('host', required=False)
@click.option('--port', '-p', type=click.IntRange(1, 65535), help='FTP port (default 21)')
@click.option('--user', '-u', 'username', help='FTP username')
@click.option('--password', help='FTP password (looked up in the keyring or prompted if omitted)')
@click.option('--path', 'path', help='Remote directory to measure (default /)')
@click.option('--max-depth', type=click.IntRange(1, MAX_TRAVERSAL_DEPTH), help='Maximum recursion depth')
@click.option('--timeout', type=click.IntRange(1, 300), help='Per-command timeout in seconds')
@click.option('--connect-timeout', type=click.IntRange(1, 300), help='Connect timeout in seconds')
@click.option('--json', 'as_json', is_flag=True, help='Print the raw JSON response')
@click.option('--save-password', is_flag=True, help='Store the password in the system keyring')
@click.pass_context
def calc(
    ctx: click.Context,
    host: Optional[str],
    port: Optional[int],
    username: Optional[str],
    password: Optional[str],
    path: Optional[str],
    max_depth: Optional[int],
    timeout: Optional[int],
    connect_timeout: Optional[int],
    as_json: bool,
    save_password: bool
) -> None:
    """Walk the remote tree under --path and total its size."""
    logger = get_logger()
    settings_manager = SettingsManager()
    settings = settings_manager.load()
    credentials = CredentialManager()

    host = host or settings.last_host
    if not host:
        raise click.UsageError("HOST is required (no previous host saved)")
    port = port or settings.last_port
    username = username or settings.last_username
    path = path or settings.last_path

    if password is None:
        password = credentials.get_password(host, port, username)
    if password is None:
        password = click.prompt(f"Password for {username}@{host}", hide_input=True, default="",
                                show_default=False)

    request = SpaceCalculationRequest(
        host=host,
        port=port,
        username=username,
        password=password,
        path=path,
    )

    task = start_space_calculation(
        request,
        max_depth=max_depth or settings.max_depth,
        timeout=timeout or settings.timeout,
        connect_timeout=connect_timeout or settings.connect_timeout,
        trust_pasv_address=settings.trust_pasv_address,
    )

    try:
        while task.is_running:
            for listed in task.get_all_progress():
                logger.debug(f"Listed {listed}")
            time.sleep(POLL_INTERVAL)
    except KeyboardInterrupt:
        # The worker is a daemon thread; it dies with the process
        task.cancel()
        logger.info("Space calculation cancelled by user")
        raise click.Abort()
    for listed in task.get_all_progress():
        logger.debug(f"Listed {listed}")

    result = task.get_result()
    if result.status != TaskStatus.COMPLETED:
        raise click.ClickException(f"Space calculation did not complete: {result.error}")
    response = result.result

    if response["success"]:
        settings_manager.remember_connection(host, port, username, path)
        if save_password and password:
            credentials.save_password(host, port, username, password)

    if as_json:
        click.echo(json.dumps(response, indent=2))
    else:
        _print_summary(response)

    if not response["success"]:
        ctx.exit(1)


@cli.command(name='forget-password')
@click.argument('host')
@click.argument('username')
@click.option('--port', '-p', type=click.IntRange(1, 65535), default=21, show_default=True)
def forget_password(host: str, username: str, port: int) -> None:
    """Remove a stored password from the system keyring."""
    if CredentialManager().delete_password(host, port, username):
        click.echo(f"Removed stored password for {username}@{host}:{port}")
    else:
        click.echo(f"No stored password for {username}@{host}:{port}")


def main() -> None:
    """Entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
