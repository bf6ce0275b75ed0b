"""Pytest configuration and shared fixtures for FTP space calculator tests."""

import pytest
from pathlib import Path
from typing import Generator


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary settings file path for testing."""
    settings_file = tmp_path / "settings.json"
    yield settings_file
    # Cleanup handled by tmp_path fixture


@pytest.fixture
def sample_listing() -> str:
    """A UNIX listing with a summary line, ./.. and mixed entries."""
    return (
        "total 12\r\n"
        "drwxr-xr-x  4 user group 4096 Jan  1 00:00 .\r\n"
        "drwxr-xr-x 10 user group 4096 Jan  1 00:00 ..\r\n"
        "-rw-r--r--  1 user group  100 Jan  1 00:00 a.bin\r\n"
        "-rw-r--r--  1 user group  200 Jan  1 00:00 b.bin\r\n"
        "drwxr-xr-x  2 user group 4096 Jan  1 00:00 sub\r\n"
    )
