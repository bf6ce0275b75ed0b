"""Application settings management for the FTP space calculator.

Provides CalculatorSettings dataclass and SettingsManager, which reads
the defaults for a run and records the connection of the last
successful one.
"""

import json
import logging
from dataclasses import dataclass, asdict, replace
from pathlib import Path
from typing import Optional

from ftpspace.config.paths import get_settings_path
from ftpspace.ftp.traversal import DEFAULT_MAX_DEPTH

logger = logging.getLogger("ftpspace.settings")


@dataclass
class CalculatorSettings:
    """Settings that persist between runs."""

    # Last successful connection
    last_host: str = ""
    last_port: int = 21
    last_username: str = "anonymous"
    last_path: str = "/"

    # Timeouts in seconds
    timeout: int = 30
    connect_timeout: int = 15
    trust_pasv_address: bool = True

    # Traversal
    max_depth: int = DEFAULT_MAX_DEPTH

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CalculatorSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


class SettingsManager:
    """
    Reads run defaults and remembers the last good connection.

    The file is only written after a calculation succeeds, so a typo in
    a host name never replaces a working one.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[CalculatorSettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> CalculatorSettings:
        """
        Load settings from disk.

        Returns:
            CalculatorSettings instance (defaults if the file is missing
            or unreadable)
        """
        self._settings = CalculatorSettings()
        if not self._config_path.exists():
            return self._settings

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._settings = CalculatorSettings.from_dict(json.load(f))
        except (json.JSONDecodeError, IOError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self._config_path}: {e}")

        return self._settings

    def remember_connection(
        self,
        host: str,
        port: int,
        username: str,
        path: str
    ) -> CalculatorSettings:
        """
        Record a connection that completed a calculation.

        Other settings in the file are kept as loaded.

        Returns:
            Updated CalculatorSettings instance
        """
        current = self._settings if self._settings is not None else self.load()
        self._settings = replace(
            current,
            last_host=host,
            last_port=port,
            last_username=username,
            last_path=path,
        )

        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(self._settings.to_dict(), f, indent=2)

        logger.debug(f"Remembered connection {username}@{host}:{port}{path}")
        return self._settings
