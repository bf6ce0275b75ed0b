"""Secure credential storage for the FTP space calculator.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) so FTP passwords are never written to settings.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger("ftpspace.credentials")


class CredentialManager:
    """Secure credential storage using system keyring."""

    SERVICE_NAME = "ftpspace"

    def _make_key(self, host: str, port: int, username: str) -> str:
        """
        Create a unique key for the credential.

        Args:
            host: FTP host
            port: FTP port
            username: FTP username

        Returns:
            Unique key string
        """
        return f"{username}@{host}:{port}"

    def save_password(self, host: str, port: int, username: str, password: str) -> bool:
        """
        Save FTP password securely.

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(host, port, username), password)
            return True
        except KeyringError as e:
            logger.warning(f"Could not store password for {username}@{host}: {e}")
            return False

    def get_password(self, host: str, port: int, username: str) -> Optional[str]:
        """
        Retrieve saved password.

        Returns:
            Password string or None if not found
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(host, port, username))
        except KeyringError as e:
            logger.debug(f"Keyring lookup failed: {e}")
            return None

    def delete_password(self, host: str, port: int, username: str) -> bool:
        """
        Remove saved password.

        Returns:
            True if deleted, False if missing or the keyring refused
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(host, port, username))
            return True
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            logger.warning(f"Could not delete password for {username}@{host}: {e}")
            return False

