"""Configuration module for the FTP space calculator.

This module handles settings and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure credential storage via keyring
- Paths: Application data directories
- CalculatorSettings: Settings dataclass
"""
