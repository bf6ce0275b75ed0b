"""FTP operations module for the FTP space calculator.

This module handles all FTP-related functionality:
- ControlChannel: Control connection over a raw socket
- PassiveDirectoryLister: PASV data connections and LIST
- parse_listing: UNIX listing parser
- SpaceTraversal: Recursive size totals with per-directory error isolation
- calculate_space: Request/response entry point
- Exceptions: FTP-specific error types
"""
