"""Utility module for the FTP space calculator.

This module provides cross-cutting utilities:
- Logging: Configured logging with secret redaction
- Validators: Input validation for host, port, depth and paths
- Threading: Background task helper for long traversals
"""
