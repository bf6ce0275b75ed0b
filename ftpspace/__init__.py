"""FTP space calculator.

Walks a remote FTP directory tree over raw sockets and totals its size.
"""

__version__ = "1.0.0"
