"""Parsing of FTP control-channel replies.

Pure functions with no I/O. Each returns None instead of raising when the
reply does not have the expected shape, so callers decide which error to
report.
"""

import re
from typing import Optional, Tuple


# "227 Entering Passive Mode (h1,h2,h3,h4,p1,p2)"
PASV_PATTERN = re.compile(r"\((\d+),(\d+),(\d+),(\d+),(\d+),(\d+)\)")

REPLY_CODE_PATTERN = re.compile(r"^(\d{3})(?:[ -]|$)")


def parse_reply_code(reply: str) -> Optional[int]:
    """
    Extract the status code of a reply.

    Multi-line replies carry the code on every line, so the last
    non-empty line decides.

    Args:
        reply: Full reply text as returned by the control channel

    Returns:
        Three-digit reply code or None if the reply has none
    """
    lines = [line for line in reply.splitlines() if line.strip()]
    if not lines:
        return None

    match = REPLY_CODE_PATTERN.match(lines[-1])
    if match is None:
        return None
    return int(match.group(1))


def is_positive_preliminary(code: Optional[int]) -> bool:
    """True for 1yz replies (action started, another reply follows)."""
    return code is not None and 100 <= code < 200


def is_positive_completion(code: Optional[int]) -> bool:
    """True for 2yz replies."""
    return code is not None and 200 <= code < 300


def is_error(code: Optional[int]) -> bool:
    """True for missing codes and 4yz/5yz replies."""
    return code is None or code >= 400


def parse_pasv_response(reply: str) -> Optional[Tuple[str, int]]:
    """
    Parse the address advertised by a PASV reply.

    Args:
        reply: PASV reply text

    Returns:
        Tuple of (ip, port) or None if no valid sextuple is present
    """
    match = PASV_PATTERN.search(reply)
    if match is None:
        return None

    octets = [int(group) for group in match.groups()]
    if any(octet > 255 for octet in octets):
        return None

    ip = ".".join(str(octet) for octet in octets[:4])
    port = octets[4] * 256 + octets[5]
    return ip, port
