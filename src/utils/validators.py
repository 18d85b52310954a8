"""Input validators for Remote Transfer.

Each validator returns (is_valid, error_message) so callers decide which
exception to raise. Used for URI components, settings values and remote
paths before they reach a command line.
"""

import ipaddress
import re
from typing import Optional, Tuple


Validation = Tuple[bool, Optional[str]]

# RFC 1123 host name: dot-separated labels of letters, digits and inner hyphens
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*$'
)

# A CR, LF or NUL in a path or credential would end the command early and start another one
COMMAND_BREAKING_CHARS = ("\r", "\n", "\x00")

MAX_TIMEOUT_SECONDS = 300


def validate_ip_address(ip: str) -> Validation:
    """Validate an IPv4 or IPv6 address literal."""
    if not ip or not ip.strip():
        return False, "IP address is required"

    try:
        ipaddress.ip_address(ip.strip())
    except ValueError:
        return False, f"Invalid IP address format: {ip}"
    return True, None


def validate_hostname(hostname: str) -> Validation:
    """Validate a DNS host name."""
    if not hostname or not hostname.strip():
        return False, "Hostname is required"

    if HOSTNAME_PATTERN.match(hostname.strip()):
        return True, None
    return False, f"Invalid hostname format: {hostname}"


def validate_host(host: str) -> Validation:
    """
    Validate the host part of a transfer URI.

    Args:
        host: IP address (IPv6 without brackets) or host name

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    if validate_ip_address(host)[0] or validate_hostname(host)[0]:
        return True, None

    return False, f"Invalid host: {host.strip()}. Must be a valid IP address or hostname."


def validate_port(port: int) -> Validation:
    """
    Validate a TCP port number.

    Args:
        port: Port number (strings of digits are accepted)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(port, int):
        try:
            port = int(port)
        except (ValueError, TypeError):
            return False, "Port must be a number"

    if not 1 <= port <= 65535:
        return False, f"Port must be between 1 and 65535, got {port}"
    return True, None


def validate_timeout(timeout: float) -> Validation:
    """Validate a per-call deadline in seconds (0 < timeout <= 300)."""
    if isinstance(timeout, bool):
        return False, "Timeout must be a number"
    try:
        timeout = float(timeout)
    except (ValueError, TypeError):
        return False, "Timeout must be a number"

    if not 0 < timeout <= MAX_TIMEOUT_SECONDS:
        return False, f"Timeout must be between 0 and {MAX_TIMEOUT_SECONDS} seconds, got {timeout:g}"
    return True, None


def validate_size_limit(limit: int) -> Validation:
    """Validate a maximum transfer size in bytes."""
    if not isinstance(limit, int) or isinstance(limit, bool):
        return False, "Size limit must be an integer"

    if limit < 1:
        return False, f"Size limit must be positive, got {limit}"
    return True, None


def validate_remote_path(path: str) -> Validation:
    """
    Validate a remote path before it is placed on a command line.

    Args:
        path: Remote path as decoded from the URI

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path or not path.strip():
        return False, "Remote path is required"

    if any(char in path for char in COMMAND_BREAKING_CHARS):
        return False, "Remote path cannot contain line breaks or NUL"
    return True, None


def validate_credential(value: str, field: str = "Credential") -> Validation:
    """Reject a user name or password that would break the USER/PASS line."""
    if any(char in value for char in COMMAND_BREAKING_CHARS):
        return False, f"{field} cannot contain line breaks or NUL"
    return True, None
