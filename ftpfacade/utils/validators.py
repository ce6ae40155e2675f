"""Input validators for ftpfacade.

Provides validation functions for connection settings: server
addresses, ports, timeouts and session time-to-live.
"""

import ipaddress
import re
from typing import Optional, Tuple


DEFAULT_FTP_PORT = 21

# DNS name, labels of up to 63 characters
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*$'
)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host: an IPv4 or IPv6 literal, or a DNS name.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    host = host.strip()
    if _is_ip_literal(host) or HOSTNAME_PATTERN.match(host):
        return True, None

    return False, f"Invalid host: {host}"


def validate_port(port: int) -> Tuple[bool, Optional[str]]:
    """Check port is a number in 1-65535."""
    try:
        port = int(port)
    except (ValueError, TypeError):
        return False, "Port must be a number"

    if not 1 <= port <= 65535:
        return False, f"Port must be between 1 and 65535, got {port}"

    return True, None


def split_address(address: str) -> Tuple[str, int]:
    """
    Split a server address into host and port.

    Accepted forms are "host", "host:port", "[ipv6]", "[ipv6]:port" and a
    bare IPv6 literal such as "::1". The port defaults to 21.

    Raises:
        ValueError: If the brackets or the port part are malformed
    """
    address = address.strip()

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep:
            raise ValueError(f"Missing ']' in address '{address}'")
        if not rest:
            return host, DEFAULT_FTP_PORT
        if not rest.startswith(":"):
            raise ValueError(f"Unexpected text after ']' in address '{address}'")
        port = rest[1:]
    elif address.count(":") > 1:
        # Unbracketed IPv6 literals cannot carry a port
        return address, DEFAULT_FTP_PORT
    elif ":" in address:
        host, _, port = address.partition(":")
    else:
        return address, DEFAULT_FTP_PORT

    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"Port must be a number, got '{port}'")


def validate_address(address: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a server address in any form split_address accepts.

    Args:
        address: Address string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not address or not address.strip():
        return False, "Address is required"

    try:
        host, port = split_address(address)
    except ValueError as e:
        return False, str(e)

    is_valid, error = validate_host(host)
    if not is_valid:
        return False, error

    return validate_port(port)


def validate_timeout(timeout: float) -> Tuple[bool, Optional[str]]:
    """
    Validate a dial timeout in seconds. Zero disables the timeout.

    Args:
        timeout: Timeout in seconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(timeout, (int, float)):
        return False, "Timeout must be a number"

    if timeout < 0:
        return False, f"Timeout must not be negative, got {timeout}"

    return True, None


def validate_ttl(ttl: float) -> Tuple[bool, Optional[str]]:
    """
    Validate a session time-to-live in seconds.

    Args:
        ttl: Time-to-live in seconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(ttl, (int, float)):
        return False, "TTL must be a number"

    if ttl <= 0:
        return False, f"TTL must be positive, got {ttl}"

    return True, None


def validate_remote_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a remote FTP path format.

    Args:
        path: FTP path to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path or not path.strip():
        return False, "FTP path is required"

    if "\r" in path or "\n" in path:
        return False, "FTP path cannot contain line breaks"

    return True, None
