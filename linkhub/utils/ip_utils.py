"""
IP address utilities.

Resolves the originating address of a link from proxy-forwarded headers and
the transport peer address.

The first entry of X-Forwarded-For is taken as canonical. It is
client-controllable when the service is reachable without a proxy in front;
deployments are expected to sit behind a proxy that overwrites the header.
"""

import ipaddress
from collections.abc import Mapping

FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"


def resolve_client_address(
    headers: Mapping[str, str], peer_address: str | None
) -> str | None:
    """
    Extract the client's originating address.

    Checks, in order, the X-Forwarded-For header, the X-Real-IP header and the
    transport peer address. The first non-empty source wins; if it holds a
    comma-separated chain, only its first element is used.

    Args:
        headers: Request headers. Lookups use lowercase names, which Starlette
            headers match case-insensitively.
        peer_address: Transport-level peer host, if known.

    Returns:
        The address string, or None if no source yields a value.
    """
    raw = (
        headers.get(FORWARDED_FOR_HEADER)
        or headers.get(REAL_IP_HEADER)
        or peer_address
    )
    if not raw:
        return None

    address = raw.split(",")[0].strip()
    return address or None


def is_valid_address(address: str | None) -> bool:
    """
    Check whether a value is a syntactically valid IPv4 or IPv6 address.

    Args:
        address: Address string to check.

    Returns:
        True if the address parses, False otherwise (including None).
    """
    if not address:
        return False

    try:
        ipaddress.ip_address(address)
    except ValueError:
        return False

    return True
