"""IP address utilities for DNSBL queries."""

import ipaddress
from typing import Tuple, Union

from dnsbl_resolver.exceptions import UnsupportedFamilyError


IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_address(value) -> IPAddress:
    """Coerce a string or address object into an IPv4/IPv6 address.

    Args:
        value: Address string or ``ipaddress`` address object.

    Returns:
        IPAddress: Parsed address.

    Raises:
        UnsupportedFamilyError: If value is not an IPv4 or IPv6 address type.
        ValueError: If a string is not a valid address.

    Examples:
        >>> parse_address("203.0.113.45")
        IPv4Address('203.0.113.45')
    """
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    if isinstance(value, str):
        return ipaddress.ip_address(value.strip())
    raise UnsupportedFamilyError(f"Unsupported address type: {type(value).__name__}")


def address_bits(address: IPAddress) -> Tuple[int, int]:
    """Return the integer value and bit width of an address.

    Examples:
        >>> address_bits(ipaddress.ip_address("0.0.1.1"))
        (257, 32)
    """
    return int(address), address.max_prefixlen


def reverse_address(address: IPAddress) -> str:
    """Convert an address to reverse DNS label format.

    IPv4 octets are reversed (203.0.113.45 becomes 45.113.0.203). IPv6
    addresses are expanded to 32 hex nibbles which are then reversed and
    joined with dots.

    Args:
        address: IPv4 or IPv6 address.

    Returns:
        str: Reversed address labels, lowercase.

    Raises:
        UnsupportedFamilyError: If address is not IPv4 or IPv6.

    Examples:
        >>> reverse_address(ipaddress.ip_address("203.0.113.45"))
        '45.113.0.203'
        >>> reverse_address(ipaddress.ip_address("2001:db8::1"))[:11]
        '1.0.0.0.0.0'
    """
    if isinstance(address, ipaddress.IPv4Address):
        return ".".join(str(octet) for octet in reversed(address.packed))
    if isinstance(address, ipaddress.IPv6Address):
        nibbles = address.packed.hex()
        return ".".join(reversed(nibbles))
    raise UnsupportedFamilyError(f"Unsupported address type: {type(address).__name__}")


def build_dnsbl_query(address, zone: str) -> str:
    """Build DNSBL query hostname for DNS lookup.

    Args:
        address: IPv4 or IPv6 address (string or address object).
        zone: DNSBL zone domain (e.g., "zen.spamhaus.org").

    Returns:
        str: Lowercase DNSBL query hostname.

    Raises:
        ValueError: If address is invalid or zone is empty.

    Examples:
        >>> build_dnsbl_query("203.0.113.45", "zen.spamhaus.org")
        '45.113.0.203.zen.spamhaus.org'
    """
    if not zone:
        raise ValueError("DNSBL zone cannot be empty")

    reversed_ip = reverse_address(parse_address(address))
    return f"{reversed_ip}.{zone.strip('.')}".lower()


def reply_code(answer) -> int:
    """Extract the DNSBL reply code (final octet) from an answer address.

    Examples:
        >>> reply_code("127.0.0.4")
        4
    """
    return parse_address(answer).packed[-1]
