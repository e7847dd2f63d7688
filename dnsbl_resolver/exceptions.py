"""Exception hierarchy for the DNSBL resolver."""


class ResolverError(Exception):
    """Base class for resolver errors."""


class TransportError(ResolverError):
    """Network failure or timeout while talking to a nameserver."""


class UnsupportedFamilyError(ResolverError, ValueError):
    """Address is neither IPv4 nor IPv6."""


class ParseError(ResolverError, ValueError):
    """Malformed configured address (e.g. a bootstrap nameserver)."""
