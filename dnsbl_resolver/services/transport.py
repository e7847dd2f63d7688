"""DNS transport built on dnspython.

Sends single queries to an explicit list of nameservers and returns decoded
record texts. No caching: every call goes to the wire.
"""

import logging
from typing import List

import dns.exception
import dns.resolver

from dnsbl_resolver.exceptions import TransportError


logger = logging.getLogger(__name__)


class DnsTransport:
    """Query arbitrary record types against arbitrary nameservers."""

    def _resolver(self, nameservers: List[str], timeout: float) -> dns.resolver.Resolver:
        resolver = dns.resolver.Resolver(configure=False)
        resolver.nameservers = [str(nameserver) for nameserver in nameservers]
        resolver.timeout = timeout
        resolver.lifetime = timeout  # Total timeout for query
        resolver.cache = None
        return resolver

    def query(
        self,
        name: str,
        record_type: str,
        nameservers: List[str],
        timeout: float = 3,
    ) -> List[str]:
        """Query name for record_type against nameservers.

        Args:
            name: Query name.
            record_type: Record type, e.g. "A", "AAAA" or "NS".
            nameservers: Nameserver addresses to ask.
            timeout: Total query timeout in seconds.

        Returns:
            List[str]: Record texts; host names have their trailing dot removed.
            Empty for NXDOMAIN or an empty answer section.

        Raises:
            TransportError: On timeout, unreachable nameservers or other DNS failures.
        """
        if not nameservers:
            raise TransportError(f"No nameservers to query {name} {record_type}")

        resolver = self._resolver(nameservers, timeout)
        try:
            answers = resolver.resolve(name, record_type, search=False)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as e:
            logger.debug(f"{type(e).__name__} for {name} {record_type}")
            return []
        except dns.exception.DNSException as e:
            raise TransportError(
                f"{record_type} query for {name} failed: {type(e).__name__}"
            ) from e

        return [rdata.to_text().rstrip(".") for rdata in answers]

    def resolve_addresses(
        self, hostname: str, nameservers: List[str], timeout: float = 3
    ) -> List[str]:
        """Resolve A and AAAA addresses of hostname.

        Raises:
            TransportError: If either query fails at the transport level.
        """
        addresses = self.query(hostname, "A", nameservers, timeout)
        addresses += self.query(hostname, "AAAA", nameservers, timeout)
        return addresses
