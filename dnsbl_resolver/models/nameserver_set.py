"""Authoritative nameserver set for the DNSBL zone."""

import ipaddress
from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass
class NameserverSet:
    """Addresses of one authoritative nameserver, split by family.

    Attributes:
        addresses_v4: IPv4 addresses in discovery order.
        addresses_v6: IPv6 addresses in discovery order.
    """

    addresses_v4: List[str] = field(default_factory=list)
    addresses_v6: List[str] = field(default_factory=list)

    @classmethod
    def from_addresses(cls, addresses: Iterable[str]) -> "NameserverSet":
        """Partition a mixed address list by family.

        Raises:
            ValueError: If an entry is not a valid address.
        """
        nameservers = cls()
        for address in addresses:
            parsed = ipaddress.ip_address(address)
            if parsed.version == 4:
                nameservers.addresses_v4.append(str(parsed))
            else:
                nameservers.addresses_v6.append(str(parsed))
        return nameservers

    def select(self, prefer_ipv6: bool = False) -> List[str]:
        """Return the IPv6 list when preferred and available, else the IPv4 list."""
        if prefer_ipv6 and self.addresses_v6:
            return self.addresses_v6
        return self.addresses_v4

    def is_empty(self, prefer_ipv6: bool = False) -> bool:
        return not self.select(prefer_ipv6)
