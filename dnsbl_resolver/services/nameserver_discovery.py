"""Discovery of the DNSBL zone's authoritative nameservers."""

import logging
import random
from typing import List

from dnsbl_resolver.models.nameserver_set import NameserverSet
from dnsbl_resolver.services.logger import log_discovery


logger = logging.getLogger(__name__)


def discover_nameservers(
    transport,
    bootstrap: List[str],
    zone: str,
    timeout: float = 3,
) -> NameserverSet:
    """Find the addresses of one authoritative nameserver for zone.

    Queries zone NS records through the bootstrap resolvers, picks one NS
    target at random and resolves its addresses, again through the bootstrap
    resolvers. Querying the zone's own servers avoids the rate limits DNSBL
    operators apply to public recursive resolvers.

    Args:
        transport: Object providing query() and resolve_addresses().
        bootstrap: Recursive resolver addresses used for discovery.
        zone: DNSBL zone name.
        timeout: Per-query timeout in seconds.

    Returns:
        NameserverSet: Empty if the zone has no NS records.

    Raises:
        TransportError: If a discovery query fails.
    """
    ns_names = transport.query(zone, "NS", bootstrap, timeout)
    if not ns_names:
        logger.warning(f"No NS records found for {zone}")
        return NameserverSet()

    nameserver = random.choice(ns_names)
    addresses = transport.resolve_addresses(nameserver, bootstrap, timeout)
    nameservers = NameserverSet.from_addresses(addresses)

    log_discovery(
        zone=zone,
        nameserver=nameserver,
        v4_count=len(nameservers.addresses_v4),
        v6_count=len(nameservers.addresses_v6),
    )
    return nameservers
