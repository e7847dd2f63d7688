"""DNSBL query engine: one live lookup per address."""

import logging

from dnsbl_resolver.models.block_tree import BlockTree
from dnsbl_resolver.models.classification import Classification
from dnsbl_resolver.models.nameserver_set import NameserverSet
from dnsbl_resolver.utils.ip_utils import build_dnsbl_query, parse_address


logger = logging.getLogger(__name__)


class QueryEngine:
    """Encodes addresses into DNSBL query names and interprets the answers.

    Attributes:
        transport: Object providing query().
        zone: DNSBL zone appended to the reversed address.
        legacy_code_format: Cache the OR-accumulated code name instead of the code set.
    """

    def __init__(
        self,
        transport,
        zone: str,
        legacy_code_format: bool = True,
    ):
        self.transport = transport
        self.zone = zone
        self.legacy_code_format = legacy_code_format

    def query_classification(
        self,
        address,
        nameservers: NameserverSet,
        timeout: float = 3,
        cache: BlockTree | None = None,
        prefer_ipv6: bool = False,
    ) -> Classification:
        """Look address up on the DNSBL and optionally cache the outcome.

        NXDOMAIN yields an empty classification (not listed). Every A answer
        contributes its final octet as a reply code.

        Args:
            address: IPv4 or IPv6 address to check.
            nameservers: Discovered DNSBL nameservers.
            timeout: Query timeout in seconds.
            cache: Block tree to backfill with a host entry, or None.
            prefer_ipv6: Query over the IPv6 nameserver addresses when available.

        Returns:
            Classification: Observed reply codes.

        Raises:
            UnsupportedFamilyError: If address is neither IPv4 nor IPv6.
            TransportError: If the query fails at the transport level.
        """
        client = parse_address(address)
        query_name = build_dnsbl_query(client, self.zone)

        answers = self.transport.query(
            query_name, "A", nameservers.select(prefer_ipv6), timeout
        )
        classification = Classification.from_answers(answers)
        logger.debug(f"{query_name} -> {sorted(classification.codes)}")

        if cache is not None:
            identifier = classification.to_identifier(legacy=self.legacy_code_format)
            try:
                cache.insert_address(client, identifier)
            except Exception as e:
                logger.warning(f"Failed to cache result for {client}: {e}")

        return classification

    def identifier_for(self, classification: Classification) -> str | None:
        """Map a classification to the caller-facing identifier, None if not listed."""
        if not classification.is_listed():
            return None
        return classification.to_identifier(legacy=self.legacy_code_format)
