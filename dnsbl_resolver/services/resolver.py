"""DNSBL resolver facade.

Combines the block tree (static feed entries plus cached live results),
nameserver discovery and the query engine behind a single ``is_blocked``
decision.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Dict, Iterable

from dnsbl_resolver.config import Config
from dnsbl_resolver.models.block_tree import BlockTree
from dnsbl_resolver.models.classification import NOT_LISTED_MARKER
from dnsbl_resolver.models.nameserver_set import NameserverSet
from dnsbl_resolver.services import feed_ingestor
from dnsbl_resolver.services.logger import log_lookup
from dnsbl_resolver.services.nameserver_discovery import discover_nameservers
from dnsbl_resolver.services.query_engine import QueryEngine
from dnsbl_resolver.services.transport import DnsTransport
from dnsbl_resolver.utils.ip_utils import parse_address


logger = logging.getLogger(__name__)

DEFAULT_IDENTIFIER = "BLOCKED"


class ResolverState(Enum):
    """Lifecycle of the resolver's nameserver discovery."""

    UNINITIALIZED = "UNINITIALIZED"  # Discovery never ran
    NAMESERVERS_READY = "NAMESERVERS_READY"  # Discovery found nameservers
    OPERATIONAL = "OPERATIONAL"  # At least one live query answered
    DEGRADED = "DEGRADED"  # Discovery failed or found nothing; cache only


class DnsblResolver:
    """Answers whether an address is listed on the configured DNSBL.

    Lookups consult the block tree first. On a miss the zone's authoritative
    nameservers are discovered (once, shared by concurrent callers), the
    DNSBL is queried and the outcome is written back to the tree.

    Example:
        >>> resolver = DnsblResolver(Config(quiet_mode=True))
        >>> resolver.add_network("192.0.2.0", 24, "SBL1")
        >>> resolver.is_blocked("192.0.2.55")
        'SBL1'
    """

    def __init__(
        self,
        config: Config | None = None,
        transport=None,
        tree: BlockTree | None = None,
    ):
        self.config = config or Config()
        self.transport = transport or DnsTransport()
        self.tree = tree if tree is not None else BlockTree()
        self.engine = QueryEngine(
            self.transport,
            self.config.dnsbl_zone,
            legacy_code_format=self.config.legacy_code_format,
        )

        self.state = ResolverState.UNINITIALIZED
        self._nameservers = NameserverSet()
        self._discovery_lock = threading.Lock()
        self._discovery_generation = 0

    @property
    def use_ipv6(self) -> bool:
        return self.config.use_ipv6

    @property
    def use_cache(self) -> bool:
        return self.config.use_cache

    @property
    def quiet_mode(self) -> bool:
        return self.config.quiet_mode

    @property
    def nameservers(self) -> list[str]:
        """DNSBL nameserver addresses used for live queries."""
        return self._nameservers.select(self.use_ipv6)

    def _timeout(self, timeout: float | None) -> float:
        return self.config.dns_timeout if timeout is None else timeout

    def _suppress(self, action: str, error: Exception) -> None:
        """Re-raise error unless quiet mode is enabled."""
        if not self.quiet_mode:
            raise error
        logger.warning(f"{action} failed (quiet mode): {type(error).__name__}: {error}")

    # Nameserver discovery

    def initialize(self, timeout: float | None = None) -> None:
        """Discover the DNSBL zone's nameservers.

        Raises:
            TransportError: If discovery fails and quiet mode is off.
        """
        with self._discovery_lock:
            self._discover(self._timeout(timeout))

    def _discover(self, timeout: float) -> None:
        try:
            nameservers = discover_nameservers(
                self.transport,
                self.config.bootstrap_nameservers(),
                self.config.dnsbl_zone,
                timeout,
            )
        except Exception as e:
            self._nameservers = NameserverSet()
            self.state = ResolverState.DEGRADED
            self._suppress("Nameserver discovery", e)
            return
        finally:
            self._discovery_generation += 1

        self._nameservers = nameservers
        if nameservers.is_empty(self.use_ipv6):
            self.state = ResolverState.DEGRADED
        else:
            self.state = ResolverState.NAMESERVERS_READY

    def _ensure_nameservers(self, timeout: float) -> None:
        """Run discovery if no nameservers are known.

        Callers that were waiting on an in-flight discovery reuse its outcome.
        """
        if self.nameservers:
            return
        generation = self._discovery_generation
        with self._discovery_lock:
            if self.nameservers or self._discovery_generation != generation:
                return
            self._discover(timeout)

    # Static entries

    def add_network(self, network, prefix_length: int, identifier: str | None = None) -> None:
        """Add a network to the block tree."""
        self.tree.insert(network, prefix_length, identifier or DEFAULT_IDENTIFIER)

    def add_address(self, address, identifier: str | None = None) -> None:
        """Add a single host to the block tree."""
        self.tree.insert_address(address, identifier or DEFAULT_IDENTIFIER)

    def add_stream(self, stream: Iterable) -> int:
        """Ingest feed lines from a text or binary stream.

        Returns:
            int: Number of entries inserted (0 if suppressed in quiet mode).
        """
        try:
            return feed_ingestor.ingest_lines(stream, self.tree)
        except Exception as e:
            self._suppress("Feed ingestion", e)
            return 0

    def add_file(self, path: str) -> int:
        """Ingest a feed file."""
        try:
            return feed_ingestor.ingest_file(path, self.tree)
        except Exception as e:
            self._suppress(f"Feed ingestion from {path}", e)
            return 0

    def add_url(self, url: str) -> int:
        """Ingest a feed over HTTP(S)."""
        try:
            return feed_ingestor.ingest_url(url, self.tree, self.config.http_timeout)
        except Exception as e:
            self._suppress(f"Feed ingestion from {url}", e)
            return 0

    # Lookups

    def is_blocked(self, address, timeout: float | None = None) -> str | None:
        """Return the block identifier for address, or None if not listed.

        Runs nameserver discovery first if it has not happened yet.

        Args:
            address: IPv4 or IPv6 address (string or address object).
            timeout: DNS timeout in seconds, defaults to the configured one.
                It applies to each query separately. A lookup that also runs
                discovery sends up to four sequential queries (NS, A, AAAA
                and the DNSBL A query), so it may take up to four times this.

        Returns:
            str | None: Identifier of the matching entry or DNSBL classification.

        Raises:
            TransportError: On DNS failure when quiet mode is off.
            UnsupportedFamilyError: If address is not IPv4 or IPv6.
        """
        start = time.time()
        timeout = self._timeout(timeout)
        try:
            client = parse_address(address)

            if self.use_cache:
                identifier = self.tree.lookup(client)
                if identifier is not None:
                    result = None if identifier == NOT_LISTED_MARKER else identifier
                    log_lookup(str(client), result, "cache", _elapsed_ms(start))
                    return result

            self._ensure_nameservers(timeout)
            if not self.nameservers:
                log_lookup(str(client), None, "unavailable", _elapsed_ms(start))
                return None

            classification = self.engine.query_classification(
                client,
                self._nameservers,
                timeout,
                prefer_ipv6=self.use_ipv6,
                cache=self.tree if self.use_cache else None,
            )
            self.state = ResolverState.OPERATIONAL

            result = self.engine.identifier_for(classification)
            log_lookup(str(client), result, "dnsbl", _elapsed_ms(start))
            return result

        except Exception as e:
            self._suppress(f"Lookup of {address}", e)
            return None

    def check_many(
        self,
        addresses: Iterable,
        concurrency: int | None = None,
        timeout: float | None = None,
    ) -> Dict[str, str | None]:
        """Check several addresses concurrently.

        Args:
            addresses: Addresses to check.
            concurrency: Max concurrent lookups, defaults to the configured one.
            timeout: Per-query timeout in seconds.

        Returns:
            Dict[str, str | None]: Identifier (or None) keyed by address string.
        """
        addresses = [str(address) for address in addresses]
        workers = concurrency or self.config.dns_concurrency

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                address: executor.submit(self.is_blocked, address, timeout)
                for address in addresses
            }
            return {address: future.result() for address, future in futures.items()}


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)
