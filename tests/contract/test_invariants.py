"""Contract tests for lookup and caching invariants.

These tests pin the externally visible behaviour:
- longest-prefix match and overwrite semantics of the block tree
- strict separation of address families
- reverse query name encoding
- cache backfill without repeated queries
- quiet mode never raising
"""

import io
import ipaddress

import pytest

from dnsbl_resolver.config import Config
from dnsbl_resolver.models.block_tree import BlockTree
from dnsbl_resolver.models.classification import NOT_LISTED_MARKER, Classification
from dnsbl_resolver.services.resolver import DnsblResolver
from dnsbl_resolver.utils.ip_utils import build_dnsbl_query


ZONE = "zen.spamhaus.org"


@pytest.mark.parametrize(
    "address,short,long",
    [
        ("203.0.113.77", ("203.0.0.0", 8), ("203.0.113.64", 26)),
        ("2001:db8:1:2::7", ("2001:db8::", 32), ("2001:db8:1:2::", 64)),
    ],
)
def test_longest_prefix_wins(address, short, long):
    """Verify the more specific of two containing prefixes is returned."""
    for order in ((short, long), (long, short)):
        tree = BlockTree()
        for network, prefix_length in order:
            tree.insert(network, prefix_length, f"/{prefix_length}")

        assert tree.lookup(address) == f"/{long[1]}"


def test_reinsert_keeps_only_latest_identifier():
    """Verify overwrite semantics for identical prefixes."""
    tree = BlockTree()
    tree.insert("198.51.100.0", 24, "FIRST")
    tree.insert("198.51.100.0", 24, "SECOND")

    assert tree.lookup("198.51.100.1") == "SECOND"
    assert len(tree) == 1


def test_ipv4_index_never_matches_ipv6():
    """Verify an IPv4-only index yields no match for any IPv6 address."""
    tree = BlockTree()
    tree.insert("0.0.0.0", 0, "EVERYTHING")
    tree.insert("1.2.3.4", 32, "HOST")

    for address in ("::", "::1.2.3.4", "::ffff:1.2.3.4", "2001:db8::1"):
        assert tree.lookup(address) is None


def test_reverse_name_encoding():
    """Verify reverse query names for both families."""
    assert build_dnsbl_query("1.2.3.4", ZONE) == f"4.3.2.1.{ZONE}"
    assert build_dnsbl_query(ipaddress.IPv6Address(0), ZONE) == (
        ".".join(["0"] * 32) + f".{ZONE}"
    )


def test_accumulated_codes():
    """Verify {2} then {4} is a listing and no answers is not listed."""
    listed = Classification.from_answers(["127.0.0.2", "127.0.0.4"])
    empty = Classification.from_answers([])

    assert listed.is_listed() is True
    assert listed.to_identifier() != NOT_LISTED_MARKER
    assert empty.is_listed() is False
    assert empty.to_identifier() == NOT_LISTED_MARKER


def test_cached_result_needs_no_query(make_transport):
    """Verify a second lookup is served from cache with zero transport calls."""
    transport = make_transport({(f"2.0.0.127.{ZONE}", "A"): ["127.0.0.4"]})
    resolver = DnsblResolver(transport=transport)

    first = resolver.is_blocked("127.0.0.2")
    calls = list(transport.calls)
    second = resolver.is_blocked("127.0.0.2")

    assert first == "XBL"
    assert second == first
    assert transport.calls == calls


def test_quiet_mode_never_raises(failing_transport):
    """Verify quiet mode turns transport failures into empty results."""
    resolver = DnsblResolver(Config(quiet_mode=True), transport=failing_transport)

    resolver.initialize()
    assert resolver.nameservers == []
    assert resolver.is_blocked("192.0.2.1") is None
    assert resolver.is_blocked("2001:db8::1") is None


def test_sample_feed_inserts_two_entries(fake_transport):
    """Verify comment and blank lines are skipped during ingestion."""
    resolver = DnsblResolver(transport=fake_transport)

    inserted = resolver.add_stream(
        io.BytesIO(b"1.2.3.0/24 ; TESTLIST\n; comment\n\n5.6.7.8/32 ; HOST")
    )

    assert inserted == 2
    assert len(resolver.tree) == 2
    assert resolver.is_blocked("1.2.3.200") == "TESTLIST"
    assert resolver.is_blocked("5.6.7.8") == "HOST"
