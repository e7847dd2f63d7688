"""pytest fixtures for testing."""

import pytest

from dnsbl_resolver.exceptions import TransportError


class FakeTransport:
    """In-memory DNS transport that records every call.

    Attributes:
        records: Maps (name, record_type) to a list of answer texts.
        fail: When True every call raises TransportError.
        calls: List of (method, name, record_type, nameservers) tuples.
    """

    def __init__(self, records=None, fail=False):
        self.records = dict(records or {})
        self.fail = fail
        self.calls = []

    def query(self, name, record_type, nameservers, timeout=3):
        self.calls.append(("query", name, record_type, list(nameservers)))
        if self.fail:
            raise TransportError(f"{record_type} query for {name} failed: Timeout")
        return list(self.records.get((name, record_type), []))

    def resolve_addresses(self, hostname, nameservers, timeout=3):
        self.calls.append(("resolve_addresses", hostname, None, list(nameservers)))
        if self.fail:
            raise TransportError(f"Address lookup for {hostname} failed: Timeout")
        return list(self.records.get((hostname, "A"), [])) + list(
            self.records.get((hostname, "AAAA"), [])
        )

    def dnsbl_queries(self):
        return [call for call in self.calls if call[0] == "query" and call[2] == "A"]


ZONE = "zen.spamhaus.org"


@pytest.fixture
def zone_records():
    """NS and address records for a working zen.spamhaus.org."""
    return {
        (ZONE, "NS"): ["a.gns.spamhaus.org"],
        ("a.gns.spamhaus.org", "A"): ["192.0.2.53"],
        ("a.gns.spamhaus.org", "AAAA"): ["2001:db8::53"],
    }


@pytest.fixture
def fake_transport(zone_records):
    """Fake transport serving a discoverable zone with no listings."""
    return FakeTransport(zone_records)


@pytest.fixture
def failing_transport():
    """Fake transport whose every call times out."""
    return FakeTransport(fail=True)


@pytest.fixture
def make_transport(zone_records):
    """Factory for fake transports serving the zone plus extra records."""

    def factory(extra=None, fail=False):
        records = dict(zone_records)
        records.update(extra or {})
        return FakeTransport(records, fail=fail)

    return factory
