"""Unit tests for the BlockTree prefix index."""

import ipaddress
import threading

import pytest

from dnsbl_resolver.models.block_tree import BlockTree


class TestBlockTreeInsert:
    """Test BlockTree.insert() validation and overwrite semantics."""

    def test_insert_and_lookup_host(self):
        """Test exact host entry."""
        tree = BlockTree()
        tree.insert("192.0.2.1", 32, "HOST")

        assert tree.lookup("192.0.2.1") == "HOST"
        assert tree.lookup("192.0.2.2") is None

    def test_insert_overwrites_identical_prefix(self):
        """Test re-inserting the same prefix replaces the identifier."""
        tree = BlockTree()
        tree.insert("192.0.2.0", 24, "OLD")
        tree.insert("192.0.2.0", 24, "NEW")

        assert tree.lookup("192.0.2.200") == "NEW"
        assert len(tree) == 1

    def test_insert_masks_trailing_bits(self):
        """Test host bits beyond the prefix length are ignored."""
        tree = BlockTree()
        tree.insert("10.1.2.3", 8, "TEN")
        tree.insert("10.0.0.0", 8, "TEN-CANONICAL")

        assert tree.lookup("10.200.0.1") == "TEN-CANONICAL"
        assert len(tree) == 1

    @pytest.mark.parametrize(
        "network,prefix_length",
        [("192.0.2.0", 33), ("192.0.2.0", -1), ("2001:db8::", 129)],
    )
    def test_insert_rejects_out_of_range_prefix(self, network, prefix_length):
        """Test prefix lengths outside [0, bitwidth] raise ValueError."""
        tree = BlockTree()
        with pytest.raises(ValueError, match="out of range"):
            tree.insert(network, prefix_length, "X")

    def test_insert_rejects_none_identifier(self):
        """Test a None identifier is refused."""
        with pytest.raises(ValueError, match="identifier"):
            BlockTree().insert("192.0.2.0", 24, None)

    def test_insert_network_object(self):
        """Test inserting an ipaddress network object."""
        tree = BlockTree()
        tree.insert_network(ipaddress.ip_network("2001:db8::/32"), "DOC")

        assert tree.lookup("2001:db8:1234::1") == "DOC"
        assert tree.lookup("2001:db9::1") is None

    def test_insert_address(self):
        """Test single host helper uses the full bit width."""
        tree = BlockTree()
        tree.insert_address("2001:db8::1", "V6HOST")

        assert tree.lookup("2001:db8::1") == "V6HOST"
        assert tree.lookup("2001:db8::2") is None


class TestBlockTreeLookup:
    """Test BlockTree.lookup() longest-prefix matching."""

    def test_longest_prefix_wins(self):
        """Test the most specific prefix is returned regardless of insert order."""
        tree = BlockTree()
        tree.insert("10.1.2.0", 24, "SLASH24")
        tree.insert("10.0.0.0", 8, "SLASH8")
        tree.insert("10.1.0.0", 16, "SLASH16")

        assert tree.lookup("10.1.2.3") == "SLASH24"
        assert tree.lookup("10.1.3.3") == "SLASH16"
        assert tree.lookup("10.2.0.0") == "SLASH8"

    def test_host_entry_inside_network(self):
        """Test a cached host entry shadows its enclosing network."""
        tree = BlockTree()
        tree.insert("192.0.2.0", 24, "NET")
        tree.insert_address("192.0.2.10", "NL")

        assert tree.lookup("192.0.2.10") == "NL"
        assert tree.lookup("192.0.2.11") == "NET"

    def test_default_route(self):
        """Test a /0 entry matches every address of its family only."""
        tree = BlockTree()
        tree.insert("0.0.0.0", 0, "ALL4")

        assert tree.lookup("203.0.113.1") == "ALL4"
        assert tree.lookup("::1") is None

    def test_families_are_separate(self):
        """Test IPv4 entries never match IPv6 addresses and vice versa."""
        tree = BlockTree()
        tree.insert("0.0.0.0", 8, "V4")
        tree.insert("::", 8, "V6")

        assert tree.lookup("0.0.0.1") == "V4"
        assert tree.lookup("::1") == "V6"

    def test_ipv4_only_tree_never_matches_ipv6(self):
        """Test an IPv4-only tree yields no match for IPv6 addresses."""
        tree = BlockTree()
        tree.insert("0.0.0.0", 0, "ALL4")

        assert tree.lookup("::ffff:0.0.0.1") is None
        assert tree.lookup("::") is None

    def test_contains_and_len(self):
        """Test __contains__ and __len__ helpers."""
        tree = BlockTree()
        assert len(tree) == 0
        tree.insert("192.0.2.0", 24, "A")
        tree.insert("2001:db8::", 32, "B")

        assert "192.0.2.9" in tree
        assert "198.51.100.1" not in tree
        assert len(tree) == 2

    def test_many_entries(self):
        """Test a feed-sized tree answers correctly."""
        tree = BlockTree()
        for i in range(20000):
            tree.insert(ipaddress.IPv4Address(i << 8), 24, f"NET{i}")

        assert len(tree) == 20000
        assert tree.lookup(ipaddress.IPv4Address((12345 << 8) + 7)) == "NET12345"
        assert tree.lookup(ipaddress.IPv4Address(20000 << 8)) is None


def test_concurrent_inserts_and_lookups():
    """Test readers see consistent results while writers insert."""
    tree = BlockTree()
    tree.insert("10.0.0.0", 8, "BASE")
    errors = []

    def writer(offset):
        for i in range(500):
            tree.insert(f"10.{offset}.{i % 256}.0", 24, f"W{offset}")

    def reader():
        for _ in range(2000):
            result = tree.lookup("10.99.99.99")
            if result not in ("BASE", "W99"):
                errors.append(result)

    threads = [threading.Thread(target=writer, args=(n,)) for n in (97, 98, 99)]
    threads += [threading.Thread(target=reader) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert tree.lookup("10.99.99.1") == "W99"
    assert len(tree) == 1 + 3 * 256
