"""Address prefix index (block tree).

Maps IPv4/IPv6 prefixes to identifier strings and answers longest-prefix
match lookups. Each address family has its own binary trie stored as an arena
of parallel lists indexed by node number; node 0 is the root and stands for
the /0 prefix.
"""

import threading
from typing import Dict, List

from dnsbl_resolver.utils.ip_utils import address_bits, parse_address


_NO_CHILD = -1


class _Trie:
    """Binary trie over fixed-width integers, branching from the most significant bit.

    Attributes:
        bitwidth: Address width in bits (32 or 128).
        zero: Child index for bit 0, per node.
        one: Child index for bit 1, per node.
        identifiers: Identifier stored at node, or None if not terminal.
    """

    def __init__(self, bitwidth: int):
        self.bitwidth = bitwidth
        self.zero: List[int] = [_NO_CHILD]
        self.one: List[int] = [_NO_CHILD]
        self.identifiers: List[str | None] = [None]
        self.entries = 0

    def _new_node(self) -> int:
        self.zero.append(_NO_CHILD)
        self.one.append(_NO_CHILD)
        self.identifiers.append(None)
        return len(self.identifiers) - 1

    def insert(self, value: int, prefix_length: int, identifier: str) -> None:
        node = 0
        for depth in range(prefix_length):
            bit = (value >> (self.bitwidth - 1 - depth)) & 1
            children = self.one if bit else self.zero
            child = children[node]
            if child == _NO_CHILD:
                # Append first, then publish the index to the parent slot.
                child = self._new_node()
                children[node] = child
            node = child

        if self.identifiers[node] is None:
            self.entries += 1
        self.identifiers[node] = identifier

    def lookup(self, value: int) -> str | None:
        node = 0
        match = self.identifiers[0]
        for depth in range(self.bitwidth):
            bit = (value >> (self.bitwidth - 1 - depth)) & 1
            node = (self.one if bit else self.zero)[node]
            if node == _NO_CHILD:
                break
            identifier = self.identifiers[node]
            if identifier is not None:
                match = identifier
        return match


class BlockTree:
    """Longest-prefix match index for IPv4 and IPv6 networks.

    Writers are serialised with a lock. Lookups take no lock: a node is fully
    allocated before it becomes reachable from its parent, so a concurrent
    reader sees either the old or the new shape of the trie.

    Example:
        >>> tree = BlockTree()
        >>> tree.insert("10.0.0.0", 8, "WIDE")
        >>> tree.insert("10.1.0.0", 16, "NARROW")
        >>> tree.lookup("10.1.2.3")
        'NARROW'
        >>> tree.lookup("10.2.0.1")
        'WIDE'
        >>> tree.lookup("192.0.2.1") is None
        True
    """

    def __init__(self):
        self._tries: Dict[int, _Trie] = {4: _Trie(32), 6: _Trie(128)}
        self._write_lock = threading.Lock()

    def insert(self, network, prefix_length: int, identifier: str) -> None:
        """Store identifier for network/prefix_length, overwriting any previous value.

        Bits of ``network`` beyond ``prefix_length`` are ignored.

        Args:
            network: Network address (string or ``ipaddress`` address).
            prefix_length: Prefix length between 0 and the address bit width.
            identifier: Identifier returned by matching lookups.

        Raises:
            ValueError: If prefix_length is out of range or identifier is None.
        """
        address = parse_address(network)
        value, bitwidth = address_bits(address)
        if not 0 <= prefix_length <= bitwidth:
            raise ValueError(
                f"Prefix length {prefix_length} out of range for IPv{address.version} (0-{bitwidth})"
            )
        if identifier is None:
            raise ValueError("identifier cannot be None")

        with self._write_lock:
            self._tries[address.version].insert(value, prefix_length, identifier)

    def insert_network(self, network, identifier: str) -> None:
        """Store identifier for an ``ipaddress`` network object."""
        self.insert(network.network_address, network.prefixlen, identifier)

    def insert_address(self, address, identifier: str) -> None:
        """Store identifier for a single host."""
        address = parse_address(address)
        self.insert(address, address.max_prefixlen, identifier)

    def lookup(self, address) -> str | None:
        """Return the identifier of the most specific prefix containing address.

        Args:
            address: Address to look up (string or ``ipaddress`` address).

        Returns:
            str | None: Identifier of the longest matching prefix, or None.
        """
        address = parse_address(address)
        value, _ = address_bits(address)
        return self._tries[address.version].lookup(value)

    def __contains__(self, address) -> bool:
        return self.lookup(address) is not None

    def __len__(self) -> int:
        return sum(trie.entries for trie in self._tries.values())
