"""Blocklist feed ingestion.

Feed format is one entry per line, ``NETWORK/PREFIXLEN ; IDENTIFIER``. Empty
lines and lines starting with ``;`` are comments. Lines that do not parse are
skipped, since exported feeds may carry headers or footers.
"""

import ipaddress
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import requests

from dnsbl_resolver.models.block_tree import BlockTree
from dnsbl_resolver.utils.retry import exponential_backoff_retry


logger = logging.getLogger(__name__)

FEED_LINE_PATTERN = re.compile(r"^(.*)/([0-9]+) ; (.*)")
COMMENT_MARKER = ";"


@dataclass
class FeedEntry:
    """One parsed feed line.

    Attributes:
        network: Network address (trailing host bits may be set).
        prefix_length: Prefix length within the address bit width.
        identifier: Listing identifier, e.g. an SBL reference.
    """

    network: ipaddress.IPv4Address | ipaddress.IPv6Address
    prefix_length: int
    identifier: str


def parse_feed_line(line: str) -> FeedEntry | None:
    """Parse a feed line.

    Returns:
        FeedEntry | None: Parsed entry, or None for comments, blank and malformed lines.

    Examples:
        >>> parse_feed_line("192.0.2.0/24 ; SBL123").prefix_length
        24
        >>> parse_feed_line("; Spamhaus DROP List") is None
        True
    """
    line = line.rstrip("\r\n")
    if not line or line.startswith(COMMENT_MARKER):
        return None

    match = FEED_LINE_PATTERN.match(line)
    if not match:
        logger.debug(f"Skipping unparseable feed line: {line!r}")
        return None

    try:
        network = ipaddress.ip_address(match.group(1).strip())
    except ValueError:
        logger.debug(f"Skipping feed line with invalid address: {line!r}")
        return None

    prefix_length = int(match.group(2))
    if prefix_length > network.max_prefixlen:
        logger.debug(f"Skipping feed line with invalid prefix length: {line!r}")
        return None

    return FeedEntry(
        network=network,
        prefix_length=prefix_length,
        identifier=match.group(3).strip(),
    )


def ingest_lines(lines: Iterable, tree: BlockTree) -> int:
    """Insert every parseable feed line into tree.

    Args:
        lines: Iterable of str or bytes lines (a text or binary stream works).
        tree: Block tree to populate.

    Returns:
        int: Number of entries inserted.
    """
    inserted = 0
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        entry = parse_feed_line(line)
        if entry is None:
            continue
        tree.insert(entry.network, entry.prefix_length, entry.identifier)
        inserted += 1
    return inserted


def ingest_file(path: str | Path, tree: BlockTree) -> int:
    """Ingest a feed from a local file.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(path, "rb") as feed:
        inserted = ingest_lines(feed, tree)
    logger.info(f"Loaded {inserted} entries from {path}")
    return inserted


@exponential_backoff_retry()
def _fetch_feed(url: str, timeout: float) -> list[bytes]:
    with requests.get(url, timeout=timeout, stream=True) as response:
        response.raise_for_status()
        return list(response.iter_lines())


def ingest_url(url: str, tree: BlockTree, timeout: float = 30) -> int:
    """Ingest a feed over HTTP(S).

    Raises:
        requests.RequestException: If the download fails after retries.
    """
    inserted = ingest_lines(_fetch_feed(url, timeout), tree)
    logger.info(f"Loaded {inserted} entries from {url}")
    return inserted
