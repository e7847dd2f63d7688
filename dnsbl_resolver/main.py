"""Command line entry point for the DNSBL resolver.

Usage: python -m dnsbl_resolver.main ADDRESS [ADDRESS ...]
"""

import argparse
import logging
import sys
import time

from dnsbl_resolver.config import Config
from dnsbl_resolver.services.logger import log_run_summary, setup_logging
from dnsbl_resolver.services.resolver import DnsblResolver


logger = logging.getLogger(__name__)


def build_resolver(config: Config) -> DnsblResolver:
    """Create a resolver and load the configured feeds into it."""
    resolver = DnsblResolver(config)

    for path in config.feed_files:
        resolver.add_file(path)
    for url in config.feed_urls:
        resolver.add_url(url)

    logger.info(f"Block tree holds {len(resolver.tree)} entries")
    return resolver


def main(argv: list[str] | None = None) -> int:
    """Main execution function.

    Returns:
        int: Exit code (0 for success, 1 for fatal error).
    """
    parser = argparse.ArgumentParser(
        description="Check addresses against a DNS blocklist."
    )
    parser.add_argument("addresses", nargs="+", help="IPv4 or IPv6 addresses")
    args = parser.parse_args(argv)

    start_time = time.time()

    try:
        config = Config.from_env()
        setup_logging(config.verbose)
        logger.info(f"Checking {len(args.addresses)} addresses against {config.dnsbl_zone}")

        resolver = build_resolver(config)
        results = resolver.check_many(args.addresses)

        for address, identifier in results.items():
            print(f"{address}\t{identifier or 'not listed'}")

        blocked = sum(1 for identifier in results.values() if identifier is not None)
        log_run_summary(
            total=len(results),
            blocked=blocked,
            clean=len(results) - blocked,
            duration_sec=time.time() - start_time,
        )
        return 0

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
