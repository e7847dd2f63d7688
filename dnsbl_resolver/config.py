"""Configuration module for the DNSBL resolver.

Settings have sensible defaults and can be loaded from environment variables.
"""

import ipaddress
import os
from dataclasses import dataclass, field
from typing import List

from dnsbl_resolver.exceptions import ParseError


DEFAULT_ZONE = "zen.spamhaus.org"
DEFAULT_BOOTSTRAP_V4 = ["8.8.8.8", "8.8.4.4"]
DEFAULT_BOOTSTRAP_V6 = ["2001:4860:4860::8888", "2001:4860:4860::8844"]

_TRUE_VALUES = ("true", "1", "yes")


@dataclass
class Config:
    """Resolver configuration."""

    # DNSBL Configuration
    dnsbl_zone: str = DEFAULT_ZONE
    bootstrap_nameservers_v4: List[str] = field(
        default_factory=lambda: list(DEFAULT_BOOTSTRAP_V4)
    )
    bootstrap_nameservers_v6: List[str] = field(
        default_factory=lambda: list(DEFAULT_BOOTSTRAP_V6)
    )
    dns_timeout: int = 3
    dns_concurrency: int = 10

    # Behaviour flags
    use_ipv6: bool = False
    use_cache: bool = True
    quiet_mode: bool = False
    legacy_code_format: bool = True

    # Feed Configuration
    feed_files: List[str] = field(default_factory=list)
    feed_urls: List[str] = field(default_factory=list)
    http_timeout: int = 30

    # Operational Configuration
    verbose: bool = False

    def __post_init__(self) -> None:
        """Validate settings and normalise bootstrap addresses.

        Raises:
            ParseError: If a bootstrap nameserver is not a valid address of its family.
            ValueError: If a numeric setting is out of range or the zone is empty.
        """
        if not self.dnsbl_zone or not self.dnsbl_zone.strip("."):
            raise ValueError("DNSBL_ZONE cannot be empty")
        self.dnsbl_zone = self.dnsbl_zone.strip(".").lower()

        self.bootstrap_nameservers_v4 = self._parse_nameservers(
            self.bootstrap_nameservers_v4, 4
        )
        self.bootstrap_nameservers_v6 = self._parse_nameservers(
            self.bootstrap_nameservers_v6, 6
        )
        if not self.bootstrap_nameservers_v4 and not self.bootstrap_nameservers_v6:
            raise ValueError("At least one bootstrap nameserver is required")

        if not 1 <= self.dns_timeout <= 60:
            raise ValueError("DNS_TIMEOUT must be between 1 and 60 seconds")
        if not 1 <= self.dns_concurrency <= 100:
            raise ValueError("DNS_CONCURRENCY must be between 1 and 100")
        if not 1 <= self.http_timeout <= 600:
            raise ValueError("HTTP_TIMEOUT must be between 1 and 600 seconds")

    @staticmethod
    def _parse_nameservers(values: List[str], version: int) -> List[str]:
        parsed = []
        for value in values:
            try:
                address = ipaddress.ip_address(str(value).strip())
            except ValueError as e:
                raise ParseError(f"Invalid bootstrap nameserver: {value!r}") from e
            if address.version != version:
                raise ParseError(
                    f"Bootstrap nameserver {value} is not an IPv{version} address"
                )
            parsed.append(str(address))
        return parsed

    def bootstrap_nameservers(self) -> List[str]:
        """Resolvers used for discovery: IPv6 when preferred and configured, else IPv4."""
        if self.use_ipv6 and self.bootstrap_nameservers_v6:
            return self.bootstrap_nameservers_v6
        return self.bootstrap_nameservers_v4 or self.bootstrap_nameservers_v6

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Raises:
            ValueError: If variables are invalid.
            ParseError: If a bootstrap nameserver is malformed.

        Returns:
            Config: Validated configuration instance.
        """
        bootstrap_v4 = os.getenv("BOOTSTRAP_NAMESERVERS_V4")
        bootstrap_v6 = os.getenv("BOOTSTRAP_NAMESERVERS_V6")

        return cls(
            dnsbl_zone=os.getenv("DNSBL_ZONE", DEFAULT_ZONE),
            bootstrap_nameservers_v4=(
                cls._split_list(bootstrap_v4)
                if bootstrap_v4 is not None
                else list(DEFAULT_BOOTSTRAP_V4)
            ),
            bootstrap_nameservers_v6=(
                cls._split_list(bootstrap_v6)
                if bootstrap_v6 is not None
                else list(DEFAULT_BOOTSTRAP_V6)
            ),
            dns_timeout=cls._get_int_env("DNS_TIMEOUT", 3),
            dns_concurrency=cls._get_int_env("DNS_CONCURRENCY", 10),
            use_ipv6=cls._get_bool_env("USE_IPV6", False),
            use_cache=cls._get_bool_env("USE_CACHE", True),
            quiet_mode=cls._get_bool_env("QUIET_MODE", False),
            legacy_code_format=cls._get_bool_env("LEGACY_CODE_FORMAT", True),
            feed_files=cls._split_list(os.getenv("FEED_FILES", "")),
            feed_urls=cls._split_list(os.getenv("FEED_URLS", "")),
            http_timeout=cls._get_int_env("HTTP_TIMEOUT", 30),
            verbose=cls._get_bool_env("VERBOSE", False),
        )

    @staticmethod
    def _split_list(value: str) -> List[str]:
        return [item.strip() for item in value.split(",") if item.strip()]

    @staticmethod
    def _get_int_env(key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ValueError(f"{key} must be an integer, got {value!r}") from e

    @staticmethod
    def _get_bool_env(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        return value.lower() in _TRUE_VALUES
