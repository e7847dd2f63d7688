"""Structured JSON logging."""

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


# Run ID for correlation across log entries
RUN_ID = str(uuid.uuid4())


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter that adds run_id and standardized fields."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: The log record to modify.
            record: The original logging.LogRecord.
            message_dict: Additional fields from the logging call.
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = (
            datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        )
        log_record["run_id"] = RUN_ID
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure structured JSON logging on stderr.

    Args:
        verbose: Log at DEBUG instead of INFO.

    Returns:
        logging.Logger: Configured root logger.
    """
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    json_handler = logging.StreamHandler(sys.stderr)
    json_handler.setFormatter(CustomJsonFormatter("%(message)s"))
    logger.addHandler(json_handler)

    return logger


def log_lookup(address: str, identifier: str | None, source: str, duration_ms: int) -> None:
    """Log structured per-address lookup result.

    Args:
        address: Address checked.
        identifier: Block identifier, or None if not listed.
        source: Where the answer came from (cache, dnsbl, unavailable).
        duration_ms: Processing time in milliseconds.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "Lookup completed",
        extra={
            "address": address,
            "identifier": identifier,
            "listed": identifier is not None,
            "source": source,
            "duration_ms": duration_ms,
        },
    )


def log_discovery(zone: str, nameserver: str, v4_count: int, v6_count: int) -> None:
    """Log the outcome of nameserver discovery."""
    logger = logging.getLogger(__name__)
    logger.info(
        "Nameservers discovered",
        extra={
            "zone": zone,
            "nameserver": nameserver,
            "v4_count": v4_count,
            "v6_count": v6_count,
        },
    )


def log_run_summary(total: int, blocked: int, clean: int, duration_sec: float) -> None:
    """Log run completion summary.

    Args:
        total: Number of addresses checked.
        blocked: Number of addresses with an identifier.
        clean: Number of addresses without one.
        duration_sec: Total run time in seconds.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "Run completed",
        extra={
            "total": total,
            "blocked": blocked,
            "clean": clean,
            "duration_sec": duration_sec,
        },
    )
