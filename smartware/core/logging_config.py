"""Process-wide logging setup shared by the API and CLI entrypoints."""

import logging
import time

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


class UTCFormatter(logging.Formatter):
    """Formatter whose asctime is UTC; other formatters keep local time."""

    converter = time.gmtime


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; unknown level names fall back to INFO."""
    normalized = level.strip().upper() if level and level.strip() else "INFO"
    handler = logging.StreamHandler()
    handler.setFormatter(UTCFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO),
        handlers=[handler],
    )
