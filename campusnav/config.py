"""Process-level logging setup shared by the HTTP and CLI entrypoints."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Apply `logging.basicConfig` using `LOG_LEVEL` (default `INFO`).

    Unknown level names fall back to `INFO` instead of failing startup.
    """
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, name, None)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
