import logging
import sys

from apexlens.config import settings


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for scripts that drive the analyzer."""
    # Format: timestamp - level - logger name - message
    log_format = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
    date_format = "%H:%M:%S"

    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,
    )
