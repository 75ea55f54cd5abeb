# src/config/logging_config.py

"""Per-run logging configuration for multiscrape.

Every launch writes a dedicated ``logs/scrape_<timestamp>.log`` file.
All ``multiscrape.*`` loggers route through it, so per-source decisions
(which container selector matched, which source failed and why) from
one run can be read back in a single place.

Components never configure logging themselves; they take an injected
:class:`logging.Logger` and fall back to :func:`get_logger`.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "multiscrape"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at DEBUG
_NOISY_LOGGERS = ("asyncio", "urllib3", "curl_cffi")


def get_logger(component: str) -> logging.Logger:
    """Return the ``multiscrape.<component>`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")


def setup_logging(
    console_level: int = logging.WARNING,
    logs_dir: Path | None = None,
) -> Path:
    """Attach file and console handlers to the ``multiscrape`` logger.

    Args:
        console_level: Minimum level echoed to stderr.
        logs_dir: Directory for the run log; defaults to
            ``Settings.LOGS_DIR``.

    Returns:
        The path of the log file for this run.
    """
    target_dir = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = target_dir / f"scrape_{timestamp}.log"

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, embedding) must not stack handlers
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
