# tests/conftest.py

"""Shared pytest fixtures for all scrape tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from src.config.logging_config import ROOT_LOGGER_NAME
from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_logs_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Point run logs at a temp dir and drop handlers between tests."""
    saved = Settings.LOGS_DIR
    Settings.LOGS_DIR = tmp_path / "logs"
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    try:
        yield Settings.LOGS_DIR
    finally:
        Settings.LOGS_DIR = saved
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)
