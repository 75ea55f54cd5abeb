# src/config/settings.py

"""Central configuration for the multiscrape engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back to *default*."""
    raw = os.getenv(name)
    return float(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag (1/true/yes) from the environment."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Central configuration for the multiscrape engine."""

    # --- Scraping ---
    NAVIGATION_TIMEOUT: float = _env_float("NAVIGATION_TIMEOUT", 40.0)
    SECONDARY_TIMEOUT: float = _env_float("SECONDARY_TIMEOUT", 10.0)
    SOURCE_TASK_TIMEOUT: float = _env_float("SOURCE_TASK_TIMEOUT", 90.0)
    MAX_ITEMS_PER_SOURCE: int = 10      # Listings kept per source
    PAGE_SIZE: int = 30                 # Consumer page size for totalPages

    # --- Browser ---
    HEADLESS: bool = _env_bool("HEADLESS", True)
    # Playwright load state; "networkidle" needs zero open connections
    WAIT_UNTIL: str = os.getenv("WAIT_UNTIL", "load")
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/91.0.4472.124 Safari/537.36"
        ),
    )
    BROWSER_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-web-security",
    ]
    BLOCKED_STATUS_CODES: frozenset[int] = frozenset({403, 429, 503})

    # --- Health check (curl_cffi) ---
    HEALTH_TIMEOUT: int = 10            # Seconds per homepage request
    HEALTH_SLOW_MS: float = 5000.0      # Latency above this is "slow"
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-IN,en;q=0.9",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = Path(os.getenv("LOGS_DIR", str(BASE_DIR / "logs")))
