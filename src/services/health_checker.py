# src/services/health_checker.py

"""Source connectivity and browser availability checks."""

import asyncio
import importlib.util
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from src.config.logging_config import get_logger
from src.config.settings import Settings
from src.config.source_specs import SourceSpec, select_source_specs

logger = get_logger("health")


@dataclass
class HealthResult:
    """Result of a single source health check."""

    source_id: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def browser_available() -> bool:
    """True when the Playwright package can be imported."""
    return importlib.util.find_spec("playwright") is not None


def _classify(status_code: int, elapsed_ms: float) -> tuple[str, str]:
    """Map an HTTP status and latency onto a health status and note."""
    if status_code != 200:
        return "down", f"HTTP {status_code}"
    if elapsed_ms > Settings.HEALTH_SLOW_MS:
        return "slow", "High latency"
    return "ok", ""


def check_source(spec: SourceSpec) -> HealthResult:
    """GET a source's homepage with a browser-impersonating client."""
    session: curl_requests.Session | None = None
    start = time.monotonic()
    try:
        session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        resp = session.get(
            spec.base_url + "/",
            headers={
                **Settings.DEFAULT_HEADERS,
                "User-Agent": Settings.USER_AGENT,
            },
            timeout=Settings.HEALTH_TIMEOUT,
        )
        status, message = _classify(
            resp.status_code, (time.monotonic() - start) * 1000
        )
    except Exception as exc:
        status, message = "down", str(exc)[:80]
    finally:
        if session is not None:
            session.close()

    return HealthResult(
        source_id=spec.id,
        status=status,
        latency_ms=(time.monotonic() - start) * 1000,
        message=message,
    )


class HealthChecker:
    """Runs concurrent homepage checks against all sources."""

    def __init__(self, specs: list[SourceSpec] | None = None) -> None:
        self.specs = specs if specs is not None else select_source_specs()

    async def check_all(self) -> list[HealthResult]:
        """Check every registered source concurrently."""
        tasks = [
            asyncio.to_thread(check_source, spec) for spec in self.specs
        ]
        results: list[HealthResult] = list(await asyncio.gather(*tasks))
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.source_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
