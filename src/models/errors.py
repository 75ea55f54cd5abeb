# src/models/errors.py

"""Exception taxonomy for the scrape pipeline.

Only :class:`RequestValidationError` and :class:`ScrapeFailedError`
ever reach a caller; everything else is absorbed at a source boundary.
"""

from enum import Enum


class NavigationErrorKind(str, Enum):
    """Why a page navigation did not produce a usable document."""

    TIMEOUT = "timeout"
    BLOCKED = "blocked"
    NETWORK_FAILURE = "network_failure"


class NavigationError(Exception):
    """A navigation failed; confined to the source task that issued it."""

    def __init__(
        self, kind: NavigationErrorKind, url: str, message: str = "",
    ) -> None:
        self.kind = kind
        self.url = url
        self.message = message
        super().__init__(f"{kind.value} navigating to {url}: {message}")


class SecondaryFetchError(Exception):
    """A per-item enrichment page could not be fetched or read."""


class RequestValidationError(ValueError):
    """The inbound request was rejected before any dispatch."""


class ScrapeFailedError(Exception):
    """An unexpected fault outside every per-source isolation boundary."""
