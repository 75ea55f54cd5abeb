# src/scrapers/source_adapter.py

"""Per-source scrape pipeline driven by a :class:`SourceSpec`.

One adapter handles one marketplace: it opens a private browser
session, loads the search page, extracts up to ``max_items`` listings
through its SourceSpec locator chains, and, for sources that only show
ratings on product pages, enriches each listing with a concurrent
follow-up fetch.  Every failure is converted into a
:class:`SourceOutcome` so nothing escapes to the orchestrator.
"""

import asyncio
import dataclasses
import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from src.config.logging_config import get_logger
from src.config.settings import Settings
from src.config.source_specs import SecondaryFetchSpec, SourceSpec
from src.filters.listing_normalizer import Candidate, ListingNormalizer
from src.models.errors import NavigationError, SecondaryFetchError
from src.models.product import RATING_PLACEHOLDER, ProductListing
from src.models.scrape_request import ScrapeRequest
from src.models.source_outcome import SourceOutcome
from src.scrapers.browser_session import BrowserSession, BrowserSessionManager
from src.scrapers.field_extractor import (
    Locator,
    extract_first,
    select_items,
)


def absolutize(href: str, base_url: str) -> str:
    """Resolve a possibly relative *href* against the source's base URL."""
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url + "/", href)


def compose_rating(
    value: str | None,
    count: str | None,
    default: str = RATING_PLACEHOLDER,
) -> str:
    """``"4.3 (1,204)"`` when both parts exist, else the value or default."""
    if value and count:
        return f"{value} ({count})"
    return value or default


class SourceAdapter:
    """Scrapes one source and reports a :class:`SourceOutcome`."""

    def __init__(
        self,
        spec: SourceSpec,
        session_manager: BrowserSessionManager | None = None,
        logger: logging.Logger | None = None,
        navigation_timeout: float = Settings.NAVIGATION_TIMEOUT,
        task_timeout: float = Settings.SOURCE_TASK_TIMEOUT,
        user_agent: str = Settings.USER_AGENT,
    ) -> None:
        self.spec = spec
        self.logger = logger or get_logger(spec.id)
        self.sessions = session_manager or BrowserSessionManager(
            logger=self.logger
        )
        self.navigation_timeout = navigation_timeout
        self.task_timeout = task_timeout
        self.user_agent = user_agent

    # ── Public entry point ───────────────────────────────

    async def run(self, request: ScrapeRequest) -> SourceOutcome:
        """Scrape this source; never raises."""
        try:
            return await asyncio.wait_for(
                self._scrape(request), timeout=self.task_timeout
            )
        except asyncio.TimeoutError:
            self.logger.error(
                "[%s] Source task exceeded %.0fs",
                self.spec.id,
                self.task_timeout,
            )
            return self._failure(
                f"source task timed out after {self.task_timeout:.0f}s"
            )
        except Exception as exc:
            self.logger.error(
                "[%s] Scraping error: %s",
                self.spec.id,
                exc,
                exc_info=True,
            )
            return self._failure(f"unexpected error: {exc}")

    # ── Pipeline ─────────────────────────────────────────

    async def _scrape(self, request: ScrapeRequest) -> SourceOutcome:
        url = self.spec.build_search_url(request.term, request.page)
        self.logger.info(
            "[%s] Searching %r (page %d): %s",
            self.spec.id,
            request.term,
            request.page,
            url,
        )

        async with self.sessions.acquire(self.user_agent) as session:
            try:
                async with session.open_page(
                    url, self.navigation_timeout
                ) as page:
                    self.logger.debug("[%s] Page loaded", self.spec.id)
                    raw = await session.evaluate(
                        page, self.extract_candidates
                    )
            except NavigationError as exc:
                self.logger.error(
                    "[%s] Page navigation error (%s): %s",
                    self.spec.id,
                    exc.kind.value,
                    exc.message,
                )
                return self._failure(str(exc))

            listings, dropped = ListingNormalizer.normalize(
                raw, self.logger
            )
            if dropped:
                self.logger.info(
                    "[%s] Discarded %d items without title or link",
                    self.spec.id,
                    dropped,
                )

            if self.spec.secondary is not None and listings:
                listings = await self._enrich(
                    session, listings, self.spec.secondary
                )

        self.logger.info(
            "[%s] %d listings found", self.spec.id, len(listings)
        )
        return SourceOutcome.success(
            self.spec.id, self.spec.label, listings
        )

    def extract_candidates(self, soup: BeautifulSoup) -> list[Candidate]:
        """Read raw field values for up to ``max_items`` result items."""
        items = select_items(
            soup,
            self.spec.item_selectors,
            self.spec.max_items,
            self.logger,
        )
        self.logger.debug(
            "[%s] Processing %d items", self.spec.id, len(items)
        )
        return [self._parse_item(item) for item in items]

    def _parse_item(self, item: Tag) -> Candidate:
        """Read one item's fields; title or link may still be missing."""
        fields = self.spec.fields

        def first(chain: tuple[Locator, ...], name: str) -> str | None:
            return extract_first(item, chain, name, self.logger)

        href = first(fields.link, "link")
        return {
            "platform": self.spec.label,
            "platform_logo": self.spec.icon,
            "title": first(fields.title, "title"),
            "link": absolutize(href, self.spec.base_url) if href else None,
            "price": first(fields.price, "price"),
            "rating": compose_rating(
                first(fields.rating, "rating"),
                first(fields.rating_count, "rating_count"),
            ),
            "thumbnail": first(fields.thumbnail, "thumbnail"),
            "discount": first(fields.discount, "discount"),
        }

    # ── Two-phase enrichment ─────────────────────────────

    async def _enrich(
        self,
        session: BrowserSession,
        listings: list[ProductListing],
        secondary: SecondaryFetchSpec,
    ) -> list[ProductListing]:
        """Fetch every on-domain listing's page concurrently for its rating.

        A failed fetch only resets that listing's rating to the
        placeholder; the listing itself is always kept.
        """

        async def enrich_one(listing: ProductListing) -> ProductListing:
            if secondary.domain not in listing.link:
                return listing
            try:
                rating = await asyncio.wait_for(
                    self._fetch_rating(session, listing.link, secondary),
                    timeout=secondary.timeout,
                )
            except Exception as exc:
                self.logger.warning(
                    "[%s] Error fetching rating from %s: %s",
                    self.spec.id,
                    listing.link,
                    str(exc) or type(exc).__name__,
                )
                rating = secondary.rating_default
            return dataclasses.replace(listing, rating=rating)

        enriched = await asyncio.gather(
            *(enrich_one(listing) for listing in listings)
        )
        return list(enriched)

    async def _fetch_rating(
        self,
        session: BrowserSession,
        link: str,
        secondary: SecondaryFetchSpec,
    ) -> str:
        """Read the supplemental rating from one product page."""
        try:
            async with session.open_page(link, secondary.timeout) as page:
                return await session.evaluate(
                    page,
                    lambda soup: self._extract_rating(soup, secondary),
                )
        except NavigationError as exc:
            raise SecondaryFetchError(str(exc)) from exc

    def _extract_rating(
        self, soup: BeautifulSoup, secondary: SecondaryFetchSpec,
    ) -> str:
        value = (
            extract_first(soup, secondary.rating, "rating", self.logger)
            or secondary.rating_default
        )
        count = (
            extract_first(
                soup, secondary.rating_count, "rating_count", self.logger
            )
            or secondary.count_default
        )
        if (
            value != secondary.rating_default
            and count != secondary.count_default
        ):
            return f"{value} ({count})"
        return value

    def _failure(self, reason: str) -> SourceOutcome:
        return SourceOutcome.failure(
            self.spec.id, self.spec.label, reason
        )
