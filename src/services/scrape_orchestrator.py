# src/services/scrape_orchestrator.py

"""Fans a scrape request out to every source and merges the outcomes."""

import asyncio
import logging
import time
from collections.abc import Sequence

from src.config.logging_config import get_logger
from src.config.settings import Settings
from src.config.source_specs import SourceSpec, select_source_specs
from src.models.errors import ScrapeFailedError
from src.models.product import ProductListing
from src.models.scrape_request import ScrapeRequest
from src.models.source_outcome import AggregateResult, SourceOutcome
from src.scrapers.browser_session import BrowserSessionManager
from src.scrapers.source_adapter import SourceAdapter


class ScrapeOrchestrator:
    """Runs one adapter per source concurrently and merges the results.

    Sources never cancel each other: a source that fails or times out
    contributes zero listings while the rest complete normally.
    """

    def __init__(
        self,
        specs: Sequence[SourceSpec] | None = None,
        session_manager: BrowserSessionManager | None = None,
        logger: logging.Logger | None = None,
        page_size: int = Settings.PAGE_SIZE,
    ) -> None:
        self.logger = logger or get_logger("orchestrator")
        self.page_size = page_size
        selected = list(specs) if specs is not None else select_source_specs()
        self.adapters = [
            SourceAdapter(
                spec,
                session_manager=session_manager,
                logger=get_logger(spec.id)
                if logger is None
                else self.logger.getChild(spec.id),
            )
            for spec in selected
        ]

    async def scrape(
        self, term: str | None, page: int | str | None = 1,
    ) -> AggregateResult:
        """Validate the request, scrape every source, and merge.

        Raises:
            RequestValidationError: Before any source is contacted,
                when the term is blank or the page is invalid.
            ScrapeFailedError: On a fault outside per-source isolation.
        """
        request = ScrapeRequest.create(term, page)
        self.logger.info(
            "Scrape %r page %d across %d sources",
            request.term,
            request.page,
            len(self.adapters),
        )
        try:
            return await self._run(request)
        except Exception as exc:
            self.logger.critical(
                "Scrape of %r failed outside source isolation: %s",
                request.term,
                exc,
                exc_info=True,
            )
            raise ScrapeFailedError(str(exc)) from exc

    async def _run(self, request: ScrapeRequest) -> AggregateResult:
        started = time.monotonic()
        outcomes = await self._dispatch(request)
        duration_ms = int((time.monotonic() - started) * 1000)

        result = self._merge(request, outcomes)
        result.duration_ms = duration_ms

        self.logger.info(
            "Scrape %r completed in %dms: %s total=%d",
            request.term,
            duration_ms,
            ", ".join(f"{k}={v}" for k, v in result.counts.items()),
            result.total,
        )
        return result

    async def _dispatch(
        self, request: ScrapeRequest,
    ) -> list[SourceOutcome]:
        """Start every adapter together and wait for all of them."""
        batches = await asyncio.gather(
            *(adapter.run(request) for adapter in self.adapters),
            return_exceptions=True,
        )

        outcomes: list[SourceOutcome] = []
        for adapter, batch in zip(self.adapters, batches):
            if isinstance(batch, SourceOutcome):
                outcomes.append(batch)
            elif isinstance(batch, Exception):
                self.logger.error(
                    "Adapter %s raised past its boundary: %s",
                    adapter.spec.id,
                    batch,
                    exc_info=batch,
                )
                outcomes.append(
                    SourceOutcome.failure(
                        adapter.spec.id, adapter.spec.label, str(batch)
                    )
                )
            else:
                # BaseException such as CancelledError
                raise batch
        return outcomes

    def _merge(
        self,
        request: ScrapeRequest,
        outcomes: list[SourceOutcome],
    ) -> AggregateResult:
        """Flatten successes in registration order and tally counts."""
        result = AggregateResult(
            term=request.term,
            page=request.page,
            page_size=self.page_size,
        )
        merged: list[ProductListing] = []

        for outcome in outcomes:
            if not outcome.ok:
                result.counts[outcome.source_id] = 0
                result.errors[outcome.source_id] = outcome.error or ""
                self.logger.warning(
                    "Source %s contributed nothing: %s",
                    outcome.source_id,
                    outcome.error,
                )
                continue
            result.counts[outcome.source_id] = outcome.count
            merged.extend(outcome.listings)

        result.listings = merged
        return result
