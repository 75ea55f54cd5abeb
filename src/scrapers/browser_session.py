# src/scrapers/browser_session.py

"""Scoped headless-browser sessions, one per source task.

Each source task gets its own Playwright browser and context that is
torn down as soon as the task finishes.  Nothing is pooled or shared
between sources.  :meth:`BrowserSessionManager.acquire` is the only way
adapters obtain a session, and it releases the session on every exit
path, including cancellation.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

from bs4 import BeautifulSoup
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from src.config.logging_config import get_logger
from src.config.settings import Settings
from src.models.errors import NavigationError, NavigationErrorKind

T = TypeVar("T")

Extraction = Callable[[BeautifulSoup], T]


@dataclass
class PageHandle:
    """An open page that navigated successfully."""

    url: str
    page: Any = None


class BrowserSession(ABC):
    """The browsing capability consumed by source adapters."""

    @abstractmethod
    async def navigate(self, url: str, timeout: float) -> PageHandle:
        """Open a new page at *url* within *timeout* seconds.

        Raises:
            NavigationError: On timeout, block, or network failure.
        """
        ...

    @abstractmethod
    async def evaluate(
        self, page: PageHandle, extraction: Extraction[T],
    ) -> T:
        """Run *extraction* against the page's rendered DOM."""
        ...

    @abstractmethod
    async def close_page(self, page: PageHandle) -> None:
        """Close a page opened by :meth:`navigate`."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the whole session."""
        ...

    @asynccontextmanager
    async def open_page(
        self, url: str, timeout: float,
    ) -> AsyncIterator[PageHandle]:
        """Navigate to *url* and close the page when the block exits."""
        page = await self.navigate(url, timeout)
        try:
            yield page
        finally:
            await self.close_page(page)


class PlaywrightSession(BrowserSession):
    """A :class:`BrowserSession` backed by an isolated Playwright browser."""

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        wait_until: str = Settings.WAIT_UNTIL,
    ) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._wait_until = wait_until

    async def navigate(self, url: str, timeout: float) -> PageHandle:
        page = await self._context.new_page()
        try:
            response = await page.goto(
                url,
                timeout=timeout * 1000,
                wait_until=self._wait_until,  # type: ignore[arg-type]
            )
        except PlaywrightTimeout as exc:
            await page.close()
            raise NavigationError(
                NavigationErrorKind.TIMEOUT, url, str(exc)
            ) from exc
        except PlaywrightError as exc:
            await page.close()
            raise NavigationError(
                NavigationErrorKind.NETWORK_FAILURE, url, str(exc)
            ) from exc

        if (
            response is not None
            and response.status in Settings.BLOCKED_STATUS_CODES
        ):
            await page.close()
            raise NavigationError(
                NavigationErrorKind.BLOCKED,
                url,
                f"HTTP {response.status}",
            )
        return PageHandle(url=url, page=page)

    async def evaluate(
        self, page: PageHandle, extraction: Extraction[T],
    ) -> T:
        html = await page.page.content()
        # Parse and extract off the event loop
        return await asyncio.to_thread(
            lambda: extraction(BeautifulSoup(html, "lxml"))
        )

    async def close_page(self, page: PageHandle) -> None:
        await page.page.close()

    async def close(self) -> None:
        try:
            await self._context.close()
            await self._browser.close()
        finally:
            await self._playwright.stop()


async def launch_playwright_session(user_agent: str) -> BrowserSession:
    """Start a fresh headless Chromium with its own context."""
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(
            headless=Settings.HEADLESS,
            args=Settings.BROWSER_ARGS,
        )
        context = await browser.new_context(user_agent=user_agent)
    except Exception:
        await playwright.stop()
        raise
    return PlaywrightSession(playwright, browser, context)


SessionLauncher = Callable[[str], Awaitable[BrowserSession]]


class BrowserSessionManager:
    """Hands out isolated sessions and guarantees their release."""

    def __init__(
        self,
        launcher: SessionLauncher | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._launcher = launcher or launch_playwright_session
        self.logger = logger or get_logger("browser")

    @asynccontextmanager
    async def acquire(
        self, user_agent: str = Settings.USER_AGENT,
    ) -> AsyncIterator[BrowserSession]:
        """Yield a new session; it is released however the block exits."""
        session = await self._launcher(user_agent)
        self.logger.debug("Browser session acquired")
        try:
            yield session
        finally:
            await self.release(session)

    async def release(self, session: BrowserSession) -> None:
        """Close *session*, logging rather than masking a close failure."""
        try:
            await session.close()
            self.logger.debug("Browser session released")
        except Exception as exc:
            self.logger.warning(
                "Browser session close failed: %s", exc, exc_info=True
            )
