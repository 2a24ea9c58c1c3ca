"""Pool of reusable Playwright pages backed by one shared Chromium process."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, Page, Playwright, async_playwright

from ..config import BROWSER_ARGS, CHROME_PATH, ENVIRONMENT, MAX_PAGES
from ..errors import BrowserUnavailableError

logger = logging.getLogger(__name__)


class BrowserPool:
    """Keeps up to ``max_pages`` idle pages warm for the scraping tasks.

    Pages are lent to one task at a time. When the pool is empty a fresh page
    is opened instead of waiting, so the number of live pages can briefly
    exceed ``max_pages``; surplus pages are closed on release.
    """

    def __init__(
        self,
        max_pages: int = MAX_PAGES,
        *,
        headless: bool | None = None,
        executable_path: str | None = CHROME_PATH,
    ):
        self.max_pages = max_pages
        self.headless = ENVIRONMENT != "dev" if headless is None else headless
        self.executable_path = executable_path
        self._pages: list[Page] = []
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._ready = asyncio.Event()

    @property
    def idle(self) -> int:
        return len(self._pages)

    async def start(self) -> None:
        """Launch the browser and pre-warm the pool."""
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=BROWSER_ARGS,
                executable_path=self.executable_path,
            )
            logger.info("Browser initialized (headless=%s)", self.headless)
            await self._warm(self._browser)
        except Exception:
            logger.exception("Failed to initialize browser")
            raise
        finally:
            # Unblock waiting acquirers; they raise if the browser never came up
            self._ready.set()

    async def _warm(self, browser: Browser) -> None:
        self._browser = browser
        for _ in range(self.max_pages):
            self._pages.append(await browser.new_page())
        logger.info("Page pool initialized with %d pages", self.max_pages)

    async def stop(self) -> None:
        """Close pooled pages, the browser, and the Playwright driver."""
        pages, self._pages = self._pages, []
        await asyncio.gather(*(p.close() for p in pages), return_exceptions=True)
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser pool closed")

    async def acquire(self) -> Page:
        await self._ready.wait()
        if self._pages:
            return self._pages.pop()
        if self._browser is None:
            raise BrowserUnavailableError("Browser is not running")
        try:
            return await self._browser.new_page()
        except Exception:
            logger.exception("Failed to create new page")
            raise

    async def release(self, page: Page) -> None:
        if len(self._pages) < self.max_pages and self._browser is not None:
            try:
                await page.goto("about:blank")
            except Exception as e:
                logger.warning("Discarding page that failed to reset: %s", e)
                await self._discard(page)
                return
            self._pages.append(page)
        else:
            await self._discard(page)

    async def _discard(self, page: Page) -> None:
        try:
            await page.close()
        except Exception as e:
            logger.warning("Failed to close page: %s", e)

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        page = await self.acquire()
        try:
            yield page
        finally:
            await self.release(page)
