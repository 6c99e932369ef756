"""
Browser Pool - Playwright-backed DocumentProvider.

THE PROBLEM:
    Every medicine needs up to eight page loads (detail page plus seven
    sub-sections), and the site sets consent cookies that must not leak
    from one medicine into the next:
    - one browser per medicine = a Chromium process per task (slow, heavy)
    - one shared page = cookie banners and storage bleed across medicines

THE SOLUTION:
    One browser for the whole run, one isolated BrowserContext per
    medicine, one short-lived page per navigation:
    - context = fresh cookies/storage, cheap to create
    - pages are snapshotted into HtmlDocuments right after load and
      closed when the medicine's session ends
    - the ConcurrencyScheduler bounds how many contexts are open at once

ARCHITECTURE:
    ┌──────────────────────────────────────────────────────────────┐
    │                 PlaywrightProvider (1 browser)               │
    │                                                              │
    │   ┌──────────────┐  ┌──────────────┐       ┌──────────────┐  │
    │   │  Context #1  │  │  Context #2  │  ...  │  Context #K  │  │
    │   │  Paracetamol │  │  Ibuprofen   │       │  Aspirin     │  │
    │   │  pages: 3    │  │  pages: 7    │       │  pages: 1    │  │
    │   └──────────────┘  └──────────────┘       └──────────────┘  │
    │                                                              │
    │   K = scheduler capacity (default 3)                         │
    └──────────────────────────────────────────────────────────────┘

USAGE:
    provider = PlaywrightProvider(headless=True)
    await provider.start()

    async with provider.session() as session:
        doc = await session.navigate(url, timeout_ms=30000)
        heading = doc.query("h1")
        await doc.dismiss('button:has-text("Accept")')

    await provider.shutdown()
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
)

from .documents import BrowsingSession, DocumentProvider, HtmlDocument
from .errors import DocumentError, EngineStartError
from .logger import get_logger

log = get_logger('browser')

USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

# Pause after dismissing a consent overlay so the page can settle
DISMISS_SETTLE_MS = 2000


class PlaywrightDocument(HtmlDocument):
    """
    HtmlDocument snapshot of a live Playwright page.

    Queries run against the snapshot. dismiss() acts on the live page and
    refreshes the snapshot after a successful click.
    """

    def __init__(self, page: Page, html: str, url: str):
        super().__init__(html, url)
        self.page = page

    async def dismiss(self, selector: str) -> bool:
        try:
            button = self.page.locator(selector).first
            if not await button.is_visible():
                return False
            await button.click()
            await self.page.wait_for_timeout(DISMISS_SETTLE_MS)
            self._load(await self.page.content())
        except PlaywrightError as e:
            log.debug(f"Dismiss via {selector} failed on {self.url}: {e}")
            return False
        self.dismissed.append(selector)
        return True


class PlaywrightSession(BrowsingSession):
    """One isolated BrowserContext. Pages stay open until the session closes."""

    def __init__(self, context: BrowserContext):
        self.context = context
        self.pages: List[Page] = []

    async def navigate(self, url: str, timeout_ms: int) -> PlaywrightDocument:
        try:
            page = await self.context.new_page()
            self.pages.append(page)
            await page.goto(url, wait_until='networkidle', timeout=timeout_ms)
            html = await page.content()
        except PlaywrightError as e:
            raise DocumentError(f"navigation failed: {e}", url=url) from e
        return PlaywrightDocument(page, html, url)

    async def close(self):
        for page in self.pages:
            try:
                await page.close()
            except PlaywrightError:
                pass  # Page might already be closed
        self.pages.clear()
        try:
            await self.context.close()
        except PlaywrightError:
            pass


class PlaywrightProvider(DocumentProvider):
    """
    Renders pages with headless Chromium.

    Args:
        headless: Run the browser in headless mode (default: True)
    """

    def __init__(self, headless: bool = True):
        self.headless = headless

        # State
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._started = False

        # Stats (for monitoring)
        self._sessions_opened = 0
        self._open_sessions = 0
        self._pages_served = 0

    async def start(self):
        """
        Launch Playwright and the browser.

        Raises:
            EngineStartError: Chromium could not be launched
        """
        if self._started:
            return

        log.info("Starting browser...")
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--no-sandbox',
                    '--disable-setuid-sandbox',
                    '--disable-dev-shm-usage',
                    '--no-first-run',
                    '--no-default-browser-check',
                ]
            )
        except PlaywrightError as e:
            await self._stop_playwright()
            raise EngineStartError(f"could not launch browser: {e}") from e

        self._started = True
        log.info("Browser ready.")

    @asynccontextmanager
    async def session(self):
        """
        Open an isolated browsing context.

            async with provider.session() as session:
                doc = await session.navigate(url, timeout_ms=15000)
            # pages and context closed here
        """
        if not self._started:
            raise EngineStartError("provider not started")

        context = await self._browser.new_context(
            viewport={'width': 1920, 'height': 1080},
            user_agent=USER_AGENT,
        )
        session = PlaywrightSession(context)
        self._sessions_opened += 1
        self._open_sessions += 1
        try:
            yield session
        finally:
            self._pages_served += len(session.pages)
            self._open_sessions -= 1
            await session.close()

    async def _stop_playwright(self):
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def shutdown(self):
        """Close the browser and Playwright. Safe to call twice."""
        if not self._started:
            return

        log.info("Shutting down browser...")
        log.info(f"Stats: {self._sessions_opened} sessions, {self._pages_served} pages served")

        if self._browser:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                log.warning(f"Browser close failed: {e}")
            self._browser = None

        await self._stop_playwright()
        self._started = False
        log.info("Shutdown complete.")
