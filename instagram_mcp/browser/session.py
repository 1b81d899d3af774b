"""Playwright session provider that reuses an already logged-in browser."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Error as PlaywrightError,
)

from instagram_mcp.config import InstagramConfig
from instagram_mcp.exceptions import SessionUnavailableError
from instagram_mcp.logging import get_logger

INSTAGRAM_URL = "https://www.instagram.com"

# Cookie Instagram sets only for an authenticated session
LOGIN_COOKIE = "sessionid"


class BrowserSessionProvider:
    """
    Supplies pages from an authenticated browser context.

    Attaches to a running Chrome over the DevTools protocol, or launches a
    persistent profile when ``user_data_dir`` is configured. The context is
    owned here; callers borrow pages and must not close the context.
    """

    def __init__(self, config: InstagramConfig | None = None):
        self.config = config or InstagramConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._lock = asyncio.Lock()
        self._log = get_logger("session")

    @property
    def is_attached(self) -> bool:
        if self._context is None:
            return False
        return self._browser is None or self._browser.is_connected()

    async def _attach(self) -> BrowserContext:
        """Connect to the browser and pick the context holding the login."""
        if self._playwright is None:
            self._playwright = await async_playwright().start()

        try:
            if self.config.user_data_dir:
                context = await self._playwright.chromium.launch_persistent_context(
                    self.config.user_data_dir,
                    headless=self.config.headless,
                    viewport={"width": 1280, "height": 900},
                )
                self._browser = context.browser
                self._log.info("session_launched", user_data_dir=self.config.user_data_dir)
            else:
                self._browser = await self._playwright.chromium.connect_over_cdp(
                    self.config.cdp_url,
                    timeout=self.config.browser_timeout_ms,
                )
                if not self._browser.contexts:
                    raise SessionUnavailableError(
                        f"Browser at {self.config.cdp_url} has no open profile"
                    )
                context = self._browser.contexts[0]
                self._log.info("session_attached", cdp_url=self.config.cdp_url)
        except PlaywrightError as e:
            raise SessionUnavailableError(f"Could not reach browser: {e}") from e

        return context

    async def _ensure_logged_in(self, context: BrowserContext) -> None:
        try:
            cookies = await context.cookies(INSTAGRAM_URL)
        except PlaywrightError as e:
            raise SessionUnavailableError(f"Could not read browser cookies: {e}") from e
        if not any(c.get("name") == LOGIN_COOKIE and c.get("value") for c in cookies):
            raise SessionUnavailableError(
                "No Instagram login found in browser session. Log in with Chrome first."
            )

    async def get_context(self) -> BrowserContext:
        """Return the authenticated context, attaching on first use or after a disconnect."""
        async with self._lock:
            if not self.is_attached:
                if self._context is not None:
                    self._log.warning("session_lost")
                    self._context = None
                    self._browser = None
                self._context = await self._attach()
            await self._ensure_logged_in(self._context)
            return self._context

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Borrow a fresh page; only the page is closed afterwards."""
        context = await self.get_context()
        try:
            page = await context.new_page()
        except PlaywrightError as e:
            raise SessionUnavailableError(f"Could not open a page: {e}") from e
        page.set_default_timeout(self.config.browser_timeout_ms)
        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                self._log.debug("page_close_failed", error=str(e))

    async def close(self) -> None:
        """Release the browser connection; an attached Chrome keeps running."""
        async with self._lock:
            try:
                if self.config.user_data_dir and self._context is not None:
                    await self._context.close()
                elif self._browser is not None:
                    await self._browser.close()
            except PlaywrightError as e:
                self._log.warning("session_close_failed", error=str(e))
            finally:
                self._context = None
                self._browser = None
                if self._playwright is not None:
                    await self._playwright.stop()
                    self._playwright = None
            self._log.info("session_closed")
