"""Playwright-based post extractor for Instagram profiles."""

import asyncio

from playwright.async_api import Page, Error as PlaywrightError

from instagram_mcp.config import InstagramConfig
from instagram_mcp.core.parser import (
    SELECTORS,
    PageState,
    detect_page_state,
    parse_grid,
    parse_post_page,
)
from instagram_mcp.core.transformer import POST_URL, transform_post
from instagram_mcp.exceptions import (
    FetchError,
    PageBlockedError,
    ProfileNotFoundError,
    SessionExpiredError,
)
from instagram_mcp.logging import get_logger
from instagram_mcp.models.pagination import BatchResult

PROFILE_URL = "https://www.instagram.com/{username}/"

SCROLL_SCRIPT = "window.scrollBy(0, document.body.scrollHeight)"


class PostExtractor:
    """
    Reads posts off the live profile page.

    Retry policy for flaky navigation lives here: plain FetchErrors are
    retried with exponential backoff, while blocks, missing profiles and
    lost logins fail immediately.
    """

    def __init__(self, config: InstagramConfig | None = None):
        self.config = config or InstagramConfig()
        self._log = get_logger("extractor")

    def open(self, page: Page, username: str) -> "ProfileTimeline":
        """Bind a page to a profile for the duration of one fetch call."""
        return ProfileTimeline(self, page, username)

    async def goto(self, page: Page, url: str) -> str:
        """
        Navigate and return the rendered HTML, retrying transient failures.

        Raises:
            FetchError: Navigation kept failing
            PageBlockedError: Blocked, challenged or rate limited
            ProfileNotFoundError: Page does not exist
            SessionExpiredError: Redirected to the login page
        """
        attempts = 1 + (self.config.max_retries if self.config.retry_enabled else 0)

        for attempt in range(attempts):
            try:
                return await self._goto_once(page, url)
            except FetchError as e:
                # Only plain fetch failures are worth another try
                if type(e) is not FetchError or attempt == attempts - 1:
                    raise
                delay = self.config.retry_backoff_base ** attempt
                self._log.warning("navigation_retry", url=url, attempt=attempt + 1, delay_s=delay, error=str(e))
                await asyncio.sleep(delay)

        raise FetchError(f"Could not load {url}")

    async def _goto_once(self, page: Page, url: str) -> str:
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.config.browser_timeout_ms,
            )
        except PlaywrightError as e:
            raise FetchError(f"Browser error: {e}") from e

        if response is not None:
            status = response.status
            if status == 404:
                raise ProfileNotFoundError(f"Page not found: {url}")
            if status in (403, 429):
                raise PageBlockedError(f"Blocked or rate limited (HTTP {status})")
            if status >= 400:
                raise FetchError(f"HTTP {status} for {url}")

        # Content renders client-side after DOMContentLoaded
        try:
            await page.wait_for_selector(
                f'{SELECTORS["post_link"]}, {SELECTORS["article"]}, main',
                timeout=self.config.browser_timeout_ms,
            )
        except PlaywrightError:
            # Page may be empty or an error page; classified below
            pass

        try:
            html = await page.content()
        except PlaywrightError as e:
            raise FetchError(f"Browser error: {e}") from e

        state = detect_page_state(html, page.url)
        if state == PageState.LOGIN_WALL:
            raise SessionExpiredError("Instagram login expired; log in with Chrome again")
        if state == PageState.NOT_FOUND:
            raise ProfileNotFoundError(f"Page not available: {url}")
        if state == PageState.CHALLENGE:
            raise PageBlockedError("Instagram is asking for a security check")

        return html


class ProfileTimeline:
    """
    Post timeline of one profile, read through one borrowed page.

    Instagram virtualizes its grid, so rows scrolled out of view leave the
    DOM. Shortcodes are accumulated here as the page scrolls, which keeps
    offsets stable across rounds of the same call.
    """

    def __init__(self, extractor: PostExtractor, page: Page, username: str):
        self.extractor = extractor
        self.page = page
        self.username = username
        self.shortcodes: list[str] = []
        self.exhausted = False
        self._loaded = False
        self._log = get_logger("timeline").bind(username=username)

    @property
    def config(self) -> InstagramConfig:
        return self.extractor.config

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        html = await self.extractor.goto(self.page, PROFILE_URL.format(username=self.username))
        self._absorb(parse_grid(html))
        self._loaded = True

    def _absorb(self, shortcodes: list[str]) -> int:
        added = 0
        for shortcode in shortcodes:
            if shortcode not in self.shortcodes:
                self.shortcodes.append(shortcode)
                added += 1
        return added

    async def _collect(self, needed: int) -> None:
        """Scroll until ``needed`` shortcodes are known or the grid stops growing."""
        idle = 0
        while len(self.shortcodes) < needed and not self.exhausted:
            try:
                await self.page.evaluate(SCROLL_SCRIPT)
                await self.page.wait_for_timeout(self.config.scroll_pause_ms)
                html = await self.page.content()
            except PlaywrightError as e:
                raise FetchError(f"Browser error while scrolling: {e}") from e

            if self._absorb(parse_grid(html)):
                idle = 0
            else:
                idle += 1
                if idle >= self.config.max_scroll_attempts:
                    self.exhausted = True
                    self._log.info("grid_exhausted", known=len(self.shortcodes))

    async def has_post_at(self, index: int) -> bool:
        """Check whether the timeline reaches ``index`` without opening the post."""
        await self._ensure_loaded()
        await self._collect(index + 1)
        return len(self.shortcodes) > index

    async def fetch(self, start: int, count: int) -> BatchResult:
        """
        Extract up to ``count`` posts starting at timeline offset ``start``.

        Args:
            start: Offset of the first post
            count: Maximum number of posts

        Returns:
            BatchResult, shorter than ``count`` when the profile runs out
        """
        await self._ensure_loaded()
        await self._collect(start + count)

        selected = self.shortcodes[start:start + count]
        if not selected:
            return BatchResult(records=[])

        try:
            detail = await self.page.context.new_page()
        except PlaywrightError as e:
            raise FetchError(f"Could not open a post tab: {e}") from e

        records = []
        try:
            for offset, shortcode in enumerate(selected):
                html = await self.extractor.goto(detail, POST_URL.format(shortcode=shortcode))
                records.append(
                    transform_post(parse_post_page(html), shortcode, start + offset, self.username)
                )
        finally:
            try:
                await detail.close()
            except PlaywrightError as e:
                self._log.debug("post_tab_close_failed", error=str(e))

        self._log.debug("batch_extracted", start=start, count=len(records))
        return BatchResult(records=records)
