"""Instagram service - owns the browser session and coordinates fetches."""

import asyncio

from instagram_mcp.browser.session import BrowserSessionProvider
from instagram_mcp.config import InstagramConfig
from instagram_mcp.core.engine import FetchLimit, PaginationEngine
from instagram_mcp.core.extractor import PostExtractor
from instagram_mcp.core.guard import SingleFlightGuard
from instagram_mcp.core.progress import ProgressReporter
from instagram_mcp.logging import configure_logging, get_logger
from instagram_mcp.models.pagination import PaginationEnvelope


def normalize_username(username: str) -> str:
    """Strip a leading @ and lowercase; Instagram handles are case-insensitive."""
    return username.strip().lstrip("@").lower()


class InstagramService:
    """
    High-level fetch interface over a shared, already logged-in browser.

    Example:
        async with InstagramService() as service:
            envelope = await service.fetch_posts("natgeo", limit=3)
            print(envelope.pagination.next_start_from)
    """

    def __init__(
        self,
        config: InstagramConfig | None = None,
        sessions: BrowserSessionProvider | None = None,
        extractor: PostExtractor | None = None,
    ):
        """
        Initialize service with optional configuration.

        Args:
            config: InstagramConfig instance, uses defaults if None
            sessions: Session provider override (tests, embedding)
            extractor: Post extractor override
        """
        self.config = config or InstagramConfig()
        self.sessions = sessions or BrowserSessionProvider(self.config)
        self.engine = PaginationEngine(
            self.sessions,
            extractor or PostExtractor(self.config),
            self.config,
        )
        self._guard = SingleFlightGuard()
        self._shutdown = asyncio.Event()
        self._closed = False
        self._log = get_logger("service")

    async def __aenter__(self) -> "InstagramService":
        """Async context manager entry - validate configuration."""
        configure_logging(self.config)
        self.config.validate_runtime()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - release the browser session."""
        await self.close()

    @property
    def shutting_down(self) -> bool:
        return self._shutdown.is_set()

    async def fetch_posts(
        self,
        username: str,
        limit: FetchLimit = 3,
        start_from: int | None = 0,
        progress: ProgressReporter | None = None,
    ) -> PaginationEnvelope:
        """
        Fetch one page of posts, or every post when ``limit`` is "all".

        Args:
            username: Instagram handle (with or without @)
            limit: 1-3, or "all"
            start_from: Cursor returned as nextStartFrom by the previous call
            progress: Reporter for progress events

        Returns:
            PaginationEnvelope with posts and continuation metadata

        Raises:
            ConcurrentFetchError: A fetch for this profile is already running
            InstagramError: Session or extraction failure
        """
        username = normalize_username(username)
        async with self._guard.hold(username):
            return await self.engine.fetch(
                username,
                limit,
                start_from,
                reporter=progress,
                cancel_event=self._shutdown,
            )

    def request_shutdown(self) -> None:
        """Ask running fetches to stop at their next round boundary."""
        if not self._shutdown.is_set():
            self._log.info("shutdown_requested")
            self._shutdown.set()

    async def close(self) -> None:
        """Stop fetches and release the browser session."""
        if self._closed:
            return
        self._closed = True
        self.request_shutdown()
        await self.sessions.close()
