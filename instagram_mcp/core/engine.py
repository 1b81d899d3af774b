"""Pagination engine - drives extraction rounds for one fetch call."""

import asyncio
from typing import Literal

from instagram_mcp.browser.session import BrowserSessionProvider
from instagram_mcp.config import MAX_BATCH_SIZE, InstagramConfig
from instagram_mcp.core.extractor import PostExtractor, ProfileTimeline
from instagram_mcp.core.progress import ProgressReporter
from instagram_mcp.exceptions import FetchCancelledError
from instagram_mcp.logging import get_logger
from instagram_mcp.models.pagination import PaginationEnvelope
from instagram_mcp.models.post import PostRecord
from instagram_mcp.models.progress import ProgressUpdate

FETCH_ALL = "all"

FetchLimit = int | Literal["all"]


class PaginationEngine:
    """
    Turns a (username, limit, cursor) request into extraction rounds.

    The engine keeps no state between calls: the cursor is owned by the
    caller, and the browser context is borrowed from the session provider
    for one call at a time. Rounds run strictly one after another.

    Example:
        engine = PaginationEngine(sessions, PostExtractor(config), config)
        envelope = await engine.fetch("natgeo", 3, start_from=6)
        envelope.pagination.next_start_from  # 9
    """

    def __init__(
        self,
        sessions: BrowserSessionProvider,
        extractor: PostExtractor,
        config: InstagramConfig | None = None,
    ):
        self.config = config or InstagramConfig()
        self._sessions = sessions
        self._extractor = extractor
        self._log = get_logger("engine")

    @property
    def batch_size(self) -> int:
        return MAX_BATCH_SIZE

    async def fetch(
        self,
        username: str,
        limit: FetchLimit,
        start_from: int | None = 0,
        reporter: ProgressReporter | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PaginationEnvelope:
        """
        Fetch posts and derive pagination metadata.

        Args:
            username: Profile handle, already normalized
            limit: 1..3 for one round, or "all" to read to the end
            start_from: Cursor to resume from (posts already delivered)
            reporter: Progress sink, events are dropped if None
            cancel_event: Checked between rounds; set means stop

        Returns:
            PaginationEnvelope with posts in timeline order

        Raises:
            InstagramError: Any session or extraction failure, unretried
        """
        start_from = start_from or 0
        reporter = reporter or ProgressReporter()
        log = self._log.bind(username=username, limit=limit, start_from=start_from)
        log.info("fetch_start")

        self._check_cancelled(cancel_event, username)

        async with self._sessions.page() as page:
            timeline = self._extractor.open(page, username)
            if limit == FETCH_ALL:
                posts, has_more = await self._fetch_all(timeline, start_from, reporter, cancel_event)
            else:
                posts, has_more = await self._fetch_bounded(timeline, limit, start_from, reporter)

        envelope = PaginationEnvelope.build(posts, start_from, has_more)
        log.info(
            "fetch_complete",
            returned=len(posts),
            next_start_from=envelope.pagination.next_start_from,
            has_more=has_more,
        )
        return envelope

    async def _round(self, timeline: ProfileTimeline, cursor: int, size: int) -> list[PostRecord]:
        """One extraction round, never longer than ``size``."""
        batch = await timeline.fetch(cursor, size)
        records = batch.records
        if len(records) > size:
            self._log.warning("batch_truncated", requested=size, returned=len(records))
            records = records[:size]
        return records

    async def _fetch_bounded(
        self,
        timeline: ProfileTimeline,
        limit: int,
        start_from: int,
        reporter: ProgressReporter,
    ) -> tuple[list[PostRecord], bool]:
        await reporter.report(
            f"Fetching up to {limit} posts from @{timeline.username} starting at {start_from}"
        )

        records = await self._round(timeline, start_from, limit)

        # A full batch suggests more posts; wrong when exactly 0 remain
        has_more = len(records) == MAX_BATCH_SIZE
        if has_more and self.config.probe_has_more:
            has_more = await timeline.has_post_at(start_from + len(records))

        await reporter.report(ProgressUpdate(
            message=f"Fetched {len(records)} posts from @{timeline.username}",
            progress=len(records),
            total=limit,
        ))
        return records, has_more

    async def _fetch_all(
        self,
        timeline: ProfileTimeline,
        start_from: int,
        reporter: ProgressReporter,
        cancel_event: asyncio.Event | None,
    ) -> tuple[list[PostRecord], bool]:
        """
        Read sequential rounds until the profile runs out.

        A failure part-way through discards what was gathered: the
        response has no way to say "partial", so the call fails whole.
        """
        fetched: list[PostRecord] = []
        cursor = start_from
        rounds = 0
        capped = False
        cap = self.config.max_all_posts
        log = self._log.bind(username=timeline.username)

        def status() -> ProgressUpdate:
            return ProgressUpdate(
                message=f"Still fetching posts from @{timeline.username} ({len(fetched)} so far)",
                progress=len(fetched),
                total=0,
            )

        try:
            async with reporter.keep_alive(self.config.keepalive_interval_seconds, status):
                while True:
                    self._check_cancelled(cancel_event, timeline.username)
                    rounds += 1

                    size = self.batch_size
                    if cap:
                        size = min(size, cap - len(fetched))

                    await reporter.report(ProgressUpdate(
                        message=f"Fetching batch {rounds} (posts {cursor + 1}-{cursor + size})",
                        progress=len(fetched),
                        total=0,
                    ))

                    records = await self._round(timeline, cursor, size)
                    fetched.extend(records)
                    cursor += len(records)
                    log.info("round_complete", round=rounds, returned=len(records), cursor=cursor)

                    if len(records) < size:
                        break
                    if cap and len(fetched) >= cap:
                        capped = True
                        log.info("fetch_all_capped", cap=cap)
                        break

                    if self.config.round_delay_ms > 0:
                        await asyncio.sleep(self.config.round_delay_ms / 1000)
        except Exception as e:
            if fetched:
                log.warning("partial_results_discarded", discarded=len(fetched), rounds=rounds, error=str(e))
            raise

        await reporter.report(ProgressUpdate(
            message=f"Fetched {len(fetched)} posts from @{timeline.username} in {rounds} batches",
            progress=len(fetched),
            total=len(fetched),
        ))
        return fetched, capped

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None, username: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelledError(f"Fetch for @{username} cancelled by shutdown")
