"""Fakes shared by the unit tests - no browser, no internet."""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

from instagram_mcp.models.pagination import BatchResult
from instagram_mcp.models.post import PostRecord


def make_post(position: int, username: str = "alice") -> PostRecord:
    """Build a post whose shortcode encodes its timeline position."""
    shortcode = f"SC{position}"
    return PostRecord(
        shortcode=shortcode,
        post_url=f"https://www.instagram.com/p/{shortcode}/",
        position=position,
        owner_username=username,
        caption=f"post {position}",
    )


class FakeSessions:
    """Session provider that hands out mock pages."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.pages_opened = 0
        self.pages_closed = 0
        self.closed = False

    @asynccontextmanager
    async def page(self):
        if self.error:
            raise self.error
        self.pages_opened += 1
        try:
            yield MagicMock(name="page")
        finally:
            self.pages_closed += 1

    async def close(self):
        self.closed = True


class FakeTimeline:
    """
    Timeline that serves scripted rounds.

    Each entry of ``rounds`` is a record count or an exception to raise.
    Rounds past the script return nothing.
    """

    def __init__(self, username: str, rounds, has_post: bool = True, delay: float = 0.0, gate=None):
        self.username = username
        self.rounds = list(rounds)
        self.has_post = has_post
        self.delay = delay
        self.gate = gate
        self.entered = asyncio.Event()
        self.calls: list[tuple[int, int]] = []
        self.probes: list[int] = []

    async def fetch(self, start: int, count: int) -> BatchResult:
        self.calls.append((start, count))
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self.rounds.pop(0) if self.rounds else 0
        if isinstance(item, Exception):
            raise item
        return BatchResult(records=[make_post(start + i, self.username) for i in range(item)])

    async def has_post_at(self, index: int) -> bool:
        self.probes.append(index)
        return self.has_post


class FakeExtractor:
    """Extractor whose timelines follow one shared script."""

    def __init__(self, rounds=(), **timeline_kwargs):
        self.rounds = list(rounds)
        self.timeline_kwargs = timeline_kwargs
        self.timelines: list[FakeTimeline] = []

    def open(self, page, username: str) -> FakeTimeline:
        timeline = FakeTimeline(username, self.rounds, **self.timeline_kwargs)
        self.timelines.append(timeline)
        return timeline

    @property
    def timeline(self) -> FakeTimeline:
        return self.timelines[-1]


class RecordingSink:
    """Progress sink that keeps every emitted params dict."""

    def __init__(self):
        self.events: list[dict] = []

    async def __call__(self, params: dict) -> None:
        self.events.append(params)

    @property
    def messages(self) -> list[str]:
        return [e["message"] for e in self.events]
