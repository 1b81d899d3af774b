"""Progress reporting - one-way, ordered notifications to the caller."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from instagram_mcp.logging import get_logger
from instagram_mcp.models.progress import ProgressUpdate

# Receives the wire params of one progress event
ProgressSink = Callable[[dict], Awaitable[None]]


class ProgressReporter:
    """
    Forwards engine progress to a transport sink.

    Delivery is fire-and-forget: a failed emission is logged and dropped,
    never retried or buffered, and never raised back into the engine.
    Emissions are serialized, so events leave in the order they were raised.

    Example:
        reporter = ProgressReporter(send)
        await reporter.report("Opening profile")
        await reporter.report(ProgressUpdate(message="Fetched 3", progress=3))
    """

    def __init__(self, sink: ProgressSink | None = None):
        self._sink = sink
        self._lock = asyncio.Lock()
        self._log = get_logger("progress")
        self.emitted = 0
        self.dropped = 0

    @staticmethod
    def normalize(update: str | ProgressUpdate) -> ProgressUpdate:
        """Plain strings carry no quantity, so progress/total are the 0 sentinel."""
        if isinstance(update, str):
            return ProgressUpdate(message=update, progress=0, total=0)
        return update

    async def report(self, update: str | ProgressUpdate) -> None:
        """Emit one progress event."""
        params = self.normalize(update).to_params()
        async with self._lock:
            if self._sink is None:
                self.dropped += 1
                return
            try:
                await self._sink(params)
                self.emitted += 1
            except Exception as e:
                self.dropped += 1
                self._log.warning("progress_dropped", error=str(e), message=params["message"])

    @asynccontextmanager
    async def keep_alive(
        self,
        interval_seconds: float,
        status: Callable[[], ProgressUpdate],
    ) -> AsyncIterator[None]:
        """
        Emit keep-alive events every ``interval_seconds`` while the block runs.

        Args:
            interval_seconds: Time between keep-alive events
            status: Builds the current status; keepAlive is forced on
        """

        async def beat() -> None:
            while True:
                await asyncio.sleep(interval_seconds)
                current = status().model_copy(update={"keep_alive": True})
                await self.report(current)

        task = asyncio.create_task(beat())
        try:
            yield
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
