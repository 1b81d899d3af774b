"""Single-flight guard keyed on profile."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from instagram_mcp.exceptions import ConcurrentFetchError


class SingleFlightGuard:
    """Rejects a second concurrent fetch for a profile that is already in flight."""

    def __init__(self):
        self._active: set[str] = set()
        self._lock = asyncio.Lock()

    def is_active(self, key: str) -> bool:
        return key in self._active

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """
        Hold the slot for ``key`` for the duration of the block.

        Raises:
            ConcurrentFetchError: If ``key`` is already held
        """
        async with self._lock:
            if key in self._active:
                raise ConcurrentFetchError(f"A fetch for @{key} is already in progress")
            self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)
