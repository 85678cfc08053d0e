"""CountDownLatch for awaiting asynchronous deliveries."""

import asyncio


class CountDownLatch:
    """Opens once count_down() has been called `count` times.

    count_down() is synchronous so it can be called from a transport handler
    or an event listener without yielding to the loop.
    """

    def __init__(self, count: int):
        if count <= 0:
            raise ValueError(f"count must be > 0, got {count}")
        self._initial_count = count
        self._count = count
        self._opened = asyncio.Event()

    @property
    def initial_count(self) -> int:
        return self._initial_count

    @property
    def current_count(self) -> int:
        return self._count

    def count_down(self) -> None:
        if self._count > 0:
            self._count -= 1
        if self._count == 0:
            self._opened.set()

    async def wait(self, timeout: float) -> bool:
        """Wait for the latch to open. Returns False on timeout."""
        try:
            await asyncio.wait_for(self._opened.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            return False
