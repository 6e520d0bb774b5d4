"""ConnectionHandle pool — the fixed set of network sessions bounding concurrency.

Each handle wraps its own single-connection ``httpx.AsyncClient``. A handle
is owned either by the free set or by exactly one in-flight request; the
orchestrator moves it between the two. The pool itself never waits: when the
free set is empty, :meth:`HandlePool.acquire` returns None and the caller
reclaims the handle of its oldest in-flight request instead.

All bookkeeping happens on the orchestrator's coroutine, so the free set
needs no lock.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

import httpx
import structlog

logger = structlog.get_logger().bind(component="connection_pool")

ClientFactory = Callable[[], httpx.AsyncClient]


def default_client_factory(timeout: float) -> ClientFactory:
    """Factory for single-connection clients with the given transport timeout."""

    def _factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=1),
        )

    return _factory


@dataclass(eq=False)
class ConnectionHandle:
    """One reusable network session slot."""

    index: int
    client: httpx.AsyncClient

    async def aclose(self) -> None:
        if not self.client.is_closed:
            await self.client.aclose()


class HandlePool:
    """Pre-created, fixed-size set of :class:`ConnectionHandle` objects.

    Args:
        size:           Number of handles to create (the concurrency cap).
        client_factory: Builds the ``httpx.AsyncClient`` behind each handle.
    """

    def __init__(self, size: int, client_factory: ClientFactory) -> None:
        if size < 1:
            raise ValueError(f"pool size must be >= 1, got {size}")
        self.size = size
        self._all = [ConnectionHandle(index=i, client=client_factory()) for i in range(size)]
        self._free: deque[ConnectionHandle] = deque(self._all)
        self.in_use = 0
        self.peak_in_use = 0

    @property
    def free_count(self) -> int:
        return len(self._free)

    def acquire(self) -> ConnectionHandle | None:
        """Take a free handle, or None when every handle is owned by a request."""
        if not self._free:
            return None
        handle = self._free.popleft()
        self._mark_owned()
        return handle

    def _mark_owned(self) -> None:
        """Count one more handle as owned by a request."""
        self.in_use += 1
        self.peak_in_use = max(self.peak_in_use, self.in_use)
        if self.in_use > self.size:
            raise RuntimeError(f"handle accounting broken: {self.in_use} in use, pool size {self.size}")

    def release(self, handle: ConnectionHandle) -> None:
        """Return *handle* to the free set."""
        if handle in self._free:
            raise ValueError(f"handle {handle.index} released twice")
        self.in_use -= 1
        self._free.append(handle)

    async def aclose(self) -> None:
        """Close every handle's client."""
        for handle in self._all:
            await handle.aclose()
        logger.debug("pool_closed", size=self.size, peak_in_use=self.peak_in_use)
