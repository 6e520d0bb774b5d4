"""FetchOrchestrator — issues one request per grid cell under a connection cap.

Issuance is row-major (year outer, body inner). Handles come from the free
pool while it lasts; once it is empty the orchestrator waits for the
*oldest* still-running request (FIFO by submission), reclaims its handle and
hands it to the next cell. After the last cell, every remaining request is
awaited in submission order.

Only this coroutine waits on requests, acquires or releases handles. Request
tasks touch nothing but their own grid cell and the shared counters.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

import structlog

from horizonfetch.config import settings
from horizonfetch.errors import ConfigurationError
from horizonfetch.fetch.command import (
    HORIZONS_COMMAND_TEMPLATE,
    build_command,
    object_id_text,
    resolve_body_id,
)
from horizonfetch.fetch.request import AsyncRequest, FetchCounters
from horizonfetch.models.dataset import DatasetGrid, RequestDescriptor
from horizonfetch.tools.connection_pool import (
    ClientFactory,
    ConnectionHandle,
    HandlePool,
    default_client_factory,
)
from horizonfetch.utils.clock import date_str

logger = structlog.get_logger().bind(component="fetch.orchestrator")


def grid_ranges(year_min: int, year_max: int, body_count: int) -> tuple[range, range]:
    """Validate user bounds and return ``(years, body_indices)``.

    Body indices are 1-based (1 = Mercury).

    Raises:
        ConfigurationError: ``year_max < year_min``, ``year_min <= 0`` or
            ``body_count < 1``.
    """
    if year_min <= 0 or year_max < year_min or body_count < 1:
        raise ConfigurationError(
            f"Illegal ranges: bodies [1..{body_count}] for years [{year_min}..{year_max}]"
        )
    return range(year_min, year_max + 1), range(1, body_count + 1)


@dataclass
class FetchOutcome:
    """Everything a run produced. Counters are final once this exists."""

    grid: DatasetGrid
    completed: int
    errors: int
    succeeded: int = 0
    no_data: int = 0
    request_count: int = 0
    peak_in_flight: int = 0
    reclaim_order: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.errors == 0


class FetchOrchestrator:
    """Bounded-concurrency fetcher for a (year × body) grid.

    Args:
        max_connections: Concurrency cap (default from settings).
        uri:             Horizons file API endpoint (default from settings).
        client_factory:  Builds each handle's ``httpx.AsyncClient``. Tests pass
                         a factory wired to ``httpx.MockTransport``.
        template:        Horizons command template.
    """

    def __init__(
        self,
        max_connections: int | None = None,
        uri: str | None = None,
        client_factory: ClientFactory | None = None,
        template: str = HORIZONS_COMMAND_TEMPLATE,
    ) -> None:
        self.max_connections = (
            max_connections if max_connections is not None else settings.max_connections
        )
        if self.max_connections < 1:
            raise ConfigurationError(f"max_connections must be >= 1, got {self.max_connections}")
        self.uri = uri or settings.horizons_uri
        self.client_factory = client_factory or default_client_factory(settings.request_timeout)
        self.template = template

    def plan(
        self,
        years: range,
        body_indices: range,
        use_barycenter: bool = False,
    ) -> tuple[DatasetGrid, list[RequestDescriptor]]:
        """Allocate the grid and build every descriptor, in issuance order.

        Runs before any network activity, so a bad template fails the whole
        run up front.
        """
        if not years or not body_indices:
            raise ConfigurationError("Year and body ranges must both be non-empty")

        body_ids = [resolve_body_id(idx, use_barycenter) for idx in body_indices]
        grid = DatasetGrid.allocate(years, body_ids)

        descriptors: list[RequestDescriptor] = []
        for year_idx, year in enumerate(years):
            date = date_str(year)
            for body_idx, cbody_id in enumerate(body_ids):
                object_id = object_id_text(cbody_id, use_barycenter)
                descriptors.append(
                    RequestDescriptor(
                        year_idx=year_idx,
                        body_idx=body_idx,
                        body_id=cbody_id,
                        object_id=object_id,
                        date=date,
                        command=build_command(object_id, date, self.template),
                    )
                )
        return grid, descriptors

    async def run(
        self,
        years: range,
        body_indices: range,
        use_barycenter: bool = False,
    ) -> FetchOutcome:
        """Fetch every cell and return the filled grid plus final counters."""
        grid, descriptors = self.plan(years, body_indices, use_barycenter)
        request_count = len(descriptors)
        logger.info(
            "run_started",
            requests=request_count,
            years=f"{years[0]}..{years[-1]}",
            bodies=f"{body_indices[0]}..{body_indices[-1]}",
            barycenter=use_barycenter,
            max_connections=self.max_connections,
        )

        pool = HandlePool(min(self.max_connections, request_count), self.client_factory)
        counters = FetchCounters()
        in_flight: deque[AsyncRequest] = deque()
        reclaim_order: list[int] = []

        try:
            for sequence, descriptor in enumerate(descriptors, start=1):
                handle = await self._obtain_handle(pool, in_flight, reclaim_order)
                request = AsyncRequest(
                    sequence=sequence,
                    descriptor=descriptor,
                    handle=handle,
                    cell=grid.cell(descriptor.year_idx, descriptor.body_idx),
                    counters=counters,
                    uri=self.uri,
                )
                logger.info(
                    "request_issued",
                    sequence=sequence,
                    body_id=descriptor.body_id,
                    date=descriptor.date,
                    in_flight=len(in_flight),
                    free_handles=pool.free_count,
                )
                request.start()
                in_flight.append(request)

            while in_flight:
                await self._reclaim_oldest(pool, in_flight, reclaim_order)
        finally:
            await pool.aclose()

        logger.info(
            "run_finished",
            completed=counters.completed,
            errors=counters.errors,
            no_data=counters.no_data,
            peak_in_flight=pool.peak_in_use,
        )
        return FetchOutcome(
            grid=grid,
            completed=counters.completed,
            errors=counters.errors,
            succeeded=counters.succeeded,
            no_data=counters.no_data,
            request_count=request_count,
            peak_in_flight=pool.peak_in_use,
            reclaim_order=reclaim_order,
        )

    async def _obtain_handle(
        self,
        pool: HandlePool,
        in_flight: deque[AsyncRequest],
        reclaim_order: list[int],
    ) -> ConnectionHandle:
        handle = pool.acquire()
        if handle is not None:
            return handle
        await self._reclaim_oldest(pool, in_flight, reclaim_order)
        handle = pool.acquire()
        if handle is None:
            raise RuntimeError("no handle free after reclaiming the oldest request")
        return handle

    async def _reclaim_oldest(
        self,
        pool: HandlePool,
        in_flight: deque[AsyncRequest],
        reclaim_order: list[int],
    ) -> None:
        """Wait for the earliest-submitted request and free its handle."""
        oldest = in_flight.popleft()
        state = await oldest.wait()
        pool.release(oldest.handle)
        reclaim_order.append(oldest.sequence)
        logger.debug("handle_reclaimed", sequence=oldest.sequence, state=state.value, handle=oldest.handle.index)
