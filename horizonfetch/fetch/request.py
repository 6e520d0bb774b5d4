"""AsyncRequest — one in-flight Horizons fetch running on its own task.

State machine::

    ISSUED ──(200 header)──▶ STREAMING ──(final chunk)──▶ SUCCEEDED
       │                        │                     └──▶ SUCCEEDED_NO_DATA
       └──(non-200 / transport error)──────────────────▶ FAILED

The request owns one :class:`ConnectionHandle` from issuance until the
orchestrator observes it terminal. Extraction and the grid-cell write run on
the request's own task; the cell is written by no one else.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass

import httpx
import structlog

from horizonfetch.fetch.command import CONTENT_TYPE, build_multipart_body
from horizonfetch.fetch.extractor import extract
from horizonfetch.models.dataset import CBodyRecord, RequestDescriptor
from horizonfetch.tools.connection_pool import ConnectionHandle

logger = structlog.get_logger().bind(component="fetch.request")

HTTP_OK = 200


class RequestState(str, enum.Enum):
    ISSUED = "issued"
    STREAMING = "streaming"
    SUCCEEDED = "succeeded"
    SUCCEEDED_NO_DATA = "succeeded_no_data"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset(
    {RequestState.SUCCEEDED, RequestState.SUCCEEDED_NO_DATA, RequestState.FAILED}
)


@dataclass
class FetchCounters:
    """Per-run tallies. Every terminal request bumps ``completed`` once.

    Request tasks all run on one event loop, so plain integer increments
    cannot interleave.
    """

    completed: int = 0
    errors: int = 0
    succeeded: int = 0
    no_data: int = 0


class AsyncRequest:
    """A single multipart POST whose response fills one grid cell.

    Args:
        sequence:   Submission number (1-based); defines FIFO order.
        descriptor: The cell and command this request serves.
        handle:     Connection handle owned until the request is reclaimed.
        cell:       The grid record this request alone writes.
        counters:   Run-wide tallies shared by all requests.
        uri:        Horizons file API endpoint.
    """

    def __init__(
        self,
        sequence: int,
        descriptor: RequestDescriptor,
        handle: ConnectionHandle,
        cell: CBodyRecord,
        counters: FetchCounters,
        uri: str,
    ) -> None:
        self.sequence = sequence
        self.descriptor = descriptor
        self.handle = handle
        self.cell = cell
        self.counters = counters
        self.uri = uri
        self.state = RequestState.ISSUED
        self.status_code: int | None = None
        self.error = ""
        self._buffer = bytearray()
        self._task: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        d = self.descriptor
        return f"AsyncRequest(#{self.sequence}, body={d.body_id}, date={d.date}, state={self.state.value})"

    @property
    def done(self) -> bool:
        return self.state.terminal

    @property
    def received(self) -> int:
        """Bytes accumulated so far."""
        return len(self._buffer)

    # ── Task lifecycle ────────────────────────────────────────

    def start(self) -> None:
        """Schedule the fetch on its own task."""
        if self._task is not None:
            raise RuntimeError(f"{self!r} already started")
        self._task = asyncio.create_task(self._run(), name=f"horizons-request-{self.sequence}")

    async def wait(self) -> RequestState:
        """Block until the request reaches a terminal state."""
        if self._task is None:
            raise RuntimeError(f"{self!r} was never started")
        await self._task
        return self.state

    async def _run(self) -> None:
        body = build_multipart_body(self.descriptor.command)
        try:
            async with self.handle.client.stream(
                "POST",
                self.uri,
                content=body,
                headers={"Content-Type": CONTENT_TYPE},
            ) as response:
                if not self.on_header(response.status_code):
                    return
                async for chunk in response.aiter_bytes():
                    self.feed(chunk)
            self.feed(b"", final=True)
        except httpx.HTTPError as exc:
            if self.done:
                logger.debug("late_transport_error", sequence=self.sequence, error=str(exc))
                return
            self.fail(f"{type(exc).__name__}: {exc}")

    # ── State transitions ─────────────────────────────────────

    def on_header(self, status_code: int) -> bool:
        """ISSUED → STREAMING on 200, otherwise → FAILED."""
        self._require(RequestState.ISSUED)
        self.status_code = status_code
        if status_code != HTTP_OK:
            self.fail(f"status code {status_code}")
            return False
        self.state = RequestState.STREAMING
        return True

    def feed(self, chunk: bytes, final: bool = False) -> None:
        """Accumulate a response chunk; the final one triggers extraction."""
        self._require(RequestState.STREAMING)
        if chunk:
            self._buffer.extend(chunk)
        if final:
            self._complete()

    def _complete(self) -> None:
        d = self.descriptor
        text = self._buffer.decode("utf-8", errors="replace")
        if not text:
            logger.warning("no_data", body_id=d.body_id, date=d.date, sequence=self.sequence)
            self._finish(RequestState.SUCCEEDED_NO_DATA)
            return

        vectors = extract(text)
        if vectors is None:
            logger.warning(
                "extraction_failed",
                body_id=d.body_id,
                date=d.date,
                sequence=self.sequence,
                chars=len(text),
            )
            self._finish(RequestState.SUCCEEDED_NO_DATA)
            return

        position, velocity = vectors
        self.cell.store(position, velocity)
        logger.debug("cell_written", body_id=d.body_id, date=d.date, cell=d.sequence)
        self._finish(RequestState.SUCCEEDED)

    def fail(self, reason: str) -> None:
        """Move to FAILED from any non-terminal state."""
        self.error = reason
        logger.error(
            "request_failed",
            body_id=self.descriptor.body_id,
            date=self.descriptor.date,
            sequence=self.sequence,
            error=reason,
        )
        self._finish(RequestState.FAILED)

    def _finish(self, state: RequestState) -> None:
        if self.state.terminal:
            raise RuntimeError(f"{self!r} is terminal, cannot move to {state.value}")
        self.state = state
        self.counters.completed += 1
        if state is RequestState.FAILED:
            self.counters.errors += 1
        elif state is RequestState.SUCCEEDED:
            self.counters.succeeded += 1
        else:
            self.counters.no_data += 1

    def _require(self, expected: RequestState) -> None:
        if self.state is not expected:
            raise RuntimeError(f"{self!r} expected state {expected.value}")
