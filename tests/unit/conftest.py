"""Unit-test conftest — FakeHorizons server, sample responses, shared fixtures.

All fixtures here are available to every test under tests/unit/ without import.
No test in tests/unit/ touches the network: every handle's client is wired to
an ``httpx.MockTransport`` backed by :class:`FakeHorizons`.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable

import httpx
import pytest

from horizonfetch.fetch.request import FetchCounters
from horizonfetch.models.dataset import CBodyRecord, RequestDescriptor
from horizonfetch.tools.connection_pool import ConnectionHandle


# ─────────────────────────────────────────────────────────────────────────────
# Sample Horizons output
# ─────────────────────────────────────────────────────────────────────────────

def horizons_text(
    position: tuple[float, float, float] = (-2.105262111032039e7, -6.640663808353403e7, -3.492446023382272e6),
    velocity: tuple[float, float, float] = (3.665298706393840e1, -1.228983810111077e1, -4.368172898008150),
) -> str:
    """A trimmed Horizons vector-table response carrying the given vectors."""
    x, y, z = position
    vx, vy, vz = velocity
    return (
        "API VERSION: 1.2\n"
        "API SOURCE: NASA/JPL Horizons API\n\n"
        "*******************************************************************************\n"
        "Ephemeris / API_USER Mon Jan  1 00:00:00 2024 Pasadena, USA      / Horizons\n"
        "*******************************************************************************\n"
        "$$SOE\n"
        "2460310.500000000 = A.D. 2024-Jan-01 00:00:00.0000 TDB \n"
        f" X ={x:.15E} Y ={y:.15E} Z ={z:.15E}\n"
        f" VX={vx:.15E} VY={vy:.15E} VZ={vz:.15E}\n"
        " LT= 2.317406489210733E+02 RG= 6.947451735513574E+07 RR=-5.327474113546023E-01\n"
        "$$EOE\n"
    )


SAMPLE_RESPONSE = horizons_text()

_COMMAND_RE = re.compile(r"COMMAND='([^']*)'")
_DATE_RE = re.compile(r"START_TIME='(\S+) ")


# ─────────────────────────────────────────────────────────────────────────────
# FakeHorizons — httpx.MockTransport handler
# ─────────────────────────────────────────────────────────────────────────────

class FakeHorizons:
    """Configurable fake of the Horizons file API.

    Requests are keyed ``"<object_id>@<date>"`` (e.g. ``"199@2020-01-01"``),
    read back from the multipart command text.

    Args:
        delays:        Per-key seconds to sleep before answering.
        statuses:      Per-key HTTP status (default 200).
        bodies:        Per-key response text (default: vectors derived from key).
        chunks:        Per-key list of byte chunks streamed as the body.
        raises:        Keys for which the transport raises ``httpx.ConnectError``.
        default_delay: Sleep for keys not in *delays*.
    """

    def __init__(
        self,
        *,
        delays: dict[str, float] | None = None,
        statuses: dict[str, int] | None = None,
        bodies: dict[str, str] | None = None,
        chunks: dict[str, list[bytes]] | None = None,
        raises: set[str] | None = None,
        default_delay: float = 0.0,
    ) -> None:
        self.delays = delays or {}
        self.statuses = statuses or {}
        self.bodies = bodies or {}
        self.chunks = chunks or {}
        self.raises = raises or set()
        self.default_delay = default_delay
        # Observations for assertions
        self.events: list[tuple[str, str]] = []
        self.requests: list[httpx.Request] = []
        self.active = 0
        self.peak_active = 0

    @staticmethod
    def key_of(request: httpx.Request) -> str:
        text = request.content.decode("utf-8")
        return f"{_COMMAND_RE.search(text).group(1)}@{_DATE_RE.search(text).group(1)}"

    @staticmethod
    def vectors_for(key: str) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Deterministic per-key vectors so tests can tell cells apart."""
        object_id, date = key.split("@")
        base = float(int(object_id)) * 1.0e6 + float(int(date[:4]))
        return (base, -base, base / 2.0), (1.5, -2.5, 0.125)

    def body_for(self, key: str) -> str:
        if key in self.bodies:
            return self.bodies[key]
        position, velocity = self.vectors_for(key)
        return horizons_text(position, velocity)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        key = self.key_of(request)
        self.requests.append(request)
        self.events.append(("start", key))
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(key, self.default_delay))
            if key in self.raises:
                raise httpx.ConnectError("connection refused", request=request)
        finally:
            self.active -= 1
            self.events.append(("end", key))

        status = self.statuses.get(key, 200)
        if key in self.chunks:
            return httpx.Response(status, content=_stream(self.chunks[key]))
        return httpx.Response(status, text=self.body_for(key) if status == 200 else "Bad Request")

    def client_factory(self) -> Callable[[], httpx.AsyncClient]:
        return lambda: httpx.AsyncClient(transport=httpx.MockTransport(self))


async def _stream(parts: list[bytes]):
    for part in parts:
        await asyncio.sleep(0)
        yield part


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def make_descriptor(
    body_id: int = 199,
    date: str = "2020-01-01",
    year_idx: int = 0,
    body_idx: int = 0,
) -> RequestDescriptor:
    object_id = f"{body_id:03d}"
    return RequestDescriptor(
        year_idx=year_idx,
        body_idx=body_idx,
        body_id=body_id,
        object_id=object_id,
        date=date,
        command=f"!$$SOF\nCOMMAND='{object_id}'\nSTART_TIME='{date} 00:00:00'\n",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def fake_horizons():
    """A FakeHorizons answering every request instantly with valid vectors."""
    return FakeHorizons()


@pytest.fixture
def counters():
    return FetchCounters()


@pytest.fixture
def cell():
    """A fresh sentinel grid record."""
    return CBodyRecord(body_id=199)


@pytest.fixture
def handle(fake_horizons):
    """A ConnectionHandle whose client talks to ``fake_horizons``."""
    return ConnectionHandle(index=0, client=fake_horizons.client_factory()())
