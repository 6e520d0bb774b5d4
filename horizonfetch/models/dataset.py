"""DatasetGrid, TimeSlice, CBodyRecord and RequestDescriptor.

The grid is allocated in full before the first request is issued. Every
``(year_idx, body_idx)`` cell is owned by exactly one request, which is the
only writer of that cell's vectors, so the grid carries no lock.

Cells start at the sentinel state: zero vectors and ``valid=False``. Only a
successful extraction flips ``valid``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from horizonfetch.utils.clock import date_str, epoch_seconds, timestamp_str

Vector3 = tuple[float, float, float]

ZERO_VECTOR: Vector3 = (0.0, 0.0, 0.0)


class CBodyRecord(BaseModel):
    """State vector of one celestial body at one time slice.

    Position is on the ecliptic plane in km, velocity in km/s.
    """

    body_id: int = Field(description="Horizons id, e.g. 199 for Mercury or 1 for its barycenter")
    position: Vector3 = Field(default=ZERO_VECTOR, description="Ecliptic position [km]")
    velocity: Vector3 = Field(default=ZERO_VECTOR, description="Ecliptic velocity [km/s]")
    valid: bool = Field(default=False, description="True once a response filled the vectors")

    def store(self, position: Vector3, velocity: Vector3) -> None:
        """Write extracted vectors into this cell and mark it valid."""
        self.position = position
        self.velocity = velocity
        self.valid = True


class TimeSlice(BaseModel):
    """All body records for one timestamp (one grid row)."""

    timestamp: str = Field(description="UTC timestamp, format YYYY-MM-DD HH:MM:SS")
    epoch_seconds: int = Field(description="Seconds since 1970-01-01T00:00:00Z")
    records: list[CBodyRecord] = Field(default_factory=list)


class DatasetGrid(BaseModel):
    """Fixed-shape ``year_count × body_count`` result container."""

    year_count: int
    body_count: int
    slices: list[TimeSlice]

    @classmethod
    def allocate(cls, years: range, body_ids: list[int]) -> "DatasetGrid":
        """Pre-size the grid: one slice per year, one sentinel record per body."""
        slices: list[TimeSlice] = []
        for year in years:
            stamp = timestamp_str(date_str(year))
            slices.append(
                TimeSlice(
                    timestamp=stamp,
                    epoch_seconds=epoch_seconds(stamp),
                    records=[CBodyRecord(body_id=bid) for bid in body_ids],
                )
            )
        return cls(year_count=len(years), body_count=len(body_ids), slices=slices)

    def cell(self, year_idx: int, body_idx: int) -> CBodyRecord:
        """Return the record at zero-based ``(year_idx, body_idx)``."""
        return self.slices[year_idx].records[body_idx]

    @property
    def cell_count(self) -> int:
        return self.year_count * self.body_count

    @property
    def valid_count(self) -> int:
        """Number of cells populated by a successful extraction."""
        return sum(1 for s in self.slices for r in s.records if r.valid)


class RequestDescriptor(BaseModel):
    """Immutable input of one request. Created once per grid cell."""

    model_config = ConfigDict(frozen=True)

    year_idx: int
    body_idx: int
    body_id: int
    object_id: str = Field(description="Text placed in the COMMAND line")
    date: str = Field(description="Calendar date YYYY-MM-DD")
    command: str = Field(description="Filled Horizons batch command")

    @property
    def sequence(self) -> tuple[int, int]:
        return (self.year_idx, self.body_idx)
