"""Tests for DatasetGrid allocation, cell access, and the clock helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from horizonfetch.models.dataset import CBodyRecord, DatasetGrid
from horizonfetch.utils.clock import date_str, epoch_seconds, timestamp_str

from tests.unit.conftest import make_descriptor


# ── clock ─────────────────────────────────────────────────────────────────────


def test_date_str_zero_pads():
    assert date_str(2024) == "2024-01-01"
    assert date_str(987, 3, 9) == "0987-03-09"


def test_timestamp_str_is_midnight():
    assert timestamp_str("2014-01-01") == "2014-01-01 00:00:00"


@pytest.mark.parametrize(
    "stamp, expected",
    [
        ("1970-01-01 00:00:00", 0),
        ("2014-01-01 00:00:00", 1388534400),
        ("2024-01-01 00:00:00", 1704067200),
        ("1969-12-31 23:59:59", -1),
    ],
)
def test_epoch_seconds_is_utc(stamp, expected):
    assert epoch_seconds(stamp) == expected


# ── DatasetGrid ───────────────────────────────────────────────────────────────


def test_allocate_shape_and_sentinels():
    grid = DatasetGrid.allocate(range(2014, 2017), [199, 299])
    assert grid.year_count == 3
    assert grid.body_count == 2
    assert grid.cell_count == 6
    assert grid.valid_count == 0
    for time_slice in grid.slices:
        assert len(time_slice.records) == 2
        for record in time_slice.records:
            assert record.position == (0.0, 0.0, 0.0)
            assert record.velocity == (0.0, 0.0, 0.0)
            assert record.valid is False


def test_allocated_records_are_distinct_objects():
    grid = DatasetGrid.allocate(range(2020, 2022), [199, 299])
    grid.cell(0, 0).store((1.0, 1.0, 1.0), (2.0, 2.0, 2.0))
    assert grid.cell(1, 0).valid is False
    assert grid.cell(0, 1).valid is False
    assert grid.valid_count == 1


def test_store_marks_valid():
    record = CBodyRecord(body_id=399)
    record.store((1.0, 2.0, 3.0), (4.0, 5.0, 6.0))
    assert record.valid
    assert record.position == (1.0, 2.0, 3.0)


def test_cell_out_of_range():
    grid = DatasetGrid.allocate(range(2020, 2021), [199])
    with pytest.raises(IndexError):
        grid.cell(1, 0)


def test_request_descriptor_is_frozen():
    descriptor = make_descriptor()
    with pytest.raises(ValidationError):
        descriptor.body_id = 299
    assert descriptor.sequence == (0, 0)
