"""Root conftest — shared pytest markers and global settings.

Markers
-------
unit        fast, no I/O, pure logic
e2e         requires the live JPL Horizons API (set HORIZON_TEST_E2E=1)
slow        expected to take > 5 seconds
"""

from __future__ import annotations

import os
import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast, no I/O tests")
    config.addinivalue_line("markers", "e2e: requires the live JPL Horizons API")
    config.addinivalue_line("markers", "slow: test is expected to take > 5 s")


# ── Skip guards ───────────────────────────────────────────────────────────────

requires_e2e = pytest.mark.skipif(
    not os.getenv("HORIZON_TEST_E2E"),
    reason="Set HORIZON_TEST_E2E=1 to run end-to-end tests against JPL Horizons",
)
