"""E2E conftest — requires network access to the live JPL Horizons API.

Run with:
    HORIZON_TEST_E2E=1 pytest tests/e2e/ -v
"""
