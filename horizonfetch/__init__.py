"""HorizonFetch — bounded-concurrency state-vector fetcher for JPL Horizons."""

__version__ = "0.1.0"
