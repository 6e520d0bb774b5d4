"""Fetch pipeline — command text, extraction, requests and the orchestrator."""

from .extractor import extract, extract_file
from .orchestrator import FetchOrchestrator, FetchOutcome, grid_ranges
from .request import AsyncRequest, FetchCounters, RequestState

__all__ = [
    "extract",
    "extract_file",
    "FetchOrchestrator",
    "FetchOutcome",
    "grid_ranges",
    "AsyncRequest",
    "FetchCounters",
    "RequestState",
]
