"""Dataset models — the pre-sized result grid and per-request descriptors."""

from .dataset import CBodyRecord, DatasetGrid, RequestDescriptor, TimeSlice

__all__ = ["CBodyRecord", "TimeSlice", "DatasetGrid", "RequestDescriptor"]
