"""Grid stores: the Google Sheets API client and an in-memory store."""

from .client import GoogleSheetsClient
from .memory import InMemoryGridStore
from .models import BlockData, GridRange, Plane
from .store import GridStore

__all__ = [
    "GoogleSheetsClient",
    "InMemoryGridStore",
    "GridStore",
    "BlockData",
    "GridRange",
    "Plane",
]
