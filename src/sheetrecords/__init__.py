"""SheetRecords - record-style tables over spreadsheet regions."""

__version__ = "0.1.0"

from .errors import (
    FieldNotFoundError,
    IndexBoundsError,
    InvalidCriteriaError,
    NamedRegionNotFoundError,
    SheetNotFoundError,
    SheetRecordsError,
    StaleRowError,
    StoreError,
)
from .lookup import NOT_FOUND, binary_index_of, find_row, index_of_2d, lookup_value
from .sheets import GoogleSheetsClient, GridRange, GridStore, InMemoryGridStore, Plane
from .table import And, Equals, Item, Or, RecordList, Table

__all__ = [
    "Table",
    "Item",
    "RecordList",
    "Equals",
    "And",
    "Or",
    "GridRange",
    "GridStore",
    "GoogleSheetsClient",
    "InMemoryGridStore",
    "Plane",
    "NOT_FOUND",
    "index_of_2d",
    "binary_index_of",
    "find_row",
    "lookup_value",
    "SheetRecordsError",
    "FieldNotFoundError",
    "StaleRowError",
    "InvalidCriteriaError",
    "NamedRegionNotFoundError",
    "IndexBoundsError",
    "SheetNotFoundError",
    "StoreError",
]
