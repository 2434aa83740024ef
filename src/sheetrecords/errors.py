"""Exceptions raised by the table model and the grid stores."""

from typing import Any


class SheetRecordsError(Exception):
    """Base class for all sheetrecords errors."""

    pass


class FieldNotFoundError(SheetRecordsError):
    """Exception raised when a field label is not part of the table header."""

    def __init__(self, field: str, region: str):
        self.field = field
        self.region = region
        super().__init__(f"Field '{field}' not found in header of {region}")


class StaleRowError(SheetRecordsError):
    """Exception raised when committing a row whose cached position is no longer valid.

    Rows lose their commit authorization when the table is sorted or rows are
    deleted. Commit the whole table to make them writable again.
    """

    def __init__(self, position: int, region: str):
        self.position = position
        self.region = region
        super().__init__(
            f"Row {position} of {region} is not authorized to commit: the table was "
            "reordered or rows were deleted since it was loaded. Commit the table instead."
        )


class InvalidCriteriaError(SheetRecordsError):
    """Exception raised when selector criteria do not have a supported shape."""

    def __init__(self, criteria: Any, reason: str = ""):
        self.criteria = criteria
        message = f"Invalid criteria: {criteria!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NamedRegionNotFoundError(SheetRecordsError):
    """Exception raised when a named range does not resolve to a region."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Named range '{name}' not found")


class IndexBoundsError(SheetRecordsError):
    """Exception raised when a delete targets a position outside the live rows."""

    def __init__(self, position: int, size: int):
        self.position = position
        self.size = size
        super().__init__(f"Row position {position} is out of bounds for {size} live row(s)")


class SheetNotFoundError(SheetRecordsError):
    """Exception raised when a sheet name is not present in the spreadsheet."""

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(f"Sheet '{sheet_name}' not found")


class StoreError(SheetRecordsError):
    """Exception raised when the backing store rejects a read or write."""

    pass
