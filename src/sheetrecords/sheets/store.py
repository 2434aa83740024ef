"""Backing store interface used by the table model."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from .models import BlockData, GridRange, Plane


class GridStore(ABC):
    """Abstract base class for stores holding cell grids.

    A table reads a region once through ``read_block`` and writes it back
    plane by plane through ``write_block``. Nothing here is transactional:
    each call is an independent read or write.
    """

    @abstractmethod
    def read_block(self, region: GridRange) -> BlockData:
        """Read values, notes, backgrounds, formulas and font colors of a region.

        Every plane is a list of ``region.num_rows`` lists of
        ``region.num_cols`` entries; empty cells are ``""``.
        """
        pass

    @abstractmethod
    def read_values(self, region: GridRange) -> list[list[Any]]:
        """Read only the values of a region, shaped like ``read_block().values``."""
        pass

    @abstractmethod
    def write_block(self, region: GridRange, plane: Plane, data: list[list[Any]]) -> None:
        """Write one plane over a region. ``data`` must match the region's extent."""
        pass

    @abstractmethod
    def clear_region(self, region: GridRange, contents_only: bool = False) -> None:
        """Clear a region. With ``contents_only`` formatting and notes are kept."""
        pass

    @abstractmethod
    def resolve_named_range(self, name: str) -> Optional[GridRange]:
        """Return the region a named range points to, or None."""
        pass

    @abstractmethod
    def full_region(self, sheet_name: str, header_row: int = 1) -> GridRange:
        """Return the populated region of a sheet starting at ``header_row``.

        The region spans from column A to the last populated column and from
        ``header_row`` to the last populated row (at least the header line).
        """
        pass

    def resize_region(self, region: GridRange, num_rows: int, num_cols: int) -> GridRange:
        """Return ``region`` with a new extent and the same origin."""
        return region.resize(num_rows, num_cols)


def check_shape(region: GridRange, data: list[list[Any]]) -> None:
    """Raise ValueError when ``data`` does not match the region's extent."""
    if len(data) != region.num_rows or any(len(line) != region.num_cols for line in data):
        widths = sorted({len(line) for line in data})
        raise ValueError(
            f"Data shape {len(data)}x{widths} does not match region {region} "
            f"({region.num_rows}x{region.num_cols})"
        )
