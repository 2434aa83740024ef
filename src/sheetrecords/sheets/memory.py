"""Dictionary-backed grid store.

Useful for tests and for working on data that never leaves the process.
Formulas are stored as text and never evaluated: a cell written with a
formula reads back with an empty value and the formula in the formulas plane.
"""

import copy
import logging
from typing import Any, Optional

from ..errors import SheetNotFoundError
from .models import BlockData, GridRange, Plane
from .store import GridStore, check_shape

logger = logging.getLogger(__name__)

_EMPTY_CELL = {
    "value": "",
    "formula": "",
    "note": "",
    "background": "",
    "font_color": "",
    "wrap": False,
}

_PLANE_ATTRIBUTES = {
    Plane.NOTES: "note",
    Plane.BACKGROUNDS: "background",
    Plane.WRAPS: "wrap",
    Plane.FONT_COLORS: "font_color",
}


class InMemoryGridStore(GridStore):
    """Grid store keeping every sheet as a sparse dict of cells."""

    def __init__(self, sheets: Optional[dict[str, list[list[Any]]]] = None):
        self._sheets: dict[str, dict[tuple[int, int], dict]] = {}
        self._named_ranges: dict[str, GridRange] = {}
        self.writes: list[tuple[Plane, GridRange]] = []
        self.clears: list[tuple[GridRange, bool]] = []

        for name, rows in (sheets or {}).items():
            self.add_sheet(name, rows)

    def add_sheet(self, name: str, rows: Optional[list[list[Any]]] = None):
        """Create (or replace) a sheet seeded with ``rows`` starting at A1."""
        self._sheets[name] = {}
        for row_idx, line in enumerate(rows or []):
            for col_idx, value in enumerate(line):
                self._put_value(name, row_idx + 1, col_idx + 1, value)

    def add_named_range(self, name: str, region: GridRange):
        """Register a named range."""
        self._sheet(region.sheet_name)
        self._named_ranges[name] = region

    def set_cell(self, sheet_name: str, row: int, col: int, **attributes):
        """Set attributes (value, formula, note, background, font_color, wrap) of one cell."""
        cell = self._cell(sheet_name, row, col, create=True)
        for key, value in attributes.items():
            if key not in _EMPTY_CELL:
                raise KeyError(f"Unknown cell attribute: {key}")
            cell[key] = value

    def get_cell(self, sheet_name: str, row: int, col: int) -> dict:
        """Return a copy of one cell's attributes."""
        cell = self._sheet(sheet_name).get((row, col))
        return dict(cell) if cell else dict(_EMPTY_CELL)

    def sheet_values(self, sheet_name: str) -> list[list[Any]]:
        """Return the populated values of a sheet from A1, formulas shown as text."""
        region = self.full_region(sheet_name)
        return [
            [cell["formula"] or cell["value"] for cell in line]
            for line in self._cells(region)
        ]

    # GridStore implementation

    def read_block(self, region: GridRange) -> BlockData:
        lines = self._cells(region)
        return BlockData(
            values=[[copy.copy(cell["value"]) for cell in line] for line in lines],
            notes=[[cell["note"] for cell in line] for line in lines],
            backgrounds=[[cell["background"] for cell in line] for line in lines],
            formulas=[[cell["formula"] for cell in line] for line in lines],
            font_colors=[[cell["font_color"] for cell in line] for line in lines],
        )

    def read_values(self, region: GridRange) -> list[list[Any]]:
        return [[copy.copy(cell["value"]) for cell in line] for line in self._cells(region)]

    def write_block(self, region: GridRange, plane: Plane, data: list[list[Any]]) -> None:
        check_shape(region, data)
        self._sheet(region.sheet_name)
        self.writes.append((plane, region))
        logger.debug(f"Writing {plane.value} to {region}")

        for row_offset, line in enumerate(data):
            for col_offset, item in enumerate(line):
                row, col = region.row + row_offset, region.col + col_offset
                if plane == Plane.VALUES:
                    self._put_value(region.sheet_name, row, col, item)
                else:
                    cell = self._cell(region.sheet_name, row, col, create=True)
                    cell[_PLANE_ATTRIBUTES[plane]] = item

    def clear_region(self, region: GridRange, contents_only: bool = False) -> None:
        sheet = self._sheet(region.sheet_name)
        self.clears.append((region, contents_only))
        logger.debug(f"Clearing {region} (contents_only={contents_only})")

        for row in range(region.row, region.last_row + 1):
            for col in range(region.col, region.last_col + 1):
                if contents_only:
                    cell = sheet.get((row, col))
                    if cell:
                        cell["value"] = ""
                        cell["formula"] = ""
                else:
                    sheet.pop((row, col), None)

    def resolve_named_range(self, name: str) -> Optional[GridRange]:
        return self._named_ranges.get(name)

    def full_region(self, sheet_name: str, header_row: int = 1) -> GridRange:
        sheet = self._sheet(sheet_name)
        populated = [
            key for key, cell in sheet.items() if cell["value"] != "" or cell["formula"] != ""
        ]
        last_row = max((row for row, _ in populated), default=header_row)
        last_col = max((col for _, col in populated), default=1)
        return GridRange(
            sheet_name=sheet_name,
            row=header_row,
            col=1,
            num_rows=max(last_row, header_row) - header_row + 1,
            num_cols=last_col,
        )

    # Internals

    def _sheet(self, name: str) -> dict[tuple[int, int], dict]:
        try:
            return self._sheets[name]
        except KeyError:
            raise SheetNotFoundError(name) from None

    def _cell(self, sheet_name: str, row: int, col: int, create: bool = False) -> dict:
        sheet = self._sheet(sheet_name)
        cell = sheet.get((row, col))
        if cell is None:
            cell = dict(_EMPTY_CELL)
            if create:
                sheet[(row, col)] = cell
        return cell

    def _cells(self, region: GridRange) -> list[list[dict]]:
        sheet = self._sheet(region.sheet_name)
        return [
            [
                sheet.get((row, col), _EMPTY_CELL)
                for col in range(region.col, region.last_col + 1)
            ]
            for row in range(region.row, region.last_row + 1)
        ]

    def _put_value(self, sheet_name: str, row: int, col: int, value: Any):
        cell = self._cell(sheet_name, row, col, create=True)
        if value is None:
            value = ""
        if isinstance(value, str) and value.startswith("="):
            cell["formula"] = value
            cell["value"] = ""
        else:
            cell["formula"] = ""
            cell["value"] = value
