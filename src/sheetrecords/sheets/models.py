"""Data models for grid regions and the cell planes read from them."""

import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def col_letter_to_index(col: str) -> int:
    """Convert column letter(s) to 0-based index. A=0, B=1, ..., Z=25, AA=26, etc."""
    result = 0
    for char in col.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def index_to_col_letter(index: int) -> str:
    """Convert 0-based index to column letter(s)."""
    result = ""
    index += 1
    while index > 0:
        index -= 1
        result = chr(ord("A") + (index % 26)) + result
        index //= 26
    return result


def parse_cell_notation(cell: str) -> tuple[str, int]:
    """Parse A1 notation into column letters and row number."""
    match = re.fullmatch(r"\$?([A-Za-z]+)\$?(\d+)", cell.strip())
    if not match:
        raise ValueError(f"Invalid cell notation: {cell}")
    return match.group(1).upper(), int(match.group(2))


class Plane(str, Enum):
    """Per-cell attributes that can be written back to a region."""

    VALUES = "values"
    NOTES = "notes"
    BACKGROUNDS = "backgrounds"
    WRAPS = "wraps"
    FONT_COLORS = "font_colors"


class GridRange(BaseModel):
    """A rectangular region of a sheet.

    ``row`` and ``col`` are 1-based, matching what a user sees in the sheet.
    Instances are treated as values: growing or moving a region returns a
    new ``GridRange``.
    """

    sheet_name: str
    row: int = Field(default=1, ge=1)
    col: int = Field(default=1, ge=1)
    num_rows: int = Field(default=1, ge=1)
    num_cols: int = Field(default=1, ge=1)

    @property
    def last_row(self) -> int:
        return self.row + self.num_rows - 1

    @property
    def last_col(self) -> int:
        return self.col + self.num_cols - 1

    @property
    def origin(self) -> tuple[int, int]:
        return self.row, self.col

    @property
    def extent(self) -> tuple[int, int]:
        return self.num_rows, self.num_cols

    @property
    def a1_notation(self) -> str:
        """Range in A1 notation, e.g. ``'Sheet1'!A1:C10``."""
        start = f"{index_to_col_letter(self.col - 1)}{self.row}"
        end = f"{index_to_col_letter(self.last_col - 1)}{self.last_row}"
        sheet = self.sheet_name.replace("'", "''")
        return f"'{sheet}'!{start}:{end}"

    def offset(
        self,
        rows: int,
        cols: int,
        num_rows: Optional[int] = None,
        num_cols: Optional[int] = None,
    ) -> "GridRange":
        """Return a region moved by ``rows``/``cols``, optionally resized."""
        return GridRange(
            sheet_name=self.sheet_name,
            row=self.row + rows,
            col=self.col + cols,
            num_rows=self.num_rows if num_rows is None else num_rows,
            num_cols=self.num_cols if num_cols is None else num_cols,
        )

    def resize(self, num_rows: int, num_cols: Optional[int] = None) -> "GridRange":
        """Return a region with the same origin and a new extent."""
        return self.offset(0, 0, num_rows, num_cols)

    def line(self, index: int) -> "GridRange":
        """Return the single line ``index`` (0-based) of this region."""
        return self.offset(index, 0, 1)

    @classmethod
    def from_a1(cls, notation: str, default_sheet: str = "Sheet1") -> "GridRange":
        """Parse ``Sheet!A1:C10`` (or a single cell) into a GridRange."""
        if "!" in notation:
            sheet_part, range_part = notation.rsplit("!", 1)
            sheet_name = sheet_part.strip()
            if sheet_name.startswith("'") and sheet_name.endswith("'"):
                sheet_name = sheet_name[1:-1].replace("''", "'")
        else:
            sheet_name, range_part = default_sheet, notation

        start, _, end = range_part.partition(":")
        start_col, start_row = parse_cell_notation(start)
        end_col, end_row = parse_cell_notation(end) if end else (start_col, start_row)

        first_col = col_letter_to_index(start_col) + 1
        last_col = col_letter_to_index(end_col) + 1
        return cls(
            sheet_name=sheet_name,
            row=min(start_row, end_row),
            col=min(first_col, last_col),
            num_rows=abs(end_row - start_row) + 1,
            num_cols=abs(last_col - first_col) + 1,
        )

    def __str__(self) -> str:
        return self.a1_notation


class BlockData(BaseModel):
    """Every plane of a region, each a 2-D list aligned to the region's cells."""

    values: list[list[Any]] = Field(default_factory=list)
    notes: list[list[str]] = Field(default_factory=list)
    backgrounds: list[list[str]] = Field(default_factory=list)
    formulas: list[list[str]] = Field(default_factory=list)
    font_colors: list[list[str]] = Field(default_factory=list)

    @property
    def num_rows(self) -> int:
        return len(self.values)

    def line(self, index: int) -> dict[str, list[Any]]:
        """Return every plane of one line keyed by plane name."""
        return {
            "values": self.values[index],
            "notes": self.notes[index],
            "backgrounds": self.backgrounds[index],
            "formulas": self.formulas[index],
            "font_colors": self.font_colors[index],
        }
