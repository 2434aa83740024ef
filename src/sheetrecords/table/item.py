"""A single row of a table."""

import logging
import weakref
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ..config import settings
from ..errors import FieldNotFoundError, StaleRowError
from ..sheets.models import GridRange, Plane
from .fields import FieldPlane, normalize

if TYPE_CHECKING:
    from .table import Table

logger = logging.getLogger(__name__)

# Planes written by a full commit, in write order
COMMIT_PLANES = (Plane.VALUES, Plane.NOTES, Plane.BACKGROUNDS, Plane.WRAPS, Plane.FONT_COLORS)


def plane_entry(plane: Plane, field: FieldPlane) -> Any:
    """Value of one cell for the given plane."""
    if plane == Plane.VALUES:
        return field.write_value
    if plane == Plane.NOTES:
        return field.note
    if plane == Plane.BACKGROUNDS:
        return field.background
    if plane == Plane.WRAPS:
        return settings.commit_wrap
    return field.font_color


class Item:
    """A row: field label -> FieldPlane, plus its position in the table.

    ``i`` is the zero-based position among the table's live rows, not a sheet
    row number. The sheet row is derived on demand from the owning table's
    current region, so a row never holds coordinates of its own.

    ``authorized_to_commit`` is cleared when the table is sorted or rows are
    deleted, since ``i`` then no longer points at the line this row was read
    from. Single-row commits refuse to run until the table is committed.
    """

    def __init__(self, table: "Table", i: int, authorized_to_commit: bool = True):
        self._table_ref = weakref.ref(table)
        self.i = i
        self.authorized_to_commit = authorized_to_commit
        self.fields: dict[str, FieldPlane] = {}

    @property
    def table(self) -> "Table":
        table = self._table_ref()
        if table is None:
            raise ReferenceError("The table owning this row no longer exists")
        return table

    @property
    def row_number(self) -> int:
        """1-based sheet row this item is written to."""
        return self.table.grid_range.row + 1 + self.i

    def add_field(
        self,
        label: str,
        value: Any = "",
        note: str = "",
        background: str = "",
        formula: str = "",
        font_color: str = "",
    ):
        self.fields[label] = FieldPlane(
            value=value,
            note=note,
            background=background,
            font_color=font_color,
            formula=formula,
        )

    def _field(self, label: str) -> FieldPlane:
        try:
            return self.fields[label]
        except KeyError:
            raise FieldNotFoundError(label, self.table.grid_range.a1_notation) from None

    # Accessors

    def get_field_value(self, label: str) -> Any:
        return self._field(label).value

    def set_field_value(self, label: str, value: Any):
        """Set a literal value. Any formula on the field is dropped."""
        field = self._field(label)
        field.value = normalize(value)
        field.formula = ""

    def get_field_note(self, label: str) -> str:
        return self._field(label).note

    def set_field_note(self, label: str, note: str):
        self._field(label).note = normalize(note)

    def get_field_background(self, label: str) -> str:
        return self._field(label).background

    def set_field_background(self, label: str, background: str):
        self._field(label).background = normalize(background)

    def get_field_formula(self, label: str) -> str:
        return self._field(label).formula

    def set_field_formula(self, label: str, formula: str):
        self._field(label).formula = normalize(formula)

    def get_field_font_color(self, label: str) -> str:
        return self._field(label).font_color

    def set_field_font_color(self, label: str, font_color: str):
        self._field(label).font_color = normalize(font_color)

    def __getitem__(self, label: str) -> Any:
        return self.get_field_value(label)

    def __setitem__(self, label: str, value: Any):
        self.set_field_value(label, value)

    def __contains__(self, label: object) -> bool:
        return label in self.fields

    def to_record(self) -> dict[str, Any]:
        """Field values keyed by label."""
        return {label: field.value for label, field in self.fields.items()}

    def __repr__(self) -> str:
        return f"Item(i={self.i}, {self.to_record()!r})"

    # Write-back

    def line_planes(self, planes: Iterable[Plane] = COMMIT_PLANES) -> dict[Plane, list[Any]]:
        """One line of data per plane, in header column order."""
        header = self.table.header
        return {
            plane: [plane_entry(plane, self._field(label)) for label in header]
            for plane in planes
        }

    def _check_authorized(self):
        if not self.authorized_to_commit:
            raise StaleRowError(self.i, self.table.grid_range.a1_notation)

    def _line_region(self) -> GridRange:
        return self.table.grid_range.line(self.i + 1)

    def _cell_region(self, label: str) -> GridRange:
        self._field(label)
        col_offset = self.table.column_offset(label)
        return self._line_region().offset(0, col_offset, 1, 1)

    def _write(self, region: GridRange, planes: dict[Plane, list[Any]]):
        store = self.table.store
        for plane, line in planes.items():
            store.write_block(region, plane, [line])

    def commit(self):
        """Write every plane of the row."""
        self._check_authorized()
        logger.debug(f"Committing row {self.i} to {self._line_region()}")
        self._write(self._line_region(), self.line_planes())

    def commit_values(self):
        """Write only the values of the row (formulas where set)."""
        self._check_authorized()
        self._write(self._line_region(), self.line_planes((Plane.VALUES,)))

    def commit_backgrounds_only(self):
        self._check_authorized()
        self._write(self._line_region(), self.line_planes((Plane.BACKGROUNDS,)))

    def commit_field(self, label: str):
        """Write every plane of a single field."""
        self._check_authorized()
        field = self._field(label)
        self._write(
            self._cell_region(label),
            {plane: [plane_entry(plane, field)] for plane in COMMIT_PLANES},
        )

    def commit_field_value(self, label: str):
        self._check_authorized()
        field = self._field(label)
        self._write(self._cell_region(label), {Plane.VALUES: [field.write_value]})

    def copy_into(self, other: "Item", labels: Optional[Iterable[str]] = None):
        """Copy every plane of the given (default: all) fields into ``other``."""
        for label in labels if labels is not None else self.fields:
            field = self._field(label)
            other.add_field(
                label,
                value=field.value,
                note=field.note,
                background=field.background,
                formula=field.formula,
                font_color=field.font_color,
            )
