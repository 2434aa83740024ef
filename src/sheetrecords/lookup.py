"""Single-value lookups that read a raw column instead of building a Table.

Building a Table reads five planes of every cell. When all that is needed is
one value keyed by another column, reading the header line and the key
column is far cheaper on large sheets.
"""

import logging
from typing import Any, Optional, Sequence

from .config import settings
from .errors import FieldNotFoundError
from .sheets.models import GridRange
from .sheets.store import GridStore
from .table.compare import sort_key, values_equal

logger = logging.getLogger(__name__)

NOT_FOUND = -1


def _cell(line: Any) -> Any:
    """First entry of a column line; bare values are accepted as-is."""
    if isinstance(line, (list, tuple)):
        return line[0] if line else ""
    return line


def index_of_2d(column: Sequence[Any], target: Any) -> int:
    """Position of ``target`` in a 2-D column block by linear scan, or NOT_FOUND."""
    for position, line in enumerate(column):
        if values_equal(_cell(line), target):
            return position
    return NOT_FOUND


def binary_index_of(column: Sequence[Any], target: Any) -> int:
    """Position of ``target`` in an ascending 2-D column block, or NOT_FOUND.

    The column must be sorted ascending in the order ``Table.sort_by`` uses
    (numbers, then dates, then text, then blanks); otherwise the result is
    unreliable. Values of different kinds never compare equal.
    """
    target = sort_key(target)
    low, high = 0, len(column) - 1
    while low <= high:
        middle = (low + high) // 2
        current = sort_key(_cell(column[middle]))
        if current < target:
            low = middle + 1
        elif current > target:
            high = middle - 1
        else:
            return middle
    return NOT_FOUND


def _header_offset(header: list[Any], field: str, region: GridRange) -> int:
    for offset, label in enumerate(header):
        if str(label) == field:
            return offset
    raise FieldNotFoundError(field, region.a1_notation)


def _locate(
    store: GridStore,
    region: GridRange,
    header: list[Any],
    key_field: str,
    key: Any,
    assume_sorted: bool,
) -> Optional[int]:
    key_offset = _header_offset(header, key_field, region)
    if region.num_rows < 2:
        return None

    key_column = store.read_values(region.offset(1, key_offset, region.num_rows - 1, 1))
    search = binary_index_of if assume_sorted else index_of_2d
    position = search(key_column, key)
    logger.debug(
        f"Lookup of {key!r} in {region.sheet_name}.{key_field} "
        f"({'binary' if assume_sorted else 'linear'}): position {position}"
    )
    if position == NOT_FOUND:
        return None
    return region.row + 1 + position


def find_row(
    store: GridStore,
    sheet_name: str,
    key_field: str,
    key: Any,
    header_row: Optional[int] = None,
    assume_sorted: bool = False,
) -> Optional[int]:
    """Sheet row (1-based) whose ``key_field`` equals ``key``, or None."""
    region = store.full_region(sheet_name, header_row or settings.header_row)
    header = store.read_values(region.line(0))[0]
    return _locate(store, region, header, key_field, key, assume_sorted)


def lookup_value(
    store: GridStore,
    sheet_name: str,
    key_field: str,
    key: Any,
    value_field: str,
    header_row: Optional[int] = None,
    assume_sorted: bool = False,
) -> Any:
    """Value of ``value_field`` on the row whose ``key_field`` equals ``key``, or None."""
    region = store.full_region(sheet_name, header_row or settings.header_row)
    header = store.read_values(region.line(0))[0]
    value_offset = _header_offset(header, value_field, region)

    row = _locate(store, region, header, key_field, key, assume_sorted)
    if row is None:
        return None
    cell = GridRange(sheet_name=sheet_name, row=row, col=region.col + value_offset)
    return store.read_values(cell)[0][0]
