"""In-memory table over a region of a grid store."""

import logging
from typing import Any, Iterable, Iterator, Optional, Union

from ..config import settings
from ..errors import FieldNotFoundError, IndexBoundsError, NamedRegionNotFoundError
from ..sheets.models import BlockData, GridRange, Plane
from ..sheets.store import GridStore
from .compare import sort_key
from .index import RowIndex
from .item import COMMIT_PLANES, Item
from .records import RecordList
from .selector import Criteria, Selector

logger = logging.getLogger(__name__)


def _is_blank_line(block: BlockData, index: int) -> bool:
    values = block.values[index]
    formulas = block.formulas[index]
    return all(value in ("", None) for value in values) and not any(formulas)


class Table:
    """A header plus one Item per data line of a region.

    The region is read once at construction. Edits stay in memory until
    ``commit`` or ``commit_values`` writes the whole table back, or an
    individual row is committed.

    ``grid_range`` always spans the header plus the live rows: it grows on
    ``add`` and shrinks on deletes. ``initial_range`` is the region as it
    was last read or committed, and is what a table commit clears before
    writing, so lines left behind by deletions are wiped.
    """

    def __init__(self, store: GridStore, grid_range: GridRange, index_field: Optional[str] = None):
        self.store = store
        self.header: list[str] = []
        self.items: list[Item] = []
        self.index: Optional[RowIndex] = None
        self._columns: dict[str, int] = {}

        block = store.read_block(grid_range)
        num_rows = block.num_rows
        while num_rows > 1 and _is_blank_line(block, num_rows - 1):
            num_rows -= 1
        if num_rows < grid_range.num_rows:
            logger.debug(
                f"Trimmed {grid_range.num_rows - num_rows} trailing empty line(s) from {grid_range}"
            )

        self.grid_range = grid_range.resize(num_rows)
        self.initial_range = self.grid_range

        self.header = [str(label) if label is not None else "" for label in block.values[0]]
        self._columns = {label: offset for offset, label in enumerate(self.header)}

        for line_idx in range(1, num_rows):
            item = Item(self, line_idx - 1)
            line = block.line(line_idx)
            for col_idx, label in enumerate(self.header):
                item.add_field(
                    label,
                    value=line["values"][col_idx],
                    note=line["notes"][col_idx],
                    background=line["backgrounds"][col_idx],
                    formula=line["formulas"][col_idx],
                    font_color=line["font_colors"][col_idx],
                )
            self.items.append(item)

        if index_field is not None:
            self._require_field(index_field)
            self.index = RowIndex(index_field, self.items)

        logger.info(
            f"Loaded table {self.grid_range}: {len(self.header)} field(s), {len(self.items)} row(s)"
        )

    @classmethod
    def from_sheet(
        cls,
        store: GridStore,
        sheet_name: str,
        header_row: Optional[int] = None,
        index_field: Optional[str] = None,
    ) -> "Table":
        """Build a table over the populated part of a sheet."""
        region = store.full_region(sheet_name, header_row or settings.header_row)
        return cls(store, region, index_field=index_field)

    @classmethod
    def from_named_range(
        cls, store: GridStore, name: str, index_field: Optional[str] = None
    ) -> "Table":
        region = store.resolve_named_range(name)
        if region is None:
            raise NamedRegionNotFoundError(name)
        return cls(store, region, index_field=index_field)

    # Header

    @property
    def field_set(self) -> set[str]:
        return set(self._columns)

    def column_offset(self, label: str) -> int:
        """0-based column of a field within the region."""
        return self._columns[self._require_field(label)]

    def _require_field(self, label: str) -> str:
        if label not in self._columns:
            raise FieldNotFoundError(label, self.grid_range.a1_notation)
        return label

    # Queries

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def select(self, criteria: Criteria) -> RecordList[Item]:
        """Rows matching the criteria, in table order. The rows are not copied."""
        return Selector(self, criteria).evaluate()

    def get(self, key: Any) -> Optional[Item]:
        """Row whose index field equals ``key``."""
        if self.index is None:
            raise ValueError("Table was built without an index field")
        return self.index.get(key)

    def rebuild_index(self):
        """Rebuild the index from the live rows."""
        if self.index is not None:
            self.index = RowIndex(self.index.field, self.items)

    def distinct(self, field: str) -> list[Any]:
        """Unique values of a field in first-seen order."""
        self._require_field(field)
        seen: dict[Any, None] = {}
        unhashable: list[Any] = []
        for item in self.items:
            value = item.get_field_value(field)
            try:
                seen.setdefault(value, None)
            except TypeError:
                if value not in unhashable:
                    unhashable.append(value)
        return list(seen) + unhashable

    def column(self, field: str) -> list[Any]:
        self._require_field(field)
        return [item.get_field_value(field) for item in self.items]

    def records(self) -> list[dict[str, Any]]:
        return [item.to_record() for item in self.items]

    # Mutations

    def add(self, record: Union[dict[str, Any], Item]) -> Item:
        """Append a row built from a record or copied from another row."""
        item = Item(self, len(self.items))
        source = record.fields if isinstance(record, Item) else record
        for label in source:
            self._require_field(label)

        for label in self.header:
            if label not in source:
                item.add_field(label)
            elif isinstance(record, Item):
                record.copy_into(item, [label])
            else:
                item.add_field(label, value=record[label])

        self.items.append(item)
        self.grid_range = self.grid_range.resize(self.grid_range.num_rows + 1)
        if self.index is not None:
            self.index.add(item)

        logger.debug(f"Added row {item.i} to {self.grid_range}")
        return item

    def delete_many(self, items: Iterable[Item]):
        """Remove rows from the table.

        Removed rows, and surviving rows whose position moved, can no longer
        be committed on their own until the whole table is committed.
        """
        targets = list(dict.fromkeys(items))
        if not targets:
            return

        for item in targets:
            if not 0 <= item.i < len(self.items) or self.items[item.i] is not item:
                raise IndexBoundsError(item.i, len(self.items))

        for item in targets:
            item.authorized_to_commit = False

        if len(targets) == len(self.items):
            self.clear()
            return

        removed_positions = []
        for item in sorted(targets, key=lambda target: target.i, reverse=True):
            del self.items[item.i]
            removed_positions.append(item.i)

        # rows after a removed position move up by the number removed before them;
        # the sheet still has them on their old lines until the table is committed
        for item in self.items:
            shift = sum(1 for position in removed_positions if position < item.i)
            if shift:
                item.i -= shift
                item.authorized_to_commit = False

        self.grid_range = self.grid_range.resize(self.grid_range.num_rows - len(targets))
        logger.debug(f"Deleted {len(targets)} row(s); {len(self.items)} remain")

    def delete_one(self, item: Item):
        self.delete_many([item])

    def delete_selection(self, criteria: Criteria) -> int:
        """Delete every row matching the criteria and return how many were removed."""
        selected = self.select(criteria)
        self.delete_many(selected)
        return len(selected)

    def clear(self):
        """Delete every live row."""
        for item in self.items:
            item.authorized_to_commit = False
        count = len(self.items)
        self.items = []
        self.grid_range = self.grid_range.resize(1)
        logger.debug(f"Cleared {count} row(s) from {self.grid_range}")

    def sort_by(self, field: str, ascending: bool = True):
        """Stable sort on a field; every row loses its commit authorization."""
        self._require_field(field)
        self.items.sort(key=lambda item: sort_key(item.get_field_value(field)), reverse=not ascending)
        for position, item in enumerate(self.items):
            item.i = position
            item.authorized_to_commit = False

    # Write-back

    def _planes(self, planes: tuple[Plane, ...]) -> dict[Plane, list[list[Any]]]:
        blocks: dict[Plane, list[list[Any]]] = {plane: [] for plane in planes}
        for item in self.items:
            for plane, line in item.line_planes(planes).items():
                blocks[plane].append(line)
        return blocks

    def _commit(self, planes: tuple[Plane, ...], contents_only: bool):
        for position, item in enumerate(self.items):
            item.i = position
        blocks = self._planes(planes)

        # the header line is overwritten below, only its formatting survives
        if self.initial_range.num_rows > 1:
            previous_body = self.initial_range.offset(1, 0, self.initial_range.num_rows - 1)
            self.store.clear_region(previous_body, contents_only=contents_only)
        self.store.write_block(self.grid_range.line(0), Plane.VALUES, [list(self.header)])

        if self.items:
            body = self.grid_range.offset(1, 0, len(self.items))
            for plane in planes:
                self.store.write_block(body, plane, blocks[plane])

        self.initial_range = self.grid_range
        for item in self.items:
            item.authorized_to_commit = True

        logger.info(f"Committed {len(self.items)} row(s) to {self.grid_range}")

    def commit(self):
        """Clear the region last read or committed and write every plane of every row."""
        self._commit(COMMIT_PLANES, contents_only=False)

    def commit_values(self):
        """Like ``commit`` but only values (formulas where set) are cleared and written."""
        self._commit((Plane.VALUES,), contents_only=True)
