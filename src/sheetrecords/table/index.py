"""Lookup of rows by the value of one field."""

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from .compare import as_instant

if TYPE_CHECKING:
    from .item import Item

logger = logging.getLogger(__name__)


def _index_key(value: Any) -> Any:
    """Dates are keyed by instant so that equal dates share a slot."""
    instant = as_instant(value, parse_strings=False)
    return instant if instant is not None else value


class RowIndex:
    """Maps a field's value to the row holding it.

    Keys are not unique: a later row with the same value replaces the
    earlier one. The index follows ``add`` but is not updated by deletes or
    sorts; call ``Table.rebuild_index`` after those if lookups must stay exact.
    """

    def __init__(self, field: str, items: Iterable["Item"] = ()):
        self.field = field
        self._rows: dict[Any, "Item"] = {}
        for item in items:
            self.add(item)

    def add(self, item: "Item"):
        key = _index_key(item.get_field_value(self.field))
        if key in self._rows and self._rows[key] is not item:
            logger.debug(f"Index on '{self.field}' overwrites duplicate key {key!r}")
        self._rows[key] = item

    def get(self, value: Any) -> Optional["Item"]:
        try:
            return self._rows.get(_index_key(value))
        except TypeError:
            # unhashable lookup values never match
            return None

    def keys(self) -> list[Any]:
        return list(self._rows)

    def __contains__(self, value: Any) -> bool:
        return self.get(value) is not None

    def __len__(self) -> int:
        return len(self._rows)
