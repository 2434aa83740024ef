"""Ordered result sequence returned by table queries."""

from collections.abc import Sequence
from typing import Iterable, Iterator, Optional, TypeVar, Union, overload

T = TypeVar("T")


class RecordList(Sequence[T]):
    """Read-only sequence of rows with ``first`` and ``limit`` helpers.

    The rows are the table's own objects: mutating one mutates the table.
    """

    def __init__(self, items: Iterable[T] = ()):
        self._items = list(items)

    def first(self) -> Optional[T]:
        """Return the first row, or None when empty."""
        return self._items[0] if self._items else None

    def limit(self, count: int) -> "RecordList[T]":
        """Return at most ``count`` rows from the start."""
        if count < 0:
            raise ValueError("limit must not be negative")
        return RecordList(self._items[:count])

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> "RecordList[T]": ...

    def __getitem__(self, index: Union[int, slice]):
        if isinstance(index, slice):
            return RecordList(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __eq__(self, other) -> bool:
        if isinstance(other, RecordList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"RecordList({self._items!r})"
