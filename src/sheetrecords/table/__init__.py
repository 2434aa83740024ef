"""Record-style tables over grid regions."""

from .fields import FieldPlane
from .index import RowIndex
from .item import Item
from .records import RecordList
from .selector import And, Equals, Or, Selector, parse_criteria
from .table import Table

__all__ = [
    "FieldPlane",
    "RowIndex",
    "Item",
    "RecordList",
    "Selector",
    "Equals",
    "And",
    "Or",
    "parse_criteria",
    "Table",
]
