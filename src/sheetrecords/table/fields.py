"""Per-cell state held by a row."""

from dataclasses import dataclass
from typing import Any


def normalize(value: Any) -> Any:
    """Unset attributes are stored as empty strings."""
    return "" if value is None else value


@dataclass
class FieldPlane:
    """The five attributes tracked for one cell of a row."""

    value: Any = ""
    note: str = ""
    background: str = ""
    font_color: str = ""
    formula: str = ""

    def __post_init__(self):
        self.value = normalize(self.value)
        self.note = normalize(self.note)
        self.background = normalize(self.background)
        self.font_color = normalize(self.font_color)
        self.formula = normalize(self.formula)

    @property
    def write_value(self) -> Any:
        """What is written to the values plane: the formula wins over the value."""
        return self.formula if self.formula else self.value
