"""
Tagged Statistic Results

A StatResult maps string tags to numbers. Each number keeps its kind
(integer, unsigned integer or floating point) so that downstream writers can
format counts and estimates differently:

    result.set_value("A", 12)                       -> INTEGER
    result.set_value("TajimaD", -0.5)               -> FLOAT
    result.set_value("Bin1", 3, NumberKind.UNSIGNED)

A SingleValueResult holds exactly one tag, fixed at construction, and refuses
writes to any other tag.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

import pandas as pd

from .errors import InvalidTagError, MissingTagError

Number = Union[int, float]


class NumberKind(Enum):
    INTEGER = "int"
    UNSIGNED = "unsigned"
    FLOAT = "double"


@dataclass(frozen=True)
class TaggedValue:
    """A number together with its kind."""
    kind: NumberKind
    value: Number

    @classmethod
    def of(cls, value: Number, kind: Optional[NumberKind] = None) -> "TaggedValue":
        """
        Build a tagged value, inferring the kind from the Python type if needed.

        Raises:
            ValueError: If an unsigned value is negative
            TypeError: If value is not a number
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            # numpy scalars expose item()
            if hasattr(value, "item"):
                value = value.item()
            else:
                raise TypeError(f"Not a number: {value!r}")
        if kind is None:
            kind = NumberKind.INTEGER if isinstance(value, int) else NumberKind.FLOAT
        if kind is NumberKind.FLOAT:
            value = float(value)
        else:
            value = int(value)
            if kind is NumberKind.UNSIGNED and value < 0:
                raise ValueError(f"Unsigned value cannot be negative: {value}")
        return cls(kind, value)

    def __str__(self) -> str:
        return str(self.value)


class StatResult:
    """Mapping of tags to numbers. Setting a tag overwrites any previous value."""

    def __init__(self):
        self._values: Dict[str, TaggedValue] = {}

    def set_value(self, tag: str, value: Number, kind: Optional[NumberKind] = None) -> None:
        self._values[tag] = TaggedValue.of(value, kind)

    def tagged_value(self, tag: str) -> TaggedValue:
        try:
            return self._values[tag]
        except KeyError:
            raise MissingTagError(f"No value found for tag: {tag}.") from None

    def value(self, tag: str) -> Number:
        """
        Return the plain number stored under a tag.

        Raises:
            MissingTagError: If nothing is stored under the tag
        """
        return self.tagged_value(tag).value

    def has_value(self, tag: str) -> bool:
        return tag in self._values

    def available_tags(self) -> List[str]:
        return sorted(self._values)

    def to_series(self, name: Optional[str] = None) -> pd.Series:
        """Export the values as a pandas Series indexed by tag, in tag order."""
        tags = self.available_tags()
        return pd.Series([self._values[t].value for t in tags], index=tags, name=name)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, tag: str) -> bool:
        return tag in self._values

    def __repr__(self) -> str:
        items = ", ".join(f"{t}={self._values[t]}" for t in self.available_tags())
        return f"{type(self).__name__}({items})"


class SingleValueResult(StatResult):
    """
    A result holding a single tag, initialised to 0.

    Examples:
        >>> r = SingleValueResult("BlockSize")
        >>> r.set_value("BlockSize", 4)
        >>> r.get()
        4
    """

    def __init__(self, name: str):
        super().__init__()
        self.name = name
        self._values[name] = TaggedValue.of(0)

    def set_value(self, tag: str, value: Number, kind: Optional[NumberKind] = None) -> None:
        if tag != self.name:
            raise InvalidTagError(
                f"Invalid tag name: {tag} (this result only holds {self.name})."
            )
        super().set_value(tag, value, kind)

    def set(self, value: Number, kind: Optional[NumberKind] = None) -> None:
        super().set_value(self.name, value, kind)

    def get(self) -> Number:
        return self.value(self.name)
