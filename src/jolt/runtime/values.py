"""
Runtime values for the Jolt interpreter.

Every value is one of four variants: JoltBool, JoltNum, JoltString and
JoltList. Each variant knows its type tag (used in error messages), how it
prints, how it compares with another value, and what a for-loop yields when
iterating it.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional


class JoltValue:
    """Base class for all runtime values."""

    type: str = "value"

    def iterable(self) -> Optional[Iterator["JoltValue"]]:
        """The sequence a for-loop yields for this value, or None."""
        return None

    def equals(self, other: "JoltValue") -> bool:
        """Language-level equality; values of different variants are unequal."""
        return False

    def to_python(self) -> Any:
        raise NotImplementedError


@dataclass
class JoltBool(JoltValue):
    value: bool

    type = "bool"

    def equals(self, other: JoltValue) -> bool:
        return isinstance(other, JoltBool) and self.value == other.value

    def to_python(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass
class JoltNum(JoltValue):
    """A 64-bit float; there is no separate integer type."""
    value: float

    type = "num"

    def __post_init__(self):
        self.value = float(self.value)

    def is_finite(self) -> bool:
        return math.isfinite(self.value)

    def iterable(self) -> Optional[Iterator[JoltValue]]:
        # 0 up to value (exclusive), truncated toward zero
        if not self.is_finite():
            return None
        return (JoltNum(i) for i in range(int(self.value)))

    def equals(self, other: JoltValue) -> bool:
        return isinstance(other, JoltNum) and self.value == other.value

    def to_python(self) -> float:
        return self.value

    def __str__(self) -> str:
        return format_number(self.value)


@dataclass
class JoltString(JoltValue):
    value: str

    type = "string"

    def iterable(self) -> Optional[Iterator[JoltValue]]:
        return (JoltString(ch) for ch in self.value)

    def equals(self, other: JoltValue) -> bool:
        return isinstance(other, JoltString) and self.value == other.value

    def to_python(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass
class JoltList(JoltValue):
    """A mutable, ordered sequence of values."""
    elements: List[JoltValue] = field(default_factory=list)

    type = "list"

    def __len__(self) -> int:
        return len(self.elements)

    def iterable(self) -> Optional[Iterator[JoltValue]]:
        # Snapshot, so element assignment inside a loop body is safe
        return iter(list(self.elements))

    def equals(self, other: JoltValue) -> bool:
        if not isinstance(other, JoltList) or len(self) != len(other):
            return False
        return all(a.equals(b) for a, b in zip(self.elements, other.elements))

    def to_python(self) -> list:
        return [element.to_python() for element in self.elements]

    def __str__(self) -> str:
        if not self.elements:
            return "[]"
        return "[ " + ", ".join(str(element) for element in self.elements) + " ]"


def format_number(value: float) -> str:
    """Print a number without a trailing '.0' when it is integral."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def jolt_value(data: Any) -> JoltValue:
    """Wrap a Python object as a runtime value."""
    if isinstance(data, JoltValue):
        return data
    if isinstance(data, bool):
        return JoltBool(data)
    if isinstance(data, (int, float)):
        return JoltNum(data)
    if isinstance(data, str):
        return JoltString(data)
    if isinstance(data, (list, tuple)):
        return JoltList([jolt_value(item) for item in data])
    raise TypeError(f"cannot convert {type(data).__name__} to a Jolt value")
