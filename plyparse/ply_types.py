"""
ply_types.py - Schema types declared by a PLY header

A header declares elements (e.g. "vertex", "face"), each with an ordered
list of properties. A property is either a scalar of one of eight numeric
kinds, or a list whose length is stored as a scalar of its own kind ahead of
the values:

    property float x                      -> ScalarProperty(FLOAT)
    property list uchar int vertex_index  -> ListProperty(UCHAR, INT)

Dicts are used for every name -> definition mapping; their insertion order
is the column order of the payload.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

import numpy as np

from .ply_errors import DuplicateElementError, DuplicatePropertyError


@dataclass(frozen=True)
class Version:
    major: int = 1
    minor: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


class Encoding(Enum):
    ASCII = "ascii"
    BINARY_BIG_ENDIAN = "binary_big_endian"
    BINARY_LITTLE_ENDIAN = "binary_little_endian"

    @property
    def byte_order(self) -> str:
        """struct byte order prefix, empty for ASCII."""
        return _BYTE_ORDERS[self]


_BYTE_ORDERS = {
    Encoding.ASCII: "",
    Encoding.BINARY_BIG_ENDIAN: ">",
    Encoding.BINARY_LITTLE_ENDIAN: "<",
}


class ScalarType(Enum):
    CHAR = "char"
    UCHAR = "uchar"
    SHORT = "short"
    USHORT = "ushort"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DOUBLE = "double"

    @classmethod
    def from_token(cls, token: str) -> "ScalarType":
        """Look up a scalar type by its canonical or sized name ("int", "int32")."""
        try:
            return _SCALAR_TOKENS[token]
        except KeyError:
            raise ValueError(f"Unknown scalar type: '{token}'") from None

    @property
    def token(self) -> str:
        return self.value

    @property
    def alias(self) -> str:
        return _SCALAR_TABLE[self][0]

    @property
    def struct_code(self) -> str:
        return _SCALAR_TABLE[self][1]

    @property
    def width(self) -> int:
        return _SCALAR_TABLE[self][2]

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_SCALAR_TABLE[self][3])

    @property
    def is_integer(self) -> bool:
        return self not in (ScalarType.FLOAT, ScalarType.DOUBLE)

    @property
    def bounds(self) -> tuple[int, int]:
        """Inclusive value range of an integer kind."""
        info = np.iinfo(self.dtype)
        return int(info.min), int(info.max)

    def coerce(self, value: Union[int, float]) -> Union[int, float]:
        """Convert a Python number into a value representable by this kind.

        Raises ValueError when an integer is out of range.
        """
        if self.is_integer:
            lo, hi = self.bounds
            if not lo <= value <= hi:
                raise ValueError(f"{value} out of range for {self.token} [{lo}, {hi}]")
            return int(value)
        if self is ScalarType.FLOAT:
            # out-of-range values saturate to inf
            with np.errstate(over="ignore"):
                return float(np.float32(value))
        return float(value)


# alias token, struct code, byte width, numpy type
_SCALAR_TABLE = {
    ScalarType.CHAR: ("int8", "b", 1, np.int8),
    ScalarType.UCHAR: ("uint8", "B", 1, np.uint8),
    ScalarType.SHORT: ("int16", "h", 2, np.int16),
    ScalarType.USHORT: ("uint16", "H", 2, np.uint16),
    ScalarType.INT: ("int32", "i", 4, np.int32),
    ScalarType.UINT: ("uint32", "I", 4, np.uint32),
    ScalarType.FLOAT: ("float32", "f", 4, np.float32),
    ScalarType.DOUBLE: ("float64", "d", 8, np.float64),
}

_SCALAR_TOKENS = {}
for _scalar, _info in _SCALAR_TABLE.items():
    _SCALAR_TOKENS[_scalar.value] = _scalar
    _SCALAR_TOKENS[_info[0]] = _scalar


@dataclass(frozen=True)
class ScalarProperty:
    scalar: ScalarType

    def __str__(self) -> str:
        return self.scalar.token


@dataclass(frozen=True)
class ListProperty:
    index_type: ScalarType
    value_type: ScalarType

    def __str__(self) -> str:
        return f"list {self.index_type.token} {self.value_type.token}"

    @staticmethod
    def length_of(count: Union[int, float], width: int = 1) -> int:
        """Validate a decoded list count.

        Raises ValueError unless it is a non-negative integer whose values,
        at ``width`` bytes each, fit in an addressable buffer.
        """
        if isinstance(count, float):
            if not count.is_integer():
                raise ValueError(f"List length {count} is not an integer")
            count = int(count)
        if count < 0:
            raise ValueError(f"Negative list length {count}")
        if count * width > sys.maxsize:
            raise ValueError(f"List length {count} too large")
        return count


PropertyType = Union[ScalarProperty, ListProperty]


@dataclass(frozen=True)
class PropertyDef:
    name: str
    type: PropertyType

    def __str__(self) -> str:
        return f"property {self.type} {self.name}"


@dataclass
class ElementDef:
    """An element declaration and its properties, in declaration order."""

    name: str
    count: int
    properties: Dict[str, PropertyDef] = field(default_factory=dict)

    def add_property(self, prop: PropertyDef) -> None:
        if prop.name in self.properties:
            raise DuplicatePropertyError(
                f"Property '{prop.name}' already defined on element '{self.name}'"
            )
        self.properties[prop.name] = prop

    def __str__(self) -> str:
        return f"element {self.name} {self.count}"


@dataclass
class Header:
    encoding: Encoding = Encoding.ASCII
    version: Version = field(default_factory=Version)
    obj_infos: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    elements: Dict[str, ElementDef] = field(default_factory=dict)

    def add_element(self, element: ElementDef) -> None:
        if element.name in self.elements:
            raise DuplicateElementError(f"Element '{element.name}' already defined")
        self.elements[element.name] = element


def _values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return np.array_equal(a, b)
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_values_equal(x, y) for x, y in zip(a, b))
    return a == b


@dataclass(eq=False)
class Ply:
    """A parsed file: the header and, per element name, one record per declared count.

    Equality compares list properties by value, so payloads holding numpy
    arrays can be compared with ``==``.
    """

    header: Header = field(default_factory=Header)
    payload: Dict[str, List[Any]] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ply):
            return NotImplemented
        return self.header == other.header and _values_equal(self.payload, other.payload)
