"""
ply_element.py - Element representations filled in by the payload decoders

The decoders never build a concrete record type themselves. They create a
fresh instance of whatever element type the caller hands to the Parser and
write each decoded property into it by name:

    elem = element_type()
    elem.set_scalar("x", 1.5)
    elem.set_list("vertex_index", np.array([0, 1, 2], dtype=np.int32))

Any class providing these methods can be used. DefaultElement stores the
values in a dict keyed by property name.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

Scalar = Union[int, float]


class PropertyAccess:
    """Capability a decoded element must provide."""

    def set_scalar(self, name: str, value: Scalar) -> None:
        raise NotImplementedError

    def set_list(self, name: str, values: np.ndarray) -> None:
        raise NotImplementedError

    def get_scalar(self, name: str) -> Optional[Scalar]:
        raise NotImplementedError

    def get_list(self, name: str) -> Optional[np.ndarray]:
        raise NotImplementedError


class DefaultElement(dict, PropertyAccess):
    """Schema-agnostic element: property name -> value."""

    def set_scalar(self, name: str, value: Scalar) -> None:
        self[name] = value

    def set_list(self, name: str, values: np.ndarray) -> None:
        self[name] = values

    def get_scalar(self, name: str) -> Optional[Scalar]:
        value = self.get(name)
        if isinstance(value, (np.ndarray, list, tuple)):
            return None
        return value

    def get_list(self, name: str) -> Optional[np.ndarray]:
        value = self.get(name)
        if value is None or isinstance(value, np.ndarray):
            return value
        if isinstance(value, (list, tuple)):
            return np.asarray(value)
        return None


def as_columns(records: Sequence[PropertyAccess],
               names: Optional[Iterable[str]] = None) -> Dict[str, np.ndarray]:
    """Gather scalar properties of a record sequence into numpy columns.

    Args:
        records: Decoded elements, e.g. ``ply.payload["vertex"]``
        names: Property names to collect (default: every scalar property of
            the first record, only available for dict-backed records)

    Returns:
        Dict of property name -> 1D array, one entry per record
    """
    if names is None:
        if not records:
            return {}
        first = records[0]
        if not isinstance(first, dict):
            raise TypeError("Property names are required for non-dict records")
        names = [k for k, v in first.items() if not isinstance(v, np.ndarray)]

    columns: Dict[str, np.ndarray] = {}
    for name in names:
        values: List[Any] = []
        for i, rec in enumerate(records):
            value = rec.get_scalar(name)
            if value is None:
                raise KeyError(f"Record {i} has no scalar property '{name}'")
            values.append(value)
        columns[name] = np.array(values)
    return columns
