"""
ply_writer.py - Writer for PLY files

The header is written in a fixed order: magic number, format line, comments,
obj_info lines, then each element followed by its properties. The payload
is written in the header's encoding. Records are read back out of the
element representation through get_scalar / get_list.

Usage:
    import plyparse as pp

    pp.dump(ply, "out.ply")
    data = pp.dumps(ply)

    with pp.PlyWriter("out.ply") as writer:
        writer.write_header(header)
        writer.write_payload(header, payload)
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Sequence, Union

import numpy as np

from .ply_binary import BIG_ENDIAN, LITTLE_ENDIAN, ByteOrder
from .ply_types import ElementDef, Encoding, Header, ListProperty, Ply, ScalarProperty, ScalarType


def format_header(header: Header) -> str:
    """Render a header as text, ending with the end_header line."""
    lines = ["ply", f"format {header.encoding.value} {header.version}"]
    for c in header.comments:
        lines.append(f"comment {c}".rstrip())
    for o in header.obj_infos:
        lines.append(f"obj_info {o}".rstrip())
    for element_def in header.elements.values():
        lines.append(str(element_def))
        for prop in element_def.properties.values():
            lines.append(str(prop))
    lines.append("end_header")
    return "\n".join(lines) + "\n"


def _format_number(value: Union[int, float], scalar: ScalarType) -> str:
    if scalar.is_integer:
        return str(value)
    if scalar is ScalarType.FLOAT:
        return str(np.float32(value))
    return repr(float(value))


def _check_list(values: np.ndarray, scalar: ScalarType, name: str) -> np.ndarray:
    if values.ndim != 1:
        raise ValueError(f"List property '{name}' must be one-dimensional, got shape {values.shape}")
    if scalar.is_integer and values.size:
        lo, hi = scalar.bounds
        if values.min() < lo or values.max() > hi:
            raise ValueError(f"List property '{name}' has values outside {scalar.token} range [{lo}, {hi}]")
    return values


class PlyWriter:
    """Writer for PLY files in any of the three encodings."""

    def __init__(self, dest: Union[str, Path, BinaryIO]):
        if isinstance(dest, (str, Path)):
            self._file = open(dest, "wb")
            self._owns_file = True
        else:
            self._file = dest
            self._owns_file = False

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_file:
            self._file.close()

    def write_header(self, header: Header):
        self._file.write(format_header(header).encode("utf-8"))

    def write_payload(self, header: Header, payload: Dict[str, Sequence[Any]]):
        """Write each element's records in header order."""
        for name, element_def in header.elements.items():
            if name not in payload:
                raise ValueError(f"Payload has no records for element '{name}'")
            records = payload[name]
            if len(records) != element_def.count:
                raise ValueError(
                    f"Element '{name}' declares {element_def.count} records, payload has {len(records)}"
                )
            if header.encoding is Encoding.ASCII:
                for elem in records:
                    self._write_ascii_record(elem, element_def)
            elif header.encoding is Encoding.BINARY_BIG_ENDIAN:
                for elem in records:
                    self._write_binary_record(elem, element_def, BIG_ENDIAN)
            elif header.encoding is Encoding.BINARY_LITTLE_ENDIAN:
                for elem in records:
                    self._write_binary_record(elem, element_def, LITTLE_ENDIAN)
            else:
                raise ValueError(f"Unknown encoding: {header.encoding!r}")

    def write_all(self, ply: Ply):
        self.write_header(ply.header)
        self.write_payload(ply.header, ply.payload)

    def _scalar_value(self, elem: Any, name: str, scalar: ScalarType) -> Union[int, float]:
        value = elem.get_scalar(name)
        if value is None:
            raise ValueError(f"Record has no scalar property '{name}'")
        return scalar.coerce(value)

    def _list_values(self, elem: Any, name: str, scalar: ScalarType) -> np.ndarray:
        values = elem.get_list(name)
        if values is None:
            raise ValueError(f"Record has no list property '{name}'")
        return _check_list(np.asarray(values), scalar, name)

    def _write_ascii_record(self, elem: Any, element_def: ElementDef):
        parts: List[str] = []
        for prop in element_def.properties.values():
            ptype = prop.type
            if isinstance(ptype, ScalarProperty):
                value = self._scalar_value(elem, prop.name, ptype.scalar)
                parts.append(_format_number(value, ptype.scalar))
            elif isinstance(ptype, ListProperty):
                values = self._list_values(elem, prop.name, ptype.value_type)
                parts.append(_format_number(ptype.index_type.coerce(len(values)), ptype.index_type))
                parts.extend(_format_number(v, ptype.value_type) for v in values.tolist())
            else:
                raise TypeError(f"Unsupported property type: {ptype!r}")
        self._file.write((" ".join(parts) + "\n").encode("ascii"))

    def _write_binary_record(self, elem: Any, element_def: ElementDef, order: ByteOrder):
        for prop in element_def.properties.values():
            ptype = prop.type
            if isinstance(ptype, ScalarProperty):
                value = self._scalar_value(elem, prop.name, ptype.scalar)
                self._file.write(order.pack_scalar(value, ptype.scalar))
            elif isinstance(ptype, ListProperty):
                values = self._list_values(elem, prop.name, ptype.value_type)
                count = ptype.index_type.coerce(len(values))
                self._file.write(order.pack_scalar(count, ptype.index_type))
                self._file.write(order.pack_array(values, ptype.value_type))
            else:
                raise TypeError(f"Unsupported property type: {ptype!r}")


# Convenience functions


def dump(ply: Ply, dest: Union[str, Path, BinaryIO]):
    """Write a Ply to a file path or binary file object.

    Example:
        pp.dump(ply, "out.ply")
    """
    with PlyWriter(dest) as writer:
        writer.write_all(ply)


def dumps(ply: Ply) -> bytes:
    """Serialize a Ply to bytes.

    Example:
        data = pp.dumps(ply)
    """
    buf = io.BytesIO()
    dump(ply, buf)
    return buf.getvalue()
