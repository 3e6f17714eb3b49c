"""
ply_binary.py - Decoder for binary PLY payloads

Values are packed back to back with no padding or delimiters, each scalar
taking its kind's fixed width. A list property is its length (encoded as
the list's index type) followed by that many values. The byte order is set
for the whole file by the format line; both orders share one decoding loop
and differ only in the ByteOrder used to interpret the bytes.
"""

from __future__ import annotations

import struct
from typing import Any, BinaryIO, Callable, List, Union

import numpy as np

from .ply_element import DefaultElement, PropertyAccess
from .ply_errors import MalformedRecordError, UnexpectedEofError
from .ply_types import ElementDef, ListProperty, PropertyDef, ScalarProperty, ScalarType

# List payloads are read in pieces so a corrupt count cannot force one huge read
_CHUNK_SIZE = 1 << 16


class ByteOrder:
    """Interprets raw bytes as PLY scalars in one byte order."""

    def __init__(self, prefix: str):
        if prefix not in ("<", ">"):
            raise ValueError(f"Invalid byte order prefix: {prefix!r}")
        self.prefix = prefix
        self._structs = {s: struct.Struct(prefix + s.struct_code) for s in ScalarType}

    def __repr__(self) -> str:
        return f"ByteOrder({self.prefix!r})"

    def unpack_scalar(self, data: bytes, scalar: ScalarType) -> Union[int, float]:
        return self._structs[scalar].unpack(data)[0]

    def unpack_array(self, data: bytes, scalar: ScalarType) -> np.ndarray:
        dtype = scalar.dtype.newbyteorder(self.prefix)
        return np.frombuffer(data, dtype=dtype).astype(scalar.dtype)

    def pack_scalar(self, value: Union[int, float], scalar: ScalarType) -> bytes:
        return self._structs[scalar].pack(value)

    def pack_array(self, values: np.ndarray, scalar: ScalarType) -> bytes:
        dtype = scalar.dtype.newbyteorder(self.prefix)
        return np.asarray(values).astype(dtype).tobytes()


BIG_ENDIAN = ByteOrder(">")
LITTLE_ENDIAN = ByteOrder("<")


class BinaryElementReader:
    """Reads records of one element from a binary stream."""

    def __init__(self, element_def: ElementDef, byte_order: ByteOrder,
                 element_type: Callable[[], PropertyAccess] = DefaultElement):
        self._element_def = element_def
        self._byte_order = byte_order
        self._element_type = element_type

    def _read(self, stream: BinaryIO, size: int, prop: PropertyDef, index: int) -> bytes:
        data = stream.read(size)
        if len(data) < size:
            raise UnexpectedEofError(
                f"Unexpected end of binary data in record {index}: "
                f"needed {size} bytes, got {len(data)}",
                element=self._element_def.name,
                property_name=prop.name,
            )
        return data

    def _read_list(self, stream: BinaryIO, size: int, prop: PropertyDef, index: int) -> bytes:
        if size <= _CHUNK_SIZE:
            return self._read(stream, size, prop, index)
        chunks = []
        remaining = size
        while remaining:
            wanted = min(remaining, _CHUNK_SIZE)
            chunk = stream.read(wanted)
            chunks.append(chunk)
            remaining -= len(chunk)
            if len(chunk) < wanted:
                raise UnexpectedEofError(
                    f"Unexpected end of binary data in record {index}: "
                    f"needed {size} bytes, got {size - remaining}",
                    element=self._element_def.name,
                    property_name=prop.name,
                )
        return b"".join(chunks)

    def read_element(self, stream: BinaryIO, index: int = 0) -> Any:
        """Decode one record starting at the current stream position."""
        order = self._byte_order
        elem = self._element_type()
        for prop in self._element_def.properties.values():
            ptype = prop.type
            if isinstance(ptype, ScalarProperty):
                data = self._read(stream, ptype.scalar.width, prop, index)
                elem.set_scalar(prop.name, order.unpack_scalar(data, ptype.scalar))
            elif isinstance(ptype, ListProperty):
                data = self._read(stream, ptype.index_type.width, prop, index)
                raw_count = order.unpack_scalar(data, ptype.index_type)
                try:
                    count = ListProperty.length_of(raw_count, ptype.value_type.width)
                except ValueError as e:
                    raise MalformedRecordError(
                        f"{e} in record {index}",
                        element=self._element_def.name,
                        property_name=prop.name,
                        token=str(raw_count),
                    ) from None
                data = self._read_list(stream, count * ptype.value_type.width, prop, index)
                elem.set_list(prop.name, order.unpack_array(data, ptype.value_type))
            else:
                raise TypeError(f"Unsupported property type: {ptype!r}")
        return elem

    def read_records(self, stream: BinaryIO) -> List[Any]:
        """Read exactly ``count`` records."""
        return [self.read_element(stream, i) for i in range(self._element_def.count)]
