"""
ply_ascii.py - Decoder for ASCII PLY payloads

One record per line, values separated by whitespace, in the order the
properties were declared. A list property is written as its length followed
by that many values:

    property float x
    property list uchar int vertex_index

    0.5 3 0 1 2      -> {"x": 0.5, "vertex_index": array([0, 1, 2])}

Extra tokens at the end of a line are ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Any, BinaryIO, Callable, List, Optional, TextIO, Union

import numpy as np

from .ply_element import DefaultElement, PropertyAccess
from .ply_errors import GrammarError, LocationTracker, MalformedRecordError, UnexpectedEofError
from .ply_grammar import parse_data_line
from .ply_types import ElementDef, ListProperty, PropertyDef, ScalarProperty, ScalarType

logger = logging.getLogger(__name__)

_int_token = re.compile(r"[+-]?\d+")
_float_token = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def parse_scalar(token: str, scalar: ScalarType) -> Union[int, float]:
    """Parse one text token as the given scalar kind.

    Raises ValueError for non-numeric text, a float where an integer is
    expected, or an integer outside the kind's range.
    """
    if scalar.is_integer:
        if not _int_token.fullmatch(token):
            raise ValueError(f"'{token}' is not an integer")
        return scalar.coerce(int(token))
    if not _float_token.fullmatch(token):
        raise ValueError(f"'{token}' is not a number")
    return scalar.coerce(float(token))


class AsciiElementReader:
    """Reads records of one element from ASCII text."""

    def __init__(self, element_def: ElementDef,
                 element_type: Callable[[], PropertyAccess] = DefaultElement):
        self._element_def = element_def
        self._element_type = element_type

    def _error(self, message: str, line: Optional[int], text: str,
               prop: Optional[PropertyDef] = None, token: Optional[str] = None) -> MalformedRecordError:
        return MalformedRecordError(
            message,
            line=line,
            text=text,
            element=self._element_def.name,
            property_name=prop.name if prop is not None else None,
            token=token,
        )

    def _parse(self, token: str, scalar: ScalarType, prop: PropertyDef,
               line: Optional[int], text: str) -> Union[int, float]:
        try:
            return parse_scalar(token, scalar)
        except ValueError as e:
            raise self._error(f"Invalid {scalar.token} value: {e}", line, text, prop, token) from None

    def read_line(self, text: str, line: Optional[int] = None) -> Any:
        """Decode one record from a single line of text."""
        try:
            tokens = parse_data_line(text)
        except GrammarError as e:
            raise self._error(e.message, line, text) from None

        elem = self._element_type()
        pos = 0
        for prop in self._element_def.properties.values():
            ptype = prop.type
            if pos >= len(tokens):
                raise self._error("Missing value", line, text, prop)

            if isinstance(ptype, ScalarProperty):
                elem.set_scalar(prop.name, self._parse(tokens[pos], ptype.scalar, prop, line, text))
                pos += 1
            elif isinstance(ptype, ListProperty):
                count_token = tokens[pos]
                count = self._parse(count_token, ptype.index_type, prop, line, text)
                try:
                    count = ListProperty.length_of(count)
                except ValueError as e:
                    raise self._error(str(e), line, text, prop, count_token) from None
                pos += 1
                values = tokens[pos:pos + count]
                if len(values) < count:
                    raise self._error(
                        f"Expected {count} list values, found {len(values)}", line, text, prop
                    )
                parsed = [self._parse(v, ptype.value_type, prop, line, text) for v in values]
                elem.set_list(prop.name, np.array(parsed, dtype=ptype.value_type.dtype))
                pos += count
            else:
                raise TypeError(f"Unsupported property type: {ptype!r}")

        if pos < len(tokens):
            logger.debug(
                f"Line {line}: ignoring {len(tokens) - pos} trailing token(s) "
                f"in '{self._element_def.name}' record"
            )
        return elem

    def read_records(self, stream: Union[BinaryIO, TextIO],
                     location: Optional[LocationTracker] = None) -> List[Any]:
        """Read exactly ``count`` records, one line each."""
        if location is None:
            location = LocationTracker()
            location.advance()

        records = []
        for i in range(self._element_def.count):
            raw = stream.readline()
            if not raw:
                raise UnexpectedEofError(
                    f"Expected {self._element_def.count} records, found {i}",
                    line=location.line,
                    element=self._element_def.name,
                )
            if isinstance(raw, bytes):
                try:
                    text = raw.decode("ascii")
                except UnicodeDecodeError:
                    raise self._error(
                        "Non-ASCII bytes in record", location.line, raw.decode("latin-1")
                    ) from None
            else:
                text = raw
            records.append(self.read_line(text, location.line))
            location.advance()
        return records
