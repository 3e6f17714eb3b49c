"""
ply_parser.py - Reader for PLY (Polygon File Format) files

File layout:
- Header: text lines from "ply" to "end_header" declaring the encoding,
  comments, obj_info lines, and the elements with their properties
- Payload: for each element in declaration order, ``count`` records encoded
  as ASCII lines or packed big/little-endian binary

Usage:
    import plyparse as pp

    # Whole file (path or binary file object)
    ply = pp.load("bunny.ply")
    xs = [v["x"] for v in ply.payload["vertex"]]

    # Header only
    header = pp.load_header("bunny.ply")

    # Parse from bytes or str
    ply = pp.loads(b"ply\\nformat ascii 1.0\\nend_header\\n")

    # Custom element representation
    parser = pp.Parser(element_type=MyVertex)
    ply = parser.read_ply(stream)

    # Element by element, after reading the header separately
    with open("bunny.ply", "rb") as f:
        header = parser.read_header(f)
        for element_def in header.elements.values():
            records = parser.read_payload_for_element(f, element_def, header.encoding)
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional, TextIO, Union

from . import ply_grammar as grammar
from .ply_ascii import AsciiElementReader
from .ply_binary import BIG_ENDIAN, LITTLE_ENDIAN, BinaryElementReader
from .ply_element import DefaultElement, PropertyAccess
from .ply_errors import (
    DuplicateElementError,
    DuplicatePropertyError,
    GrammarError,
    InvalidHeaderError,
    InvalidInputError,
    LocationTracker,
    MissingFormatError,
    PropertyBeforeElementError,
    UnexpectedEofError,
)
from .ply_grammar import Line, LineKind
from .ply_types import ElementDef, Encoding, Header, Ply, Version

logger = logging.getLogger(__name__)


def _decode_header_line(raw: Union[bytes, str], location: LocationTracker) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidInputError(
            "Header line is not valid UTF-8",
            line=location.line,
            text=raw.decode("latin-1"),
            cause=str(e),
        ) from None


class Parser:
    """Reads PLY headers and payloads into ``element_type`` instances.

    The parser keeps no state between calls; one instance can be shared by
    independent reads as long as each uses its own stream.
    """

    def __init__(self, element_type: Callable[[], PropertyAccess] = DefaultElement):
        self.element_type = element_type

    def read_ply(self, stream: BinaryIO) -> Ply:
        """Read header and payload."""
        location = LocationTracker()
        header = self._read_header(stream, location)
        payload = self._read_payload(stream, location, header)
        return Ply(header=header, payload=payload)

    def read_header(self, stream: Union[BinaryIO, TextIO]) -> Header:
        """Read the header only; the stream is left at the first payload byte."""
        return self._read_header(stream, LocationTracker())

    def read_header_line(self, text: str) -> Line:
        """Classify one header line."""
        try:
            return grammar.classify(text)
        except GrammarError as e:
            raise InvalidInputError("Couldn't parse line.", text=text, cause=e.message) from None

    def read_payload(self, stream: BinaryIO, header: Header) -> Dict[str, List[Any]]:
        """Read the payload of every element declared in ``header``."""
        return self._read_payload(stream, LocationTracker(), header)

    def read_payload_for_element(self, stream: Union[BinaryIO, TextIO], element_def: ElementDef,
                                 encoding: Encoding,
                                 location: Optional[LocationTracker] = None) -> List[Any]:
        """Read the ``count`` records of a single element.

        Args:
            stream: Stream positioned at the first record of the element
            element_def: The element's declaration
            encoding: Payload encoding from the header's format line
            location: Line tracker for ASCII diagnostics (default: start at line 1)

        Returns:
            List of ``element_type`` instances, one per record
        """
        if location is None:
            location = LocationTracker()
            location.advance()
        logger.debug(f"Reading {element_def.count} '{element_def.name}' records ({encoding.value})")
        if encoding is Encoding.ASCII:
            return AsciiElementReader(element_def, self.element_type).read_records(stream, location)
        if encoding is Encoding.BINARY_BIG_ENDIAN:
            return BinaryElementReader(element_def, BIG_ENDIAN, self.element_type).read_records(stream)
        if encoding is Encoding.BINARY_LITTLE_ENDIAN:
            return BinaryElementReader(element_def, LITTLE_ENDIAN, self.element_type).read_records(stream)
        raise ValueError(f"Unknown encoding: {encoding!r}")

    def read_ascii_element(self, line: str, element_def: ElementDef) -> Any:
        return AsciiElementReader(element_def, self.element_type).read_line(line)

    def read_big_endian_element(self, stream: BinaryIO, element_def: ElementDef) -> Any:
        return BinaryElementReader(element_def, BIG_ENDIAN, self.element_type).read_element(stream)

    def read_little_endian_element(self, stream: BinaryIO, element_def: ElementDef) -> Any:
        return BinaryElementReader(element_def, LITTLE_ENDIAN, self.element_type).read_element(stream)

    def _read_header(self, stream: Union[BinaryIO, TextIO], location: LocationTracker) -> Header:
        location.advance()
        line_str = _decode_header_line(stream.readline(), location)
        if not line_str:
            raise InvalidHeaderError(
                "Expected magic number 'ply', found end of stream", line=location.line
            )
        try:
            first = grammar.classify(line_str)
        except GrammarError as e:
            raise InvalidHeaderError(
                f"Expected magic number 'ply'.\n\tError: {e.message}",
                line=location.line,
                text=line_str,
            ) from None
        if first.kind is not LineKind.MAGIC_NUMBER:
            raise InvalidHeaderError(
                f"Expected magic number 'ply', but saw {first.kind.name}.",
                line=location.line,
                text=line_str,
            )

        form_ver: Optional[tuple[Encoding, Version]] = None
        obj_infos: List[str] = []
        comments: List[str] = []
        header = Header()
        current: Optional[ElementDef] = None

        location.advance()
        while True:
            line_str = _decode_header_line(stream.readline(), location)
            if not line_str:
                raise UnexpectedEofError(
                    "Unexpected end of stream before 'end_header'", line=location.line
                )
            try:
                line = grammar.classify(line_str)
            except GrammarError as e:
                raise InvalidInputError(
                    "Couldn't parse line.", line=location.line, text=line_str, cause=e.message
                ) from None

            if line.kind is LineKind.MAGIC_NUMBER:
                raise InvalidHeaderError(
                    "Unexpected repeated magic number 'ply'.", line=location.line, text=line_str
                )
            elif line.kind is LineKind.FORMAT:
                if form_ver is None:
                    form_ver = line.value
                elif form_ver != line.value:
                    encoding, version = line.value
                    prev_encoding, prev_version = form_ver
                    raise InvalidHeaderError(
                        "Found contradicting format definition:\n"
                        f"\tEncoding: {encoding.value}, Version: {version}\n"
                        "previous definition:\n"
                        f"\tEncoding: {prev_encoding.value}, Version: {prev_version}",
                        line=location.line,
                        text=line_str,
                    )
            elif line.kind is LineKind.OBJ_INFO:
                obj_infos.append(line.value)
            elif line.kind is LineKind.COMMENT:
                comments.append(line.value)
            elif line.kind is LineKind.ELEMENT:
                element_def = line.value
                if element_def.name in header.elements:
                    raise DuplicateElementError(
                        f"Element '{element_def.name}' already defined.",
                        line=location.line,
                        text=line_str,
                    )
                header.add_element(element_def)
                current = element_def
            elif line.kind is LineKind.PROPERTY:
                prop = line.value
                if current is None:
                    raise PropertyBeforeElementError(
                        f"Property '{prop.name}' found without preceding element.",
                        line=location.line,
                        text=line_str,
                    )
                if prop.name in current.properties:
                    raise DuplicatePropertyError(
                        f"Property '{prop.name}' already defined on element '{current.name}'.",
                        line=location.line,
                        text=line_str,
                    )
                current.add_property(prop)
            elif line.kind is LineKind.END_HEADER:
                location.advance()
                break
            location.advance()

        if form_ver is None:
            raise MissingFormatError("No format line found.", line=location.line)

        header.encoding, header.version = form_ver
        header.obj_infos = obj_infos
        header.comments = comments
        logger.debug(
            f"Read header: {header.encoding.value} {header.version}, "
            f"{len(header.elements)} element(s), payload starts at line {location.line}"
        )
        return header

    def _read_payload(self, stream: BinaryIO, location: LocationTracker,
                      header: Header) -> Dict[str, List[Any]]:
        payload: Dict[str, List[Any]] = {}
        for name, element_def in header.elements.items():
            payload[name] = self.read_payload_for_element(stream, element_def, header.encoding, location)
        return payload


# Convenience functions


def load(source: Union[str, Path, BinaryIO],
         element_type: Callable[[], PropertyAccess] = DefaultElement) -> Ply:
    """Load a PLY file.

    Args:
        source: File path (str or Path) or binary file object
        element_type: Class (or factory) used for every decoded record

    Returns:
        Ply with the header and the decoded payload

    Example:
        ply = pp.load("cube.ply")
        faces = ply.payload["face"]
    """
    parser = Parser(element_type)
    if isinstance(source, (str, Path)):
        with open(source, "rb") as f:
            return parser.read_ply(f)
    return parser.read_ply(source)


def load_header(source: Union[str, Path, BinaryIO]) -> Header:
    """Load only the header of a PLY file.

    Example:
        header = pp.load_header("cube.ply")
        print(header.elements["vertex"].count)
    """
    parser = Parser()
    if isinstance(source, (str, Path)):
        with open(source, "rb") as f:
            return parser.read_header(f)
    return parser.read_header(source)


def loads(data: Union[bytes, str],
          element_type: Callable[[], PropertyAccess] = DefaultElement) -> Ply:
    """Parse a PLY file held in memory.

    Args:
        data: File content; str is encoded as UTF-8

    Example:
        ply = pp.loads("ply\\nformat ascii 1.0\\nelement point 1\\n"
                       "property int x\\nend_header\\n5\\n")
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return load(io.BytesIO(data), element_type)


def classify_line(text: str) -> Line:
    """Classify a single header line; raises InvalidInputError if it is not valid."""
    return Parser().read_header_line(text)
