"""
ply_grammar.py - Line grammar of the PLY header

Each header line is classified on its own, without any state:

    ply
    format <ascii|binary_big_endian|binary_little_endian> <major>.<minor>
    comment <free text>
    obj_info <free text>
    element <name> <count>
    property <type> <name>
    property list <index type> <value type> <name>
    end_header

A line may end with LF, CR or CRLF and may carry trailing spaces or tabs.
Fields are separated by spaces or tabs. Anything else raises GrammarError.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, NamedTuple

from .ply_errors import GrammarError
from .ply_types import (
    ElementDef,
    Encoding,
    ListProperty,
    PropertyDef,
    ScalarProperty,
    ScalarType,
    Version,
)


class LineKind(Enum):
    MAGIC_NUMBER = "ply"
    FORMAT = "format"
    COMMENT = "comment"
    OBJ_INFO = "obj_info"
    ELEMENT = "element"
    PROPERTY = "property"
    END_HEADER = "end_header"


class Line(NamedTuple):
    kind: LineKind
    value: Any = None


_WS = r"[ \t]+"
_NAME = r"[A-Za-z_]\S*"

_line_end = re.compile(r"(?:\r\n|\r|\n)\Z")
_format = re.compile(rf"format{_WS}(\S+){_WS}(\d+)\.(\d+)")
_comment = re.compile(rf"comment(?:{_WS}(.*))?")
_obj_info = re.compile(rf"obj_info(?:{_WS}(.*))?")
_element = re.compile(rf"element{_WS}({_NAME}){_WS}(\d+)")
_property_list = re.compile(rf"property{_WS}list{_WS}(\S+){_WS}(\S+){_WS}({_NAME})")
_property_scalar = re.compile(rf"property{_WS}(\S+){_WS}({_NAME})")


def _strip(text: str) -> str:
    """Remove one line terminator and trailing blanks; reject embedded breaks."""
    body = _line_end.sub("", text, count=1)
    if "\r" in body or "\n" in body:
        raise GrammarError("Line break inside a line", text=text)
    return body.rstrip(" \t")


def _scalar(token: str, text: str) -> ScalarType:
    try:
        return ScalarType.from_token(token)
    except ValueError as e:
        raise GrammarError(str(e), text=text) from None


def parse_magic_number(text: str) -> None:
    if _strip(text) != "ply":
        raise GrammarError("Expected magic number 'ply'", text=text)


def parse_format(text: str) -> tuple[Encoding, Version]:
    m = _format.fullmatch(_strip(text))
    if not m:
        raise GrammarError("Expected 'format <encoding> <major>.<minor>'", text=text)
    try:
        encoding = Encoding(m.group(1))
    except ValueError:
        raise GrammarError(f"Unknown encoding '{m.group(1)}'", text=text) from None
    return encoding, Version(int(m.group(2)), int(m.group(3)))


def parse_comment(text: str) -> str:
    m = _comment.fullmatch(_strip(text))
    if not m:
        raise GrammarError("Expected 'comment <text>'", text=text)
    return m.group(1) or ""


def parse_obj_info(text: str) -> str:
    m = _obj_info.fullmatch(_strip(text))
    if not m:
        raise GrammarError("Expected 'obj_info <text>'", text=text)
    return m.group(1) or ""


def parse_element(text: str) -> ElementDef:
    m = _element.fullmatch(_strip(text))
    if not m:
        raise GrammarError("Expected 'element <name> <count>'", text=text)
    return ElementDef(m.group(1), int(m.group(2)))


def parse_property(text: str) -> PropertyDef:
    body = _strip(text)
    m = _property_list.fullmatch(body)
    if m:
        index_type = _scalar(m.group(1), text)
        value_type = _scalar(m.group(2), text)
        return PropertyDef(m.group(3), ListProperty(index_type, value_type))
    m = _property_scalar.fullmatch(body)
    if m:
        return PropertyDef(m.group(2), ScalarProperty(_scalar(m.group(1), text)))
    raise GrammarError(
        "Expected 'property <type> <name>' or 'property list <type> <type> <name>'",
        text=text,
    )


def parse_end_header(text: str) -> None:
    if _strip(text) != "end_header":
        raise GrammarError("Expected 'end_header'", text=text)


def parse_data_line(text: str) -> List[str]:
    """Split an ASCII payload line into its whitespace separated tokens."""
    return _strip(text).split()


_keywords = {
    "ply": lambda t: parse_magic_number(t) or Line(LineKind.MAGIC_NUMBER),
    "format": lambda t: Line(LineKind.FORMAT, parse_format(t)),
    "comment": lambda t: Line(LineKind.COMMENT, parse_comment(t)),
    "obj_info": lambda t: Line(LineKind.OBJ_INFO, parse_obj_info(t)),
    "element": lambda t: Line(LineKind.ELEMENT, parse_element(t)),
    "property": lambda t: Line(LineKind.PROPERTY, parse_property(t)),
    "end_header": lambda t: parse_end_header(t) or Line(LineKind.END_HEADER),
}


def classify(text: str) -> Line:
    """Classify one header line."""
    body = _strip(text)
    keyword = re.split(r"[ \t]", body, maxsplit=1)[0]
    handler = _keywords.get(keyword)
    if handler is None:
        if not body:
            raise GrammarError("Empty header line", text=text)
        raise GrammarError(f"Unknown keyword '{keyword}'", text=text)
    return handler(body)
