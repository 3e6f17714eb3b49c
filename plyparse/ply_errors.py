"""
ply_errors.py - Exceptions raised while reading PLY files

Every error carries the 1-based line number when it is known, the raw
offending text when it is available, and a human-readable cause. The
message is assembled the same way for all of them:

    Line 7: Expected 2 list values, found 1
        String: '3 0 1'
"""

from __future__ import annotations

from typing import Optional


class PlyError(Exception):
    """Base class for all PLY parsing errors."""

    def __init__(self, message: str, line: Optional[int] = None, text: Optional[str] = None):
        self.message = message
        self.line = line
        self.text = text
        full_msg = message
        if line is not None:
            full_msg = f"Line {line}: {message}"
        if text is not None:
            shown = text.rstrip("\r\n")
            full_msg += f"\n\tString: {shown!r}"
        super().__init__(full_msg)


class GrammarError(PlyError):
    """A single header or data line does not match the grammar."""


class InvalidInputError(PlyError):
    """A header line could not be classified."""

    def __init__(self, message: str, line: Optional[int] = None, text: Optional[str] = None,
                 cause: Optional[str] = None):
        self.cause = cause
        if cause:
            message = f"{message}\n\tError: {cause}"
        super().__init__(message, line, text)


class InvalidHeaderError(PlyError):
    """The header is structurally wrong (magic number or format line)."""


class DuplicateElementError(PlyError):
    """An element name was declared twice."""


class DuplicatePropertyError(PlyError):
    """A property name was declared twice on the same element."""


class PropertyBeforeElementError(PlyError):
    """A property line appeared before any element line."""


class MissingFormatError(PlyError):
    """The header ended without a format line."""


class MalformedRecordError(PlyError):
    """A payload record could not be decoded."""

    def __init__(self, message: str, line: Optional[int] = None, text: Optional[str] = None,
                 element: Optional[str] = None, property_name: Optional[str] = None,
                 token: Optional[str] = None):
        self.element = element
        self.property_name = property_name
        self.token = token
        if element is not None and property_name is not None:
            message = f"{message} (element '{element}', property '{property_name}')"
        elif element is not None:
            message = f"{message} (element '{element}')"
        super().__init__(message, line, text)


class UnexpectedEofError(PlyError):
    """The stream ended before the header or payload was complete."""

    def __init__(self, message: str, line: Optional[int] = None,
                 element: Optional[str] = None, property_name: Optional[str] = None):
        self.element = element
        self.property_name = property_name
        if element is not None and property_name is not None:
            message = f"{message} (element '{element}', property '{property_name}')"
        elif element is not None:
            message = f"{message} (element '{element}')"
        super().__init__(message, line)


class LocationTracker:
    """Current 1-based line number, used to annotate diagnostics."""

    def __init__(self):
        self.line = 0

    def advance(self) -> int:
        self.line += 1
        return self.line

    def __repr__(self) -> str:
        return f"LocationTracker(line={self.line})"
