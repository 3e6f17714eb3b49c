"""Reader and writer for PLY (Polygon File Format) mesh and point cloud files."""

from .ply_element import DefaultElement, PropertyAccess, as_columns
from .ply_errors import (
    DuplicateElementError,
    DuplicatePropertyError,
    GrammarError,
    InvalidHeaderError,
    InvalidInputError,
    LocationTracker,
    MalformedRecordError,
    MissingFormatError,
    PlyError,
    PropertyBeforeElementError,
    UnexpectedEofError,
)
from .ply_grammar import Line, LineKind
from .ply_parser import Parser, classify_line, load, load_header, loads
from .ply_types import (
    ElementDef,
    Encoding,
    Header,
    ListProperty,
    Ply,
    PropertyDef,
    PropertyType,
    ScalarProperty,
    ScalarType,
    Version,
)
from .ply_writer import PlyWriter, dump, dumps, format_header
