"""Tests for ASCII payload decoding."""

import io

import numpy as np
import pytest

import plyparse as pp
from plyparse import (
    ElementDef,
    ListProperty,
    MalformedRecordError,
    Parser,
    PropertyDef,
    ScalarProperty,
    ScalarType,
    UnexpectedEofError,
)
from plyparse.ply_ascii import parse_scalar


def _element(name, count, *props):
    element_def = ElementDef(name, count)
    for prop_name, ptype in props:
        element_def.add_property(PropertyDef(prop_name, ptype))
    return element_def


FACE = _element("face", 1, ("vertex_index", ListProperty(ScalarType.UCHAR, ScalarType.INT)))
POINT = _element(
    "point",
    2,
    ("x", ScalarProperty(ScalarType.INT)),
    ("y", ScalarProperty(ScalarType.INT)),
)


def test_list_property():
    elem = Parser().read_ascii_element("3 0 1 2", FACE)
    assert list(elem) == ["vertex_index"]
    values = elem["vertex_index"]
    assert isinstance(values, np.ndarray)
    assert values.dtype == np.int32
    assert values.tolist() == [0, 1, 2]


def test_small_integer_kinds():
    element_def = _element(
        "dummy",
        0,
        ("a", ScalarProperty(ScalarType.CHAR)),
        ("b", ScalarProperty(ScalarType.UCHAR)),
        ("c", ScalarProperty(ScalarType.SHORT)),
        ("d", ScalarProperty(ScalarType.USHORT)),
    )
    elem = Parser().read_ascii_element("0 1 2 3", element_def)
    assert elem == {"a": 0, "b": 1, "c": 2, "d": 3}


def test_mixed_scalars_and_lists():
    element_def = _element(
        "face",
        1,
        ("vertex_index", ListProperty(ScalarType.UCHAR, ScalarType.UINT)),
        ("quality", ScalarProperty(ScalarType.DOUBLE)),
        ("uv", ListProperty(ScalarType.INT, ScalarType.FLOAT)),
    )
    elem = Parser().read_ascii_element("2 10 11 -1.5e3 0\n", element_def)
    assert elem["vertex_index"].tolist() == [10, 11]
    assert elem["quality"] == -1500.0
    assert elem["uv"].size == 0
    assert elem["uv"].dtype == np.float32


def test_trailing_tokens_are_ignored():
    elem = Parser().read_ascii_element("1 2 3 4", POINT)
    assert elem == {"x": 1, "y": 2}


def test_missing_scalar_names_property():
    with pytest.raises(MalformedRecordError) as exc:
        Parser().read_ascii_element("1", POINT)
    assert exc.value.element == "point"
    assert exc.value.property_name == "y"


def test_missing_list_values():
    with pytest.raises(MalformedRecordError) as exc:
        Parser().read_ascii_element("3 0 1", FACE)
    assert exc.value.property_name == "vertex_index"
    assert "Expected 3 list values, found 2" in str(exc.value)


@pytest.mark.parametrize("text, token", [("abc 1", "abc"), ("1.5 1", "1.5"), ("1 0x10", "0x10")])
def test_bad_token(text, token):
    with pytest.raises(MalformedRecordError) as exc:
        Parser().read_ascii_element(text, POINT)
    assert exc.value.token == token


def test_out_of_range_token():
    element_def = _element("e", 1, ("v", ScalarProperty(ScalarType.UCHAR)))
    with pytest.raises(MalformedRecordError):
        Parser().read_ascii_element("256", element_def)


def test_negative_list_count():
    element_def = _element("e", 1, ("v", ListProperty(ScalarType.CHAR, ScalarType.INT)))
    with pytest.raises(MalformedRecordError) as exc:
        Parser().read_ascii_element("-1 5", element_def)
    assert exc.value.token == "-1"


@pytest.mark.parametrize(
    "token, scalar, expected",
    [
        ("+5", ScalarType.INT, 5),
        ("-128", ScalarType.CHAR, -128),
        ("4294967295", ScalarType.UINT, 4294967295),
        ("1e-3", ScalarType.DOUBLE, 0.001),
        (".5", ScalarType.DOUBLE, 0.5),
        ("7", ScalarType.FLOAT, 7.0),
    ],
)
def test_parse_scalar(token, scalar, expected):
    assert parse_scalar(token, scalar) == expected


def test_parse_scalar_special_floats():
    assert parse_scalar("inf", ScalarType.DOUBLE) == float("inf")
    assert np.isnan(parse_scalar("nan", ScalarType.FLOAT))
    with pytest.raises(ValueError):
        parse_scalar("1_000", ScalarType.INT)
    with pytest.raises(ValueError):
        parse_scalar("1_000.0", ScalarType.DOUBLE)


def test_error_cites_payload_line():
    text = (
        "ply\nformat ascii 1.0\nelement point 2\nproperty int x\nproperty int y\nend_header\n"
        "-7 5\n"
        "2\n"
    )
    with pytest.raises(MalformedRecordError) as exc:
        pp.loads(text)
    assert exc.value.line == 8
    assert exc.value.property_name == "y"
    assert str(exc.value).startswith("Line 8:")


def test_truncated_ascii_payload():
    text = "ply\nformat ascii 1.0\nelement point 3\nproperty int x\nend_header\n1\n2\n"
    with pytest.raises(UnexpectedEofError) as exc:
        pp.loads(text)
    assert exc.value.element == "point"


def test_two_elements():
    text = (
        "ply\nformat ascii 1.0\n"
        "element vertex 3\nproperty float x\nproperty float y\n"
        "element face 1\nproperty list uchar int vertex_index\n"
        "end_header\n"
        "0 0\n1 0\n0 1\n"
        "3 0 1 2\n"
    )
    ply = pp.loads(text)
    assert [v["x"] for v in ply.payload["vertex"]] == [0.0, 1.0, 0.0]
    assert ply.payload["face"][0]["vertex_index"].tolist() == [0, 1, 2]


def test_records_from_text_stream():
    stream = io.StringIO("-7 5\n2 4\n")
    records = Parser().read_payload_for_element(stream, POINT, pp.Encoding.ASCII)
    assert records == [{"x": -7, "y": 5}, {"x": 2, "y": 4}]


def test_non_ascii_record():
    stream = io.BytesIO("1 é\n".encode("utf-8"))
    with pytest.raises(MalformedRecordError):
        Parser().read_payload_for_element(stream, _element("e", 1, ("v", ScalarProperty(ScalarType.INT))), pp.Encoding.ASCII)
