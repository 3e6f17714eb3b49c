"""Tests for element representations."""

import io

import numpy as np
import pytest

import plyparse as pp
from plyparse import DefaultElement, Parser, PropertyAccess, as_columns

MESH = (
    "ply\nformat ascii 1.0\n"
    "element vertex 3\nproperty float x\nproperty float y\nproperty float z\n"
    "element face 1\nproperty list uchar int vertex_index\n"
    "end_header\n"
    "0 0 0\n1 0 0\n0 1 0.5\n"
    "3 0 1 2\n"
)


class Vertex(PropertyAccess):
    """Fixed-shape record used to check the parser never assumes dicts."""

    def __init__(self):
        self.position = [None, None, None]
        self.indices = None

    def set_scalar(self, name, value):
        self.position["xyz".index(name)] = value

    def set_list(self, name, values):
        self.indices = values.tolist()

    def get_scalar(self, name):
        return self.position["xyz".index(name)]

    def get_list(self, name):
        return np.array(self.indices)


def test_default_element_accessors():
    elem = DefaultElement()
    elem.set_scalar("x", 1.5)
    elem.set_list("idx", np.array([1, 2]))
    assert elem.get_scalar("x") == 1.5
    assert elem.get_list("idx").tolist() == [1, 2]
    assert elem.get_scalar("idx") is None
    assert elem.get_list("x") is None
    assert elem.get_scalar("missing") is None
    assert elem.get_list("missing") is None


def test_default_element_plain_list():
    elem = DefaultElement(idx=[3, 4])
    assert elem.get_list("idx").tolist() == [3, 4]


def test_custom_element_type():
    ply = Parser(element_type=Vertex).read_ply(io.BytesIO(MESH.encode("ascii")))
    assert [v.position for v in ply.payload["vertex"]] == [[0, 0, 0], [1, 0, 0], [0, 1, 0.5]]
    assert ply.payload["face"][0].indices == [0, 1, 2]


def test_custom_element_with_load():
    ply = pp.loads(MESH, element_type=Vertex)
    assert isinstance(ply.payload["vertex"][0], Vertex)


def test_base_capability_is_abstract():
    with pytest.raises(NotImplementedError):
        PropertyAccess().set_scalar("x", 1)


def test_as_columns():
    ply = pp.loads(MESH)
    columns = as_columns(ply.payload["vertex"])
    assert list(columns) == ["x", "y", "z"]
    assert columns["z"].tolist() == [0.0, 0.0, 0.5]
    assert as_columns(ply.payload["face"]) == {}
    assert as_columns([]) == {}


def test_as_columns_named():
    ply = pp.loads(MESH, element_type=Vertex)
    columns = as_columns(ply.payload["vertex"], ["y"])
    assert columns["y"].tolist() == [0.0, 0.0, 1.0]
    with pytest.raises(TypeError):
        as_columns(ply.payload["vertex"])


def test_as_columns_missing_property():
    ply = pp.loads(MESH)
    with pytest.raises(KeyError):
        as_columns(ply.payload["vertex"], ["w"])
