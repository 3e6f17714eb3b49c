"""Tests for the command-line tool."""

import matplotlib

matplotlib.use("Agg")

import pytest

from plyparse.__main__ import main

POINTS = (
    "ply\n"
    "format ascii 1.0\n"
    "comment two points\n"
    "element point 2\n"
    "property int x\n"
    "property int y\n"
    "element face 1\n"
    "property list uchar int vertex_index\n"
    "end_header\n"
    "-7 5\n"
    "2 4\n"
    "2 0 1\n"
)


@pytest.fixture
def ply_file(tmp_path):
    path = tmp_path / "points.ply"
    path.write_text(POINTS)
    return path


def test_header_summary(ply_file, capsys):
    assert main([str(ply_file)]) == 0
    out = capsys.readouterr().out
    assert "Format: ascii 1.0" in out
    assert "Comment: two points" in out
    assert "point: 2 records" in out
    assert "  list uchar int vertex_index" in out


def test_print_records(ply_file, capsys):
    assert main([str(ply_file), "-e", "point", "-n", "1"]) == 0
    out = capsys.readouterr().out
    assert "[0] x=-7  y=5" in out
    assert "... 1 more" in out


def test_print_list_records(ply_file, capsys):
    assert main([str(ply_file), "--element", "face"]) == 0
    assert "[0] vertex_index=[0, 1]" in capsys.readouterr().out


def test_unknown_element(ply_file, capsys):
    assert main([str(ply_file), "-e", "edge"]) == 1
    assert "Error: no element 'edge'" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.ply")]) == 1
    assert "Error: file not found" in capsys.readouterr().out


def test_parse_error(tmp_path, capsys):
    path = tmp_path / "bad.ply"
    path.write_text("ply\nformat ascii 1.0\nproperty int x\nend_header\n")
    assert main([str(path)]) == 1
    out = capsys.readouterr().out
    assert out.startswith("Error: Line 3:")


def test_plot_to_file(ply_file, tmp_path, capsys):
    output = tmp_path / "points.png"
    assert main([str(ply_file), "--plot", "point", "-o", str(output)]) == 0
    assert output.exists()
    assert "Saved plot to" in capsys.readouterr().out


def test_plot_missing_field(ply_file, tmp_path, capsys):
    output = tmp_path / "points.png"
    assert main([str(ply_file), "--plot", "point", "-y", "z", "-o", str(output)]) == 1
    assert "no scalar property 'z'" in capsys.readouterr().out
