"""Example usage of the plyparse Python interface."""

import io

import numpy as np

import plyparse as pp

CUBE = """ply
format ascii 1.0
comment unit cube
element vertex 8
property float x
property float y
property float z
element face 6
property list uchar int vertex_index
end_header
0 0 0
0 0 1
0 1 1
0 1 0
1 0 0
1 0 1
1 1 1
1 1 0
4 0 1 2 3
4 7 6 5 4
4 0 4 5 1
4 1 5 6 2
4 2 6 7 3
4 3 7 4 0
"""

# Whole file
ply = pp.loads(CUBE)
print(f"elements: {list(ply.header.elements)}, comments: {ply.header.comments}")
columns = pp.as_columns(ply.payload["vertex"])
print(f"centroid = {np.mean([columns['x'], columns['y'], columns['z']], axis=1)}")

print()

# Convert to little-endian binary and read it back element by element
ply.header.encoding = pp.Encoding.BINARY_LITTLE_ENDIAN
data = pp.dumps(ply)
print(f"binary size: {len(data)} bytes")

parser = pp.Parser()
stream = io.BytesIO(data)
header = parser.read_header(stream)
for element_def in header.elements.values():
    records = parser.read_payload_for_element(stream, element_def, header.encoding)
    print(f"{element_def.name}: {len(records)} records, first = {records[0]}")

print()

# Errors carry the line number and the offending text
try:
    pp.loads(CUBE.replace("4 0 1 2 3", "4 0 1 2"))
except pp.MalformedRecordError as e:
    print(f"Expected error: {e}")
