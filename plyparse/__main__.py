"""Inspect PLY files from the command line.

Usage: python -m plyparse path/to/file.ply [options]
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from .logging_config import setup_logging
from .ply_errors import PlyError
from .ply_parser import load, load_header


def print_header(header):
    """Print encoding, metadata, and the element schema."""
    print(f"Format: {header.encoding.value} {header.version}")
    for c in header.comments:
        print(f"Comment: {c}")
    for o in header.obj_infos:
        print(f"Obj info: {o}")
    for element_def in header.elements.values():
        print(f"{element_def.name}: {element_def.count} records")
        for prop in element_def.properties.values():
            print(f"  {prop.type} {prop.name}")


def _format_value(value):
    if isinstance(value, np.ndarray):
        return "[" + ", ".join(str(v) for v in value.tolist()) + "]"
    return str(value)


def print_records(records, limit=10):
    """Print up to ``limit`` records as name=value pairs."""
    shown = records if limit is None or limit < 0 else records[:limit]
    for i, rec in enumerate(shown):
        fields = "  ".join(f"{k}={_format_value(v)}" for k, v in rec.items())
        print(f"[{i}] {fields}")
    if len(shown) < len(records):
        print(f"... {len(records) - len(shown)} more")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Inspect PLY mesh and point cloud files",
        prog="python -m plyparse",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s cube.ply                         # Header summary
  %(prog)s cube.ply -e face -n 5            # First 5 face records
  %(prog)s cube.ply --plot vertex -x x -y z # Scatter plot of vertex x/z
""",
    )
    parser.add_argument("filename", help="PLY file")
    parser.add_argument(
        "-e",
        "--element",
        help="Print records of this element",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=10,
        help="Maximum records to print, negative for all (default: 10)",
    )
    parser.add_argument(
        "--plot",
        metavar="ELEMENT",
        help="Scatter plot two scalar properties of an element",
    )
    parser.add_argument("-x", "--x-field", default="x", help="Horizontal axis property (default: x)")
    parser.add_argument("-y", "--y-field", default="y", help="Vertical axis property (default: y)")
    parser.add_argument(
        "-o",
        "--output",
        help="Output filename for plot (default: show interactively)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log parser progress",
    )

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if not Path(args.filename).exists():
        print(f"Error: file not found: {args.filename}")
        return 1

    try:
        if args.element is None and args.plot is None:
            print_header(load_header(args.filename))
            return 0

        ply = load(args.filename)
        print_header(ply.header)

        if args.element is not None:
            if args.element not in ply.payload:
                print(f"Error: no element '{args.element}' in {args.filename}")
                return 1
            print()
            print_records(ply.payload[args.element], args.limit)

        if args.plot is not None:
            from .plot_ply import plot_element

            plot_element(
                ply,
                element=args.plot,
                x_field=args.x_field,
                y_field=args.y_field,
                output=args.output,
            )
    except PlyError as e:
        print(f"Error: {e}")
        return 1
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
