"""
plot_ply.py - Scatter plot of two scalar properties of a PLY element

Usage:
    python -m plyparse bunny.ply --plot vertex
    python -m plyparse bunny.ply --plot vertex -x x -y z -o bunny.png
"""

from pathlib import Path

from .ply_element import as_columns


def plot_element(ply, element="vertex", x_field="x", y_field="y", output=None, title=None,
                 figwidth=4.0):
    """Plot one scalar property of an element against another.

    Args:
        ply: Parsed Ply
        element: Element name (default "vertex")
        x_field: Property for the horizontal axis
        y_field: Property for the vertical axis
        output: Output filename for plot (None = show interactively)
        title: Plot title (None = element name and record count)
        figwidth: Figure width in inches (default 4.0)
    """
    import matplotlib.pyplot as plt

    if element not in ply.payload:
        raise KeyError(f"No element '{element}' in file")
    records = ply.payload[element]
    columns = as_columns(records, [x_field, y_field])

    fig, ax = plt.subplots(figsize=(figwidth, figwidth))
    ax.scatter(columns[x_field], columns[y_field], s=2)
    ax.set_xlabel(x_field)
    ax.set_ylabel(y_field)
    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, alpha=0.3)
    ax.set_title(title or f"{element} ({len(records)})")

    plt.tight_layout()

    if output:
        fig.savefig(output, dpi=150)
        plt.close(fig)
        print(f"Saved plot to {Path(output)}")
    else:
        plt.show()
