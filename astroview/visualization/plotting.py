"""Point cloud plotting (pure side effects - don't modify inputs)."""

from __future__ import annotations

from pathlib import Path

import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from astroview.types import PointSet


def plot_point_set(
    points: PointSet,
    figsize: tuple[float, float] = (8, 6),
    title: str | None = None,
    elev: float = 30.0,
    azim: float = -60.0,
) -> matplotlib.figure.Figure:
    """Draw a point set as a colored 3D scatter.

    Marker area follows each point's size hint.

    Args:
        points: Point set to draw
        figsize: Figure size in inches
        title: Optional axes title (default: point count)
        elev: Camera elevation in degrees
        azim: Camera azimuth in degrees

    Returns:
        Matplotlib figure object
    """
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111, projection='3d')
    ax.set_facecolor('black')

    if len(points) > 0:
        pos = points.positions
        ax.scatter(
            pos[:, 0], pos[:, 1], pos[:, 2],
            c=np.clip(points.colors, 0.0, 1.0),
            s=points.sizes,
            depthshade=False,
            linewidths=0,
        )

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_zlabel('z')
    ax.view_init(elev=elev, azim=azim)
    ax.set_title(title if title is not None else f"{len(points)} points")

    return fig


def save_figure(
    fig: matplotlib.figure.Figure,
    path: str | Path,
    dpi: int = 150,
    close: bool = True
) -> None:
    """Save matplotlib figure to disk (side effect).

    Args:
        fig: Matplotlib figure
        path: Output path
        dpi: Resolution
        close: Whether to close figure after saving
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig.savefig(path, dpi=dpi, bbox_inches='tight')
    print(f"Saved figure to: {path}")

    if close:
        plt.close(fig)
