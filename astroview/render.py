"""Renderer boundary: consumers of submitted point sets."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from astroview.types import PointSet


class Renderer(Protocol):
    """Anything that can accept a submitted point set.

    The plugin hands over its own copy, so implementations may keep the
    object without it changing underneath them.
    """

    def set_point_cloud_data(self, points: PointSet) -> None:
        ...


class RecordingRenderer:
    """Keeps every submitted point set in memory, in submission order."""

    def __init__(self) -> None:
        self.submissions: list[PointSet] = []

    def set_point_cloud_data(self, points: PointSet) -> None:
        self.submissions.append(points)

    @property
    def latest(self) -> PointSet | None:
        return self.submissions[-1] if self.submissions else None


class MatplotlibRenderer:
    """Draws each submitted point set as a 3D scatter.

    Args:
        output_path: Save the figure here on every submission (None = keep open)
        dpi: Resolution of saved figures
    """

    def __init__(self, output_path: str | Path | None = None, dpi: int = 150) -> None:
        self.output_path = output_path
        self.dpi = dpi
        self.figure = None

    def set_point_cloud_data(self, points: PointSet) -> None:
        import matplotlib.pyplot as plt

        from astroview.visualization.plotting import plot_point_set, save_figure

        # Only the latest submission stays open
        if self.figure is not None:
            plt.close(self.figure)
            self.figure = None

        fig = plot_point_set(points)
        if self.output_path is not None:
            save_figure(fig, self.output_path, dpi=self.dpi, close=True)
            self.figure = None
        else:
            self.figure = fig
