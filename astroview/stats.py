"""Point set statistics and diagnostic formatting (pure functions)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from astroview.types import ConversionResult, PointSet


LOG_PREFIX = "[AstroViewer]"


@dataclass(frozen=True)
class ZStats:
    """Summary of the z coordinates of a point set."""

    count: int
    min_z: float
    max_z: float
    mean_z: float

    def __str__(self) -> str:
        return format_z_stats(self)


def compute_z_stats(points: PointSet) -> ZStats | None:
    """Compute min/max/mean z, or None for an empty set.

    Args:
        points: Point set to summarize (not modified)

    Returns:
        ZStats, or None when there are no points
    """
    if len(points) == 0:
        return None

    z = points.z.astype(np.float64)
    return ZStats(
        count=len(points),
        min_z=float(z.min()),
        max_z=float(z.max()),
        mean_z=float(z.mean()),
    )


def format_z_stats(stats: ZStats | None) -> str:
    """Format z statistics as a single status line."""
    if stats is None:
        return f"{LOG_PREFIX} No points loaded."
    return (
        f"{LOG_PREFIX} Points: {stats.count} | "
        f"Z range: [{stats.min_z:.6g}, {stats.max_z:.6g}] | "
        f"Avg Z: {stats.mean_z:.6g}"
    )


def format_load_summary(result: ConversionResult) -> str:
    """Format the counts reported after a successful load."""
    return (
        f"{LOG_PREFIX} Image loaded: {result.width}x{result.height}\n"
        f"{LOG_PREFIX} Total pixels: {result.total_pixels}\n"
        f"{LOG_PREFIX} Points after brightness filter: {result.filtered_count}\n"
        f"{LOG_PREFIX} Final points: {result.final_count}"
    )
