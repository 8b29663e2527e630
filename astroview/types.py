"""Point cloud data types (immutable data structures)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np


@dataclass(frozen=True)
class Point:
    """A single output sample.

    Attributes:
        position: (x, y, z) scene coordinates
        color: (r, g, b) normalized to [0, 1]
        size: Render hint, constant within one conversion
    """
    position: tuple[float, float, float]
    color: tuple[float, float, float]
    size: float

    @property
    def z(self) -> float:
        return self.position[2]


@dataclass(frozen=True, eq=False)
class PointSet:
    """Ordered, read-only collection of points from one conversion.

    Points are stored column-wise so the mapper and sampler can work on whole
    arrays. Indexing and iteration yield `Point` objects.

    Attributes:
        positions: [N, 3] float32
        colors: [N, 3] float32, values in [0, 1]
        sizes: [N] float32
        brightness: [N] float32, brightness of the source pixel of each point
    """
    positions: np.ndarray
    colors: np.ndarray
    sizes: np.ndarray
    brightness: np.ndarray

    def __post_init__(self) -> None:
        n = len(self.positions)
        if self.positions.shape != (n, 3) or self.colors.shape != (n, 3):
            raise ValueError(
                f"positions and colors must be [N, 3], got "
                f"{self.positions.shape} and {self.colors.shape}"
            )
        if self.sizes.shape != (n,) or self.brightness.shape != (n,):
            raise ValueError(
                f"sizes and brightness must be [{n}], got "
                f"{self.sizes.shape} and {self.brightness.shape}"
            )
        # Lock views so the caller's arrays stay writeable
        for name in ("positions", "colors", "sizes", "brightness"):
            view = getattr(self, name).view()
            view.setflags(write=False)
            object.__setattr__(self, name, view)

    @classmethod
    def empty(cls) -> PointSet:
        return cls(
            positions=np.empty((0, 3), np.float32),
            colors=np.empty((0, 3), np.float32),
            sizes=np.empty((0,), np.float32),
            brightness=np.empty((0,), np.float32),
        )

    def __len__(self) -> int:
        return len(self.positions)

    def __getitem__(self, index: int) -> Point:
        x, y, z = (float(v) for v in self.positions[index])
        r, g, b = (float(v) for v in self.colors[index])
        return Point(position=(x, y, z), color=(r, g, b), size=float(self.sizes[index]))

    def __iter__(self) -> Iterator[Point]:
        for i in range(len(self)):
            yield self[i]

    @property
    def z(self) -> np.ndarray:
        return self.positions[:, 2]

    def take(self, indices: np.ndarray) -> PointSet:
        """Select a subset of points by index, in the given order."""
        return PointSet(
            positions=self.positions[indices],
            colors=self.colors[indices],
            sizes=self.sizes[indices],
            brightness=self.brightness[indices],
        )

    def copy(self) -> PointSet:
        """Deep copy used when handing points to a renderer."""
        return PointSet(
            positions=self.positions.copy(),
            colors=self.colors.copy(),
            sizes=self.sizes.copy(),
            brightness=self.brightness.copy(),
        )


@dataclass(frozen=True, eq=False)
class DecodedImage:
    """Raw decoder output.

    Attributes:
        pixels: [H, W, C] uint8
        source_channels: Channel count of the encoded image before conversion
    """
    pixels: np.ndarray
    source_channels: int

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]


@dataclass(frozen=True, eq=False)
class PixelSelection:
    """Pixels kept by the brightness filter, in row-major scan order.

    Attributes:
        xs: [N] int column of each pixel
        ys: [N] int row of each pixel
        brightness: [N] float32 mean of normalized r, g, b
        rgb: [N, 3] float32 normalized channels
        width: Source image width
        height: Source image height
    """
    xs: np.ndarray
    ys: np.ndarray
    brightness: np.ndarray
    rgb: np.ndarray
    width: int
    height: int

    def __len__(self) -> int:
        return len(self.xs)


@dataclass(frozen=True)
class ConversionResult:
    """Output of one conversion run plus the counts reported after loading."""
    points: PointSet
    width: int
    height: int
    filtered_count: int

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    @property
    def final_count(self) -> int:
        return len(self.points)
