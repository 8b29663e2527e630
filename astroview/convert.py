"""Image to point cloud conversion (pure functions).

The pipeline is filter -> map -> sample:

1. `filter_bright_pixels` keeps pixels whose mean normalized channel value is
   strictly above the threshold, in row-major order.
2. `map_pixels` places each kept pixel on a height field centered on the
   origin, with brighter pixels further along z.
3. `sample_points` caps the result at `max_points` by uniform sampling
   without replacement.

Only `sample_points` is non-deterministic, and only when no seed or
generator is supplied.
"""

from __future__ import annotations

import numpy as np

from astroview.config import ConversionConfig
from astroview.decode import ImageSource, open_pixels
from astroview.types import ConversionResult, PixelSelection, Point, PointSet


RandomSource = np.random.Generator | int | None


def compute_brightness(pixels: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Normalize an RGB buffer and compute per-pixel brightness.

    Args:
        pixels: [H, W, 3] uint8

    Returns:
        Tuple of (rgb [H, W, 3] float32 in [0, 1], brightness [H, W] float32)
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"pixels must be [H, W, 3], got shape {pixels.shape}")

    rgb = pixels.astype(np.float32) / np.float32(255.0)
    brightness = (rgb[..., 0] + rgb[..., 1] + rgb[..., 2]) / np.float32(3.0)
    return rgb, brightness


def filter_bright_pixels(pixels: np.ndarray, threshold: float) -> PixelSelection:
    """Keep pixels brighter than `threshold` in row-major order (x fastest).

    Args:
        pixels: [H, W, 3] uint8 RGB buffer
        threshold: Normalized cut in [0, 1]; comparison is strict

    Returns:
        PixelSelection with one entry per kept pixel
    """
    rgb, brightness = compute_brightness(pixels)
    height, width = brightness.shape

    # argwhere walks C order, which is row-major with x fastest
    coords = np.argwhere(brightness > np.float32(threshold))
    ys = coords[:, 0]
    xs = coords[:, 1]

    return PixelSelection(
        xs=xs,
        ys=ys,
        brightness=brightness[ys, xs],
        rgb=rgb[ys, xs],
        width=width,
        height=height,
    )


def _scales(width: int, height: int, span: float) -> tuple[np.float32, np.float32, np.float32]:
    return (
        np.float32(span) / np.float32(width),
        np.float32(span) / np.float32(height),
        np.float32(span) / np.float32(2.0),
    )


def map_pixels(selection: PixelSelection, config: ConversionConfig) -> PointSet:
    """Map filtered pixels to points.

    x = px * (span / W) - span / 2
    y = (H - py) * (span / H) - span / 2   (flipped so image top is scene top)
    z = brightness * z_scale * 255

    Args:
        selection: Output of `filter_bright_pixels`
        config: Conversion parameters

    Returns:
        PointSet in the same order as `selection`
    """
    n = len(selection)
    if n == 0:
        return PointSet.empty()

    scale_x, scale_y, offset = _scales(selection.width, selection.height, config.span)

    positions = np.empty((n, 3), dtype=np.float32)
    positions[:, 0] = selection.xs.astype(np.float32) * scale_x - offset
    positions[:, 1] = (selection.height - selection.ys).astype(np.float32) * scale_y - offset
    positions[:, 2] = selection.brightness * np.float32(config.z_scale) * np.float32(255.0)

    return PointSet(
        positions=positions,
        colors=selection.rgb.astype(np.float32, copy=True),
        sizes=np.full(n, config.point_size, dtype=np.float32),
        brightness=selection.brightness.astype(np.float32, copy=True),
    )


def map_pixel(
    x: int,
    y: int,
    brightness: float,
    rgb: tuple[float, float, float],
    width: int,
    height: int,
    config: ConversionConfig,
) -> Point:
    """Map a single pixel to a point (scalar form of `map_pixels`)."""
    scale_x, scale_y, offset = _scales(width, height, config.span)
    px = np.float32(x) * scale_x - offset
    py = np.float32(height - y) * scale_y - offset
    pz = np.float32(brightness) * np.float32(config.z_scale) * np.float32(255.0)
    r, g, b = (float(np.float32(c)) for c in rgb)
    return Point(
        position=(float(px), float(py), float(pz)),
        color=(r, g, b),
        size=float(np.float32(config.point_size)),
    )


def make_rng(rng: RandomSource = None) -> np.random.Generator:
    """Build a generator from a seed, pass one through, or draw from OS entropy."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def sample_points(
    points: PointSet,
    max_points: int,
    rng: RandomSource = None,
) -> PointSet:
    """Cap a point set at `max_points` by uniform sampling without replacement.

    If `max_points <= 0` or the set already fits, the input is returned
    unchanged. Otherwise the points are shuffled and truncated, so every
    point is equally likely to be kept and the output order is random.

    Args:
        points: Mapped points
        max_points: Upper bound (<= 0 = unbounded)
        rng: Generator, integer seed, or None for an unseeded generator

    Returns:
        PointSet with min(len(points), max_points) members
    """
    if max_points <= 0 or len(points) <= max_points:
        return points

    order = make_rng(rng).permutation(len(points))
    return points.take(order[:max_points])


def _map_and_sample(
    selection: PixelSelection,
    config: ConversionConfig,
    rng: RandomSource,
) -> ConversionResult:
    mapped = map_pixels(selection, config)
    sampled = sample_points(mapped, config.max_points, rng=rng)
    return ConversionResult(
        points=sampled,
        width=selection.width,
        height=selection.height,
        filtered_count=len(mapped),
    )


def _decode_and_filter(source: ImageSource, threshold: float, backend: str) -> PixelSelection:
    # Only the selection escapes; the decoded buffer dies with this frame
    with open_pixels(source, channels=3, backend=backend) as image:
        return filter_bright_pixels(image.pixels, threshold)


def convert_pixels(
    pixels: np.ndarray,
    config: ConversionConfig,
    rng: RandomSource = None,
) -> ConversionResult:
    """Run filter -> map -> sample on a decoded RGB buffer.

    Args:
        pixels: [H, W, 3] uint8
        config: Conversion parameters
        rng: Random source for the sampler

    Returns:
        ConversionResult with the final points and filter counts
    """
    selection = filter_bright_pixels(pixels, config.brightness_threshold)
    return _map_and_sample(selection, config, rng)


def convert_image(
    source: ImageSource,
    config: ConversionConfig,
    rng: RandomSource = None,
    backend: str = "pil",
) -> ConversionResult:
    """Decode an image and convert it to a point set.

    The decoded buffer only lives for the filter step.

    Raises:
        DecodeFailure: Source is missing, unreadable or not an image
    """
    selection = _decode_and_filter(source, config.brightness_threshold, backend)
    return _map_and_sample(selection, config, rng)
