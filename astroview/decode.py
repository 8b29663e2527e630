"""Image decoding (side effects: file I/O).

Turns an encoded image (path or in-memory bytes) into a uint8 pixel buffer
of shape [H, W, C]. Pillow is the default codec; OpenCV is available as an
alternate backend.
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

import cv2
import numpy as np
from PIL import Image

from astroview.errors import DecodeFailure
from astroview.types import DecodedImage


ImageSource = Union[str, Path, bytes, bytearray, memoryview]

_PIL_MODES = {1: "L", 3: "RGB", 4: "RGBA"}
BACKENDS = ("pil", "cv2")


def describe_source(source: ImageSource) -> str:
    """Human-readable description of an image source for messages."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"<{len(source)} bytes>"
    return str(source)


def _check_channels(channels: int) -> None:
    if channels not in _PIL_MODES:
        raise ValueError(f"channels must be one of {sorted(_PIL_MODES)}, got {channels}")


@contextmanager
def _open_pil(source: ImageSource) -> Iterator[Image.Image]:
    name = describe_source(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        stream = io.BytesIO(bytes(source))
    else:
        stream = Path(source)
    try:
        img = Image.open(stream)
    except FileNotFoundError:
        raise DecodeFailure(name, "file not found") from None
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeFailure(name, str(e) or type(e).__name__) from e

    try:
        yield img
    finally:
        img.close()


@contextmanager
def _pil_pixels(source: ImageSource, channels: int) -> Iterator[DecodedImage]:
    name = describe_source(source)
    with _open_pil(source) as img:
        try:
            source_channels = len(img.getbands())
            pixels = np.asarray(img.convert(_PIL_MODES[channels]), dtype=np.uint8)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeFailure(name, str(e) or type(e).__name__) from e
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        yield DecodedImage(pixels=pixels, source_channels=source_channels)


def _cv2_read(source: ImageSource) -> np.ndarray:
    name = describe_source(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        buf = np.frombuffer(bytes(source), dtype=np.uint8)
        if buf.size == 0:
            raise DecodeFailure(name, "empty buffer")
        try:
            img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise DecodeFailure(name, str(e)) from e
    else:
        if not Path(source).is_file():
            raise DecodeFailure(name, "file not found")
        img = cv2.imread(str(source), cv2.IMREAD_UNCHANGED)

    # OpenCV signals unreadable data by returning None
    if img is None:
        raise DecodeFailure(name, "cannot identify image file")
    return img


def _to_uint8(img: np.ndarray, name: str) -> np.ndarray:
    if img.dtype == np.uint8:
        return img
    if img.dtype == np.uint16:
        return (img // 257).astype(np.uint8)
    raise DecodeFailure(name, f"unsupported sample type {img.dtype}")


@contextmanager
def _cv2_pixels(source: ImageSource, channels: int) -> Iterator[DecodedImage]:
    name = describe_source(source)
    img = _to_uint8(_cv2_read(source), name)
    if img.ndim == 2:
        img = img[:, :, np.newaxis]
    source_channels = img.shape[2]

    # OpenCV stores color as BGR(A)
    if source_channels == 1:
        codes = {1: None, 3: cv2.COLOR_GRAY2RGB, 4: cv2.COLOR_GRAY2RGBA}
    elif source_channels == 3:
        codes = {1: cv2.COLOR_BGR2GRAY, 3: cv2.COLOR_BGR2RGB, 4: cv2.COLOR_BGR2RGBA}
    elif source_channels == 4:
        codes = {1: cv2.COLOR_BGRA2GRAY, 3: cv2.COLOR_BGRA2RGB, 4: cv2.COLOR_BGRA2RGBA}
    else:
        raise DecodeFailure(name, f"unsupported channel count {source_channels}")

    code = codes[channels]
    pixels = img if code is None else cv2.cvtColor(img, code)
    if pixels.ndim == 2:
        pixels = pixels[:, :, np.newaxis]
    yield DecodedImage(pixels=np.ascontiguousarray(pixels), source_channels=source_channels)


@contextmanager
def open_pixels(
    source: ImageSource,
    channels: int = 3,
    backend: str = "pil",
) -> Iterator[DecodedImage]:
    """Decode an image and hold its pixel buffer for the duration of a block.

    The codec's resources are released when the block exits, including when
    it exits through an exception.

    Args:
        source: File path or encoded image bytes
        channels: Requested channels per pixel (1, 3 or 4)
        backend: 'pil' (Pillow) or 'cv2' (OpenCV)

    Yields:
        DecodedImage with pixels [H, W, channels] uint8

    Raises:
        DecodeFailure: Source is missing, unreadable or not an image

    Example:
        >>> with open_pixels("nebula.jpg") as image:
        ...     selection = filter_bright_pixels(image.pixels, 0.1)
    """
    _check_channels(channels)
    if backend == "pil":
        opener = _pil_pixels
    elif backend == "cv2":
        opener = _cv2_pixels
    else:
        raise ValueError(f"backend must be one of {BACKENDS}, got {backend!r}")

    with opener(source, channels) as image:
        yield image


def decode_image(
    source: ImageSource,
    channels: int = 3,
    backend: str = "pil",
) -> DecodedImage:
    """Decode an image into a standalone pixel buffer.

    Args:
        source: File path or encoded image bytes
        channels: Requested channels per pixel (1, 3 or 4)
        backend: 'pil' (Pillow) or 'cv2' (OpenCV)

    Returns:
        DecodedImage with pixels [H, W, channels] uint8

    Raises:
        DecodeFailure: Source is missing, unreadable or not an image
    """
    with open_pixels(source, channels=channels, backend=backend) as image:
        return image
