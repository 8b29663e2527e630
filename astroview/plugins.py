"""Host plugins (orchestrates pure conversion code and side effects).

A host drives every plugin through the same lifecycle:

    plugin.initialize(context)
    while running:
        plugin.tick(dt)
    plugin.teardown()

Plugins share no base class; anything with these methods satisfies `Plugin`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from astroview.config import ConversionConfig
from astroview.convert import RandomSource, convert_image
from astroview.decode import ImageSource, describe_source
from astroview.errors import DecodeFailure
from astroview.render import Renderer
from astroview.stats import LOG_PREFIX, compute_z_stats, format_load_summary, format_z_stats
from astroview.timer import DiagnosticTimer
from astroview.types import PointSet


@dataclass(frozen=True)
class PluginIdentity:
    name: str
    version: str


@dataclass
class PluginContext:
    """Services the host exposes to plugins."""
    renderer: Renderer

    def set_point_cloud_data(self, points: PointSet) -> None:
        self.renderer.set_point_cloud_data(points)


class Plugin(Protocol):
    """Lifecycle interface the host calls into."""

    def initialize(self, context: PluginContext) -> bool:
        ...

    def tick(self, dt: float) -> None:
        ...

    def teardown(self) -> None:
        ...

    def identity(self) -> PluginIdentity:
        ...


class PipelineState(enum.Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    SUBMITTED = "submitted"


class AstroViewerPlugin:
    """Loads an image, converts it to a point cloud and feeds it to the renderer.

    State moves EMPTY -> LOADED on a successful `load` and LOADED -> SUBMITTED
    on `submit`. Every new load goes back to LOADED so fresh data is submitted
    again. A failed load changes nothing.

    Args:
        config: Conversion parameters
        rng: Random source for point sampling (None = unseeded)
        backend: Decoder backend, 'pil' or 'cv2'

    Example:
        >>> renderer = RecordingRenderer()
        >>> plugin = AstroViewerPlugin(ConversionConfig(image_path=None))
        >>> plugin.initialize(PluginContext(renderer))
        >>> plugin.load("m42.png")
        >>> plugin.tick(0.016)  # first tick submits
    """

    NAME = "AstroViewerPlugin"
    VERSION = "1.0.0"

    def __init__(
        self,
        config: ConversionConfig | None = None,
        rng: RandomSource = None,
        backend: str = "pil",
    ) -> None:
        self.config = config if config is not None else ConversionConfig()
        self.rng = rng
        self.backend = backend
        self.context: PluginContext | None = None
        self.timer = DiagnosticTimer(self.config.report_interval)
        self._points = PointSet.empty()
        self._image_size: tuple[int, int] | None = None
        self._loaded = False
        self._submitted = False

    @property
    def points(self) -> PointSet:
        return self._points

    @property
    def image_size(self) -> tuple[int, int] | None:
        """(width, height) of the last successfully loaded image."""
        return self._image_size

    @property
    def state(self) -> PipelineState:
        if not self._loaded:
            return PipelineState.EMPTY
        if self._submitted:
            return PipelineState.SUBMITTED
        return PipelineState.LOADED

    def identity(self) -> PluginIdentity:
        return PluginIdentity(self.NAME, self.VERSION)

    def initialize(self, context: PluginContext) -> bool:
        self.context = context

        print("=" * 40)
        print(f"{self.NAME} initialized!")
        print("This plugin loads image files and extracts")
        print("3D point data based on pixel brightness.")
        print("=" * 40)

        path = self.config.image_path
        if path is None:
            return True
        if Path(path).is_file():
            self.load(path)
        else:
            print(f"{LOG_PREFIX} No default image found at: {path}")
            print(f"{LOG_PREFIX} Place an image file at that path to load it on startup.")
        return True

    def load(self, source: ImageSource) -> bool:
        """Convert an image and replace the current point set.

        Returns:
            True on success; False if the image could not be decoded, in which
            case the previous point set and state are kept
        """
        try:
            result = convert_image(source, self.config, rng=self.rng, backend=self.backend)
        except DecodeFailure as e:
            print(f"{LOG_PREFIX} Failed to load image: {describe_source(source)} ({e.reason})")
            return False

        self._points = result.points
        self._image_size = (result.width, result.height)
        self._loaded = True
        self._submitted = False

        print(format_load_summary(result))
        self.report()
        return True

    def submit(self) -> bool:
        """Hand a copy of the points to the renderer, once per load.

        Returns:
            True if points were submitted; False if there is no context, no
            points, or this load was already submitted
        """
        if self.context is None or len(self._points) == 0 or self._submitted:
            return False

        self.context.set_point_cloud_data(self._points.copy())
        self._submitted = True
        print(f"{LOG_PREFIX} Submitted {len(self._points)} points to renderer")
        return True

    def report(self) -> str:
        """Print and return the z statistics of the current points."""
        message = format_z_stats(compute_z_stats(self._points))
        print(message)
        return message

    def tick(self, dt: float) -> None:
        if self._loaded and not self._submitted:
            self.submit()

        if self.timer.advance(dt) and self._loaded:
            self.report()

    def teardown(self) -> None:
        print(f"{self.NAME} cleaned up!")
        self._points = PointSet.empty()
        self._image_size = None
        self._loaded = False
        self._submitted = False
        self.context = None
        self.timer.reset()


class HeartbeatPlugin:
    """Prints a greeting every `interval` seconds of tick time."""

    NAME = "HeartbeatPlugin"
    VERSION = "1.0.0"

    def __init__(self, interval: float = 2.0) -> None:
        self.context: PluginContext | None = None
        self.timer = DiagnosticTimer(interval)
        self.beats = 0

    def identity(self) -> PluginIdentity:
        return PluginIdentity(self.NAME, self.VERSION)

    def initialize(self, context: PluginContext) -> bool:
        self.context = context
        print(f"{self.NAME} initialized!")
        return True

    def tick(self, dt: float) -> None:
        if self.timer.advance(dt):
            self.beats += 1
            print(f"[{self.NAME}] Hello from heartbeat plugin!")

    def teardown(self) -> None:
        print(f"{self.NAME} cleaned up!")
        self.context = None
        self.timer.reset()
