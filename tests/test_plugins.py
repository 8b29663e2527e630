"""Tests for the host plugins (orchestration + side effects)."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from astroview.config import ConversionConfig
from astroview.plugins import (
    AstroViewerPlugin,
    HeartbeatPlugin,
    PipelineState,
    Plugin,
    PluginContext,
    PluginIdentity,
)
from astroview.render import RecordingRenderer


def save_solid_png(path: Path, width: int, height: int, rgb: tuple[int, int, int]) -> Path:
    img = np.empty((height, width, 3), dtype=np.uint8)
    img[:, :] = rgb
    Image.fromarray(img).save(path)
    return path


def make_plugin(**config_kwargs) -> tuple[AstroViewerPlugin, RecordingRenderer]:
    """Create an initialized plugin that does not look for a startup image."""
    config_kwargs.setdefault("image_path", None)
    renderer = RecordingRenderer()
    plugin = AstroViewerPlugin(ConversionConfig(**config_kwargs), rng=0)
    plugin.initialize(PluginContext(renderer))
    return plugin, renderer


class TestLoad:
    """Test loading images into the pipeline."""

    def test_starts_empty(self) -> None:
        plugin, _ = make_plugin()
        assert plugin.state is PipelineState.EMPTY
        assert len(plugin.points) == 0
        assert plugin.image_size is None

    def test_load_white_image(self, tmp_path) -> None:
        """Test 2x2 white image, threshold 0.1, unbounded -> 4 points."""
        plugin, _ = make_plugin(max_points=0)
        path = save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255))

        assert plugin.load(path) is True
        assert plugin.state is PipelineState.LOADED
        assert len(plugin.points) == 4
        assert plugin.image_size == (2, 2)

    def test_load_caps_points(self, tmp_path) -> None:
        """Test 100x100 mid-gray image with max_points=10 keeps 10 points."""
        plugin, _ = make_plugin(max_points=10)
        path = save_solid_png(tmp_path / "gray.png", 100, 100, (128, 127, 127))

        assert plugin.load(path) is True
        assert len(plugin.points) == 10

    def test_empty_result_is_loaded(self, tmp_path) -> None:
        """Test a threshold no pixel passes still loads, with zero points."""
        plugin, renderer = make_plugin(brightness_threshold=1.0)
        path = save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255))

        assert plugin.load(path) is True
        assert plugin.state is PipelineState.LOADED
        assert len(plugin.points) == 0

        # Nothing to submit
        assert plugin.submit() is False
        plugin.tick(0.1)
        assert renderer.submissions == []

    def test_failed_load_from_empty(self, tmp_path, capsys) -> None:
        """Test a missing file leaves the plugin empty and reports the failure."""
        plugin, _ = make_plugin()
        missing = tmp_path / "missing.png"

        assert plugin.load(missing) is False
        assert plugin.state is PipelineState.EMPTY
        assert f"Failed to load image: {missing}" in capsys.readouterr().out

    def test_failed_load_keeps_submitted_points(self, tmp_path) -> None:
        """Test a missing file leaves a submitted point set untouched."""
        plugin, renderer = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        plugin.submit()
        before = plugin.points

        assert plugin.load(tmp_path / "missing.png") is False
        assert plugin.state is PipelineState.SUBMITTED
        assert plugin.points is before
        assert plugin.image_size == (2, 2)
        assert len(renderer.submissions) == 1

    def test_reload_replaces_points(self, tmp_path) -> None:
        """Test a second load replaces, not appends."""
        plugin, _ = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "a.png", 2, 2, (255, 255, 255)))
        plugin.load(save_solid_png(tmp_path / "b.png", 3, 1, (255, 255, 255)))

        assert len(plugin.points) == 3
        assert plugin.image_size == (3, 1)

    def test_load_summary_printed(self, tmp_path, capsys) -> None:
        plugin, _ = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        out = capsys.readouterr().out
        assert "Image loaded: 2x2" in out
        assert "Final points: 4" in out
        assert "[AstroViewer] Points: 4 | Z range:" in out

    def test_cv2_backend(self, tmp_path) -> None:
        """Test the plugin can decode through OpenCV."""
        renderer = RecordingRenderer()
        plugin = AstroViewerPlugin(ConversionConfig(image_path=None, max_points=0), backend="cv2")
        plugin.initialize(PluginContext(renderer))
        assert plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        assert len(plugin.points) == 4


class TestSubmit:
    """Test handing points to the renderer."""

    def test_submit_once_per_load(self, tmp_path) -> None:
        """Test calling submit twice delivers the points once."""
        plugin, renderer = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))

        assert plugin.submit() is True
        assert plugin.submit() is False
        assert len(renderer.submissions) == 1
        assert plugin.state is PipelineState.SUBMITTED

    def test_submit_without_points(self) -> None:
        """Test submit before any load is ignored."""
        plugin, renderer = make_plugin()
        assert plugin.submit() is False
        assert renderer.submissions == []

    def test_submit_without_context(self, tmp_path) -> None:
        """Test submit before initialize is ignored."""
        plugin = AstroViewerPlugin(ConversionConfig(image_path=None))
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        assert plugin.submit() is False
        assert plugin.state is PipelineState.LOADED

    def test_renderer_gets_copy(self, tmp_path) -> None:
        """Test the renderer does not share the plugin's arrays."""
        plugin, renderer = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        plugin.submit()

        submitted = renderer.latest
        assert submitted is not plugin.points
        assert not np.shares_memory(submitted.positions, plugin.points.positions)
        assert np.array_equal(submitted.positions, plugin.points.positions)

    def test_new_load_resubmits(self, tmp_path) -> None:
        """Test a new load resets SUBMITTED back to LOADED."""
        plugin, renderer = make_plugin(max_points=0)
        path = save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255))
        plugin.load(path)
        plugin.submit()

        plugin.load(path)
        assert plugin.state is PipelineState.LOADED
        assert plugin.submit() is True
        assert len(renderer.submissions) == 2


class TestTick:
    """Test tick-driven behavior."""

    def test_first_tick_submits(self, tmp_path) -> None:
        plugin, renderer = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))

        plugin.tick(0.016)
        plugin.tick(0.016)
        assert len(renderer.submissions) == 1
        assert plugin.state is PipelineState.SUBMITTED

    def test_periodic_report(self, tmp_path, capsys) -> None:
        """Test stats are printed once the interval has elapsed."""
        plugin, _ = make_plugin(max_points=0, report_interval=1.0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        capsys.readouterr()

        plugin.tick(0.5)
        assert "Z range" not in capsys.readouterr().out
        plugin.tick(0.5)
        assert "[AstroViewer] Points: 4 | Z range:" in capsys.readouterr().out

    def test_no_report_when_empty(self, capsys) -> None:
        """Test no stats are printed before anything is loaded."""
        plugin, _ = make_plugin(report_interval=1.0)
        capsys.readouterr()
        plugin.tick(5.0)
        assert capsys.readouterr().out == ""

    def test_report_does_not_change_points(self, tmp_path) -> None:
        plugin, _ = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        before = plugin.points.positions.copy()
        plugin.report()
        assert np.array_equal(plugin.points.positions, before)


class TestLifecycle:
    """Test initialize/teardown/identity."""

    def test_identity(self) -> None:
        plugin = AstroViewerPlugin()
        assert plugin.identity() == PluginIdentity("AstroViewerPlugin", "1.0.0")

    def test_initialize_loads_startup_image(self, tmp_path) -> None:
        """Test an existing image_path is loaded on initialize."""
        path = save_solid_png(tmp_path / "start.png", 2, 2, (255, 255, 255))
        renderer = RecordingRenderer()
        plugin = AstroViewerPlugin(ConversionConfig(image_path=str(path), max_points=0))

        assert plugin.initialize(PluginContext(renderer)) is True
        assert plugin.state is PipelineState.LOADED
        assert len(plugin.points) == 4

    def test_initialize_without_startup_image(self, tmp_path, capsys) -> None:
        """Test a missing image_path only prints a hint."""
        missing = tmp_path / "test_image.jpg"
        plugin = AstroViewerPlugin(ConversionConfig(image_path=str(missing)))

        assert plugin.initialize(PluginContext(RecordingRenderer())) is True
        assert plugin.state is PipelineState.EMPTY
        assert "No default image found" in capsys.readouterr().out

    def test_teardown_clears(self, tmp_path) -> None:
        plugin, _ = make_plugin(max_points=0)
        plugin.load(save_solid_png(tmp_path / "white.png", 2, 2, (255, 255, 255)))
        plugin.teardown()

        assert plugin.state is PipelineState.EMPTY
        assert len(plugin.points) == 0
        assert plugin.context is None
        assert plugin.submit() is False

    def test_satisfies_protocol(self) -> None:
        """Test both plugins expose the lifecycle methods."""
        plugins: list[Plugin] = [AstroViewerPlugin(), HeartbeatPlugin()]
        for plugin in plugins:
            for name in ("initialize", "tick", "teardown", "identity"):
                assert callable(getattr(plugin, name))


class TestHeartbeatPlugin:
    """Test the heartbeat plugin."""

    def test_beats_every_interval(self, capsys) -> None:
        plugin = HeartbeatPlugin(interval=2.0)
        plugin.initialize(PluginContext(RecordingRenderer()))
        for _ in range(10):
            plugin.tick(0.5)

        assert plugin.beats == 2
        assert capsys.readouterr().out.count("Hello from heartbeat plugin!") == 2

    def test_identity(self) -> None:
        assert HeartbeatPlugin().identity() == PluginIdentity("HeartbeatPlugin", "1.0.0")

    def test_teardown(self) -> None:
        plugin = HeartbeatPlugin()
        plugin.initialize(PluginContext(RecordingRenderer()))
        plugin.teardown()
        assert plugin.context is None
