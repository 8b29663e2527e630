"""AstroView: image to point cloud conversion.

Public API exports for decoding, conversion, statistics and the host plugins.
"""

# Data types
from astroview.types import (
    Point,
    PointSet,
    DecodedImage,
    PixelSelection,
    ConversionResult,
)

# Configuration
from astroview.config import (
    ConversionConfig,
    config_to_dict,
    save_config,
    load_config,
)

# Errors
from astroview.errors import AstroViewError, DecodeFailure

# Decoding
from astroview.decode import decode_image, open_pixels

# Conversion pipeline
from astroview.convert import (
    compute_brightness,
    filter_bright_pixels,
    map_pixels,
    map_pixel,
    sample_points,
    convert_pixels,
    convert_image,
)

# Diagnostics
from astroview.stats import ZStats, compute_z_stats, format_z_stats, format_load_summary
from astroview.timer import DiagnosticTimer

# Host integration
from astroview.render import Renderer, RecordingRenderer, MatplotlibRenderer
from astroview.plugins import (
    Plugin,
    PluginContext,
    PluginIdentity,
    PipelineState,
    AstroViewerPlugin,
    HeartbeatPlugin,
)

__version__ = "1.0.0"

__all__ = [
    # Types
    "Point",
    "PointSet",
    "DecodedImage",
    "PixelSelection",
    "ConversionResult",

    # Configuration
    "ConversionConfig",
    "config_to_dict",
    "save_config",
    "load_config",

    # Errors
    "AstroViewError",
    "DecodeFailure",

    # Decoding
    "decode_image",
    "open_pixels",

    # Conversion
    "compute_brightness",
    "filter_bright_pixels",
    "map_pixels",
    "map_pixel",
    "sample_points",
    "convert_pixels",
    "convert_image",

    # Diagnostics
    "ZStats",
    "compute_z_stats",
    "format_z_stats",
    "format_load_summary",
    "DiagnosticTimer",

    # Host integration
    "Renderer",
    "RecordingRenderer",
    "MatplotlibRenderer",
    "Plugin",
    "PluginContext",
    "PluginIdentity",
    "PipelineState",
    "AstroViewerPlugin",
    "HeartbeatPlugin",
]
