"""
watercolor - turns an 8-bit RGBA raster into a watercolor-style rendering.

usage:
    from watercolor import RasterBuffer, WatercolorConfig, process
    buffer = RasterBuffer.from_array(pixels)
    process(buffer, WatercolorConfig(seed=7))
"""

from .core.config import DEFAULTS, WatercolorConfig
from .core.datatypes import (
    ColorSpace,
    ConfigurationError,
    DimensionError,
    PipelineError,
    Precision,
    RasterBuffer,
)
from .core.pipeline import WatercolorProcessor, create_processor, process, run_pipeline

__version__ = "2.0.0"

__all__ = [
    "DEFAULTS",
    "WatercolorConfig",
    "ColorSpace",
    "Precision",
    "RasterBuffer",
    "PipelineError",
    "ConfigurationError",
    "DimensionError",
    "WatercolorProcessor",
    "create_processor",
    "process",
    "run_pipeline",
    "__version__",
]
