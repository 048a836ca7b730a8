"""
Core data types for the watercolor pipeline.

The raster model is fixed: 8 bits per channel, four interleaved channels
(R, G, B, A), row-major.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

import numpy as np


CHANNELS = 4


class ColorSpace(Enum):
    """Color space used by the posterize stage"""
    SRGB = "srgb"
    LAB = "lab"


class Precision(Enum):
    """Precision tier, controls the noise lattice scale"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PipelineError(Exception):
    """Base class for every error raised by the pipeline"""
    pass


class ConfigurationError(PipelineError, ValueError):
    """Invalid tunable, detected before any pixel is touched"""
    pass


class DimensionError(PipelineError, ValueError):
    """Raster buffer with impossible dimensions or layout"""
    pass


@dataclass
class RasterBuffer:
    """
    An 8-bit RGBA raster.

    `data` is a (height, width, 4) uint8 array. The dimensions are fixed once
    the buffer is created; stages replace pixel values, never the shape.
    """
    data: np.ndarray
    width: int
    height: int

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            DimensionError: if the dimensions or the data layout are invalid.
        """
        if self.width <= 0 or self.height <= 0:
            raise DimensionError(
                f"Buffer width and height must be positive, got {self.width}x{self.height}"
            )
        if self.data.dtype != np.uint8:
            raise DimensionError(f"Buffer data must be uint8, got {self.data.dtype}")
        expected = (self.height, self.width, CHANNELS)
        if self.data.shape != expected:
            raise DimensionError(f"Data shape {self.data.shape} doesn't match dimensions {expected}")

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'RasterBuffer':
        """
        Wraps an (H, W, 4) array. An (H, W, 3) array gets an opaque alpha channel.
        Float or wider integer input is clipped into the byte range.
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, CHANNELS):
            raise DimensionError(f"Expected an (H, W, 3) or (H, W, 4) array, got {array.shape}")
        if array.dtype != np.uint8:
            array = np.clip(np.rint(array), 0, 255).astype(np.uint8)
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=2)
        height, width = array.shape[:2]
        return cls(data=np.ascontiguousarray(array), width=width, height=height)

    @classmethod
    def from_bytes(cls, raw: Union[bytes, bytearray, np.ndarray], width: int, height: int) -> 'RasterBuffer':
        """Builds a buffer from flat interleaved RGBA bytes."""
        flat = np.frombuffer(bytes(raw), dtype=np.uint8) if not isinstance(raw, np.ndarray) else raw.ravel()
        if flat.size % CHANNELS != 0:
            raise DimensionError(f"Buffer length {flat.size} is not a multiple of {CHANNELS}")
        if width <= 0 or height <= 0:
            raise DimensionError(f"Buffer width and height must be positive, got {width}x{height}")
        if flat.size != width * height * CHANNELS:
            raise DimensionError(
                f"Buffer length {flat.size} doesn't match {width}x{height}x{CHANNELS}"
            )
        data = flat.astype(np.uint8).reshape(height, width, CHANNELS).copy()
        return cls(data=data, width=width, height=height)

    @property
    def size(self) -> Tuple[int, int]:
        """Image size (width, height)"""
        return (self.width, self.height)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    def copy(self) -> 'RasterBuffer':
        return RasterBuffer(data=self.data.copy(), width=self.width, height=self.height)
