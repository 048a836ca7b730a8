"""
Narrowing float results back to 8-bit channels.

Two rounding rules are used across the stages:

* `to_byte` rounds half to even, the way a clamped byte array stores a float.
* `clamp_byte` rounds half up (floor(v + 0.5)) before clipping.
"""

import numpy as np


def to_byte(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def clamp_byte(values: np.ndarray) -> np.ndarray:
    return np.clip(np.floor(np.asarray(values, dtype=np.float64) + 0.5), 0, 255).astype(np.uint8)


def round_half_up(values):
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def channel_mean(image: np.ndarray) -> np.ndarray:
    """Unweighted mean of R, G and B as float64, shape (H, W)."""
    rgb = image[..., :3].astype(np.float64)
    return (rgb[..., 0] + rgb[..., 1] + rgb[..., 2]) / 3
