"""
Gradient (Perlin-style) noise used for the granulation texture.

The field is deterministic: it depends only on the pixel coordinates and the
precision tier.
"""

import numpy as np

from ..core.datatypes import Precision

# Sampling scale per precision tier, in lattice cells per pixel
NOISE_SCALES = {
    Precision.LOW: 0.05,
    Precision.MEDIUM: 0.05,
    Precision.HIGH: 0.02,
}


def fade(t):
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3"""
    return t * t * t * (t * (t * 6 - 15) + 10)


def lattice_hash(xi, yi):
    """
    Hashes integer lattice coordinates to [0, 255].

    The product is wrapped to a signed 32-bit integer before the shift/xor
    step, then multiplied by 127 and masked to the low byte.
    """
    xi = np.asarray(xi, dtype=np.int64)
    yi = np.asarray(yi, dtype=np.int64)
    h = (xi * 374761393 + yi * 668265263).astype(np.int32).astype(np.int64)
    h = h ^ (h >> 13)
    return (h * 127) & 255


def grad(h, x, y):
    """Dot product of the gradient selected by the low 4 bits of h with (x, y)."""
    h = np.asarray(h) & 15
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, 0.0))
    return np.where((h & 1) == 0, u, -u) + np.where((h & 2) == 0, v, -v)


def perlin(x, y):
    """Samples the noise at (x, y). Works on scalars and arrays."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    xi = np.floor(x)
    yi = np.floor(y)
    xf = x - xi
    yf = y - yi
    xi = xi.astype(np.int64)
    yi = yi.astype(np.int64)

    n00 = grad(lattice_hash(xi, yi), xf, yf)
    n10 = grad(lattice_hash(xi + 1, yi), xf - 1, yf)
    n01 = grad(lattice_hash(xi, yi + 1), xf, yf - 1)
    n11 = grad(lattice_hash(xi + 1, yi + 1), xf - 1, yf - 1)

    u = fade(xf)
    v = fade(yf)
    nx0 = n00 + (n10 - n00) * u
    nx1 = n01 + (n11 - n01) * u
    return nx0 + (nx1 - nx0) * v


def generate_noise_field(width: int, height: int, precision=Precision.MEDIUM) -> np.ndarray:
    """
    Builds one noise sample per pixel.

    Args:
        width (int): Image width.
        height (int): Image height.
        precision (Precision or str): Tier selecting the lattice scale.

    Returns:
        np.ndarray: float32 array of shape (height, width).
    """
    scale = NOISE_SCALES[Precision(precision)]
    ys, xs = np.mgrid[0:height, 0:width]
    return perlin(xs * scale, ys * scale).astype(np.float32)
