# -*- coding: utf-8 -*-
"""
A module for the color science used by the posterize stage.

sRGB -> CIE XYZ -> CIELAB, D65 reference white. All functions work on plain
floats as well as numpy arrays of any shape.
"""

import numpy as np

# D65 reference white, XYZ scaled to [0, 100]
REF_WHITE = (95.047, 100.0, 108.883)

# sRGB linear -> XYZ (rows: X, Y, Z)
M_SRGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
])

_LAB_EPSILON = 0.008856
_LAB_KAPPA = 7.787


def srgb_to_linear(c):
    """gamma-decode sRGB [0-1] -> linear"""
    c = np.asarray(c, dtype=np.float64)
    return np.where(c > 0.04045, ((c + 0.055) / 1.055) ** 2.4, c / 12.92)


def rgb_to_xyz(r, g, b):
    """
    Converts normalized sRGB channels to XYZ.

    Args:
        r, g, b: sRGB values in [0, 1] (gamma encoded).

    Returns:
        tuple: (x, y, z) scaled to [0, 100].
    """
    r, g, b = srgb_to_linear(r), srgb_to_linear(g), srgb_to_linear(b)
    m = M_SRGB_TO_XYZ
    x = (r * m[0, 0] + g * m[0, 1] + b * m[0, 2]) * 100
    y = (r * m[1, 0] + g * m[1, 1] + b * m[1, 2]) * 100
    z = (r * m[2, 0] + g * m[2, 1] + b * m[2, 2]) * 100
    return x, y, z


def _lab_f(t):
    t = np.asarray(t, dtype=np.float64)
    return np.where(t > _LAB_EPSILON, np.cbrt(t), _LAB_KAPPA * t + 16 / 116)


def xyz_to_lab(x, y, z):
    """
    Converts XYZ (scaled to [0, 100]) to CIELAB.

    Returns:
        tuple: (L, a, b) with L in [0, 100] and a, b roughly in [-128, 128].
    """
    fx = _lab_f(np.asarray(x, dtype=np.float64) / REF_WHITE[0])
    fy = _lab_f(np.asarray(y, dtype=np.float64) / REF_WHITE[1])
    fz = _lab_f(np.asarray(z, dtype=np.float64) / REF_WHITE[2])
    L = 116 * fy - 16
    a = 500 * (fx - fy)
    b = 200 * (fy - fz)
    return L, a, b


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """RGB bytes [0-255] -> Lab (float64), vectorised on final axis"""
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    x, y, z = rgb_to_xyz(rgb[..., 0], rgb[..., 1], rgb[..., 2])
    L, a, b = xyz_to_lab(x, y, z)
    return np.stack((L, a, b), axis=-1)
