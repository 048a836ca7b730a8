"""
Reading and writing image files as RasterBuffers.

These adapters sit outside the pipeline: decoding normalizes any input
(grayscale with or without alpha, RGB, 16-bit, float) to 8-bit RGBA,
encoding writes PNG with alpha or JPEG without it.
"""

import os

import imageio.v2 as imageio
import numpy as np
from PIL import Image
from skimage.color import gray2rgba
from skimage.util import img_as_ubyte

from ..core.datatypes import DimensionError, RasterBuffer

_NO_ALPHA_FORMATS = ('.jpg', '.jpeg', '.bmp')


def to_rgba8(image: np.ndarray) -> np.ndarray:
    """Converts a decoded image of any dtype and channel count to (H, W, 4) uint8."""
    image = np.asarray(image)
    if image.ndim == 3 and image.shape[2] == 1:
        image = image[..., 0]
    if image.ndim == 3 and image.shape[2] == 2:
        # gray + alpha
        rgba = np.array(gray2rgba(image[..., 0]))
        rgba[..., 3] = image[..., 1]
        image = rgba
    if image.ndim == 2:
        image = gray2rgba(image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise DimensionError(f"Unsupported image shape: {image.shape}")

    if image.dtype != np.uint8:
        if np.issubdtype(image.dtype, np.floating):
            image = np.clip(image, 0.0, 1.0)
        image = img_as_ubyte(image)

    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image, alpha], axis=2)
    return np.ascontiguousarray(image)


def load_image(path: str) -> RasterBuffer:
    """Decodes an image file into an 8-bit RGBA buffer."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found at {path}")
    image = imageio.imread(path)
    return RasterBuffer.from_array(to_rgba8(image))


def save_image(buffer: RasterBuffer, path: str, quality: float = 0.95) -> str:
    """
    Encodes the buffer to `path`, format picked from the extension.

    Args:
        buffer (RasterBuffer): The image to write.
        path (str): Destination file.
        quality (float): JPEG quality in [0, 1].
    """
    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)

    ext = os.path.splitext(path)[1].lower()
    if ext in _NO_ALPHA_FORMATS:
        img = Image.fromarray(np.ascontiguousarray(buffer.data[..., :3]))
        img.save(path, quality=int(round(np.clip(quality, 0.0, 1.0) * 100)))
    else:
        Image.fromarray(buffer.data).save(path)
    return path
