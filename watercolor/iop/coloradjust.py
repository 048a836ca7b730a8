
import numpy as np

from ..utils.parallel import run_row_bands
from ..utils.pixels import clamp_byte

# Perceptual gray weights used by the saturation step
GRAY_WEIGHTS = (0.2989, 0.5870, 0.1140)


class ColorAdjust:
    """
    Final tone adjustment: vibrance, then saturation.

    Vibrance pulls every channel toward the brightest channel of the pixel,
    more so for already colorful pixels. Saturation then scales the distance
    of each channel from the perceptual gray of the vibrance-adjusted pixel.
    """

    def __init__(self, vibrance: float = 1.0, saturation: float = 1.1, workers: int = 1, **kwargs):
        """
        Args:
            vibrance (float): Vibrance amount, 0 disables the step.
            saturation (float): Saturation factor, 1 keeps the colors, 0 gives gray.
            workers (int): Threads used for the row bands.
        """
        self.vibrance = vibrance
        self.saturation = saturation
        self.workers = workers

    def apply_vibrance(self, rgb: np.ndarray) -> np.ndarray:
        rgb = rgb.astype(np.float64)
        peak = rgb.max(axis=-1, keepdims=True)
        mean = (rgb[..., 0:1] + rgb[..., 1:2] + rgb[..., 2:3]) / 3
        amt = (peak - mean) * self.vibrance * 0.3
        return clamp_byte(rgb + (peak - rgb) * amt)

    def apply_saturation(self, rgb: np.ndarray) -> np.ndarray:
        rgb = rgb.astype(np.float64)
        gray = (GRAY_WEIGHTS[0] * rgb[..., 0:1]
                + GRAY_WEIGHTS[1] * rgb[..., 1:2]
                + GRAY_WEIGHTS[2] * rgb[..., 2:3])
        return clamp_byte(gray + (rgb - gray) * self.saturation)

    def process(self, image: np.ndarray) -> np.ndarray:
        h, w, _ = image.shape
        out = image.copy()

        def adjust_rows(y_start, y_end):
            rgb = self.apply_vibrance(image[y_start:y_end, :, :3])
            out[y_start:y_end, :, :3] = self.apply_saturation(rgb)

        run_row_bands(adjust_rows, h, self.workers)
        return out
