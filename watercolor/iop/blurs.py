
import numpy as np
from scipy.ndimage import correlate1d

from ..core.datatypes import ConfigurationError
from ..utils.parallel import run_row_bands
from ..utils.pixels import to_byte


def gaussian_kernel(radius: int) -> np.ndarray:
    """
    Builds a normalized 1D Gaussian kernel of 2 * radius + 1 taps.

    sigma = radius / 2. Radius 0 gives the identity kernel [1.0].
    """
    radius = int(radius)
    if radius < 0:
        raise ConfigurationError(f"Blur radius must be >= 0, got {radius}")
    if radius == 0:
        return np.ones(1)

    sigma = radius / 2.0
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    weights = np.exp(-(offsets * offsets) / (2 * sigma * sigma))
    return weights / weights.sum()


def _tap_weight_sums(length: int, kernel: np.ndarray) -> np.ndarray:
    """Sum of the kernel weights that land inside [0, length) for every position."""
    return correlate1d(np.ones(length), kernel, mode='constant', cval=0.0)


class Blurs:
    """
    Separable Gaussian blur on an 8-bit RGBA image.

    A horizontal pass followed by a vertical pass. Taps falling outside the
    image are skipped and each output value is divided by the sum of the
    weights that were actually used, so borders are not darkened. Every
    pass stores its result as bytes. All four channels are blurred.
    """

    def __init__(self, radius: int = 2, workers: int = 1, **kwargs):
        """
        Initializes the Blurs operation.

        Args:
            radius (int): Kernel radius in pixels. 0 leaves the image untouched.
            workers (int): Threads used for the row bands of each pass.
        """
        self.radius = int(radius)
        self.kernel = gaussian_kernel(self.radius)
        self.workers = workers

    def process(self, image: np.ndarray) -> np.ndarray:
        """
        Applies the blur.

        Args:
            image (np.ndarray): (H, W, 4) uint8 image. Not modified.

        Returns:
            np.ndarray: New (H, W, 4) uint8 image.
        """
        if self.radius == 0:
            return image.copy()

        h, w, _ = image.shape
        kernel = self.kernel
        radius = self.radius
        source = image.astype(np.float64)

        # Horizontal pass
        col_norm = _tap_weight_sums(w, kernel)[None, :, None]
        horizontal = np.empty_like(image)

        def horizontal_rows(y_start, y_end):
            rows = correlate1d(source[y_start:y_end], kernel, axis=1, mode='constant', cval=0.0)
            horizontal[y_start:y_end] = to_byte(rows / col_norm)

        run_row_bands(horizontal_rows, h, self.workers)

        # Vertical pass
        row_norm = _tap_weight_sums(h, kernel)[:, None, None]
        stage = horizontal.astype(np.float64)
        output = np.empty_like(image)

        def vertical_rows(y_start, y_end):
            # halo rows so every tap of the band is available
            lo = max(0, y_start - radius)
            hi = min(h, y_end + radius)
            cols = correlate1d(stage[lo:hi], kernel, axis=0, mode='constant', cval=0.0)
            cols = cols[y_start - lo:y_end - lo]
            output[y_start:y_end] = to_byte(cols / row_norm[y_start:y_end])

        run_row_bands(vertical_rows, h, self.workers)
        return output
