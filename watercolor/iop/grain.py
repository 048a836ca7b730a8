import numpy as np

from ..core.datatypes import DimensionError
from ..utils.parallel import run_row_bands
from ..utils.pixels import channel_mean, clamp_byte


class Grain:
    """
    Pigment granulation.

    Adds a precomputed gradient-noise texture to the light areas of the
    image, the way pigment settles into the paper grain.
    """
    def __init__(self, intensity=0.2, threshold=150, noise=None, workers=1, **kwargs):
        """
        Initializes the Grain module.

        Args:
            intensity (float): Strength of the texture. The noise is scaled by intensity * 30.
            threshold (float): Only pixels whose mean of R, G, B is above this value are changed.
            noise (np.ndarray): (H, W) noise field, one sample per pixel.
            workers (int): Threads used for the row bands.
        """
        self.intensity = intensity
        self.threshold = threshold
        self.noise = noise
        self.workers = workers

    def process(self, image):
        """
        Applies the grain to the input image.

        Args:
            image (np.ndarray): The input image as a (H, W, 4) uint8 array.

        Returns:
            np.ndarray: The image with the grain effect.
        """
        h, w, c = image.shape
        if self.noise is None or self.noise.shape != (h, w):
            shape = None if self.noise is None else self.noise.shape
            raise DimensionError(f"Noise field shape {shape} doesn't match image {(h, w)}")

        # 1. Scale the noise
        grain = self.noise.astype(np.float64) * self.intensity * 30

        # 2. Gate on lightness measured before any change
        lit = channel_mean(image) > self.threshold

        out = image.copy()
        source = image.astype(np.float64)

        def grain_rows(y_start, y_end):
            rows = slice(y_start, y_end)
            gate = lit[rows]
            n = grain[rows][gate]
            px = source[rows][gate]
            band = out[rows]
            # 3. Red gets the full noise, green and blue slightly damped
            band[gate, 0] = clamp_byte(px[:, 0] + n)
            band[gate, 1] = clamp_byte(px[:, 1] + n * 0.9)
            band[gate, 2] = clamp_byte(px[:, 2] + n * 0.95)

        run_row_bands(grain_rows, h, self.workers)
        return out
