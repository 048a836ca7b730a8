import numpy as np

from ..utils.parallel import run_row_bands
from ..utils.pixels import clamp_byte
from .blurs import Blurs


class Bloom:
    """
    Creates a soft glow by mixing the image with a blurred copy of itself.
    """
    def __init__(self, radius=3, intensity=0.15, workers=1, **kwargs):
        """
        Initializes the Bloom module.

        Args:
            radius (int): Radius of the Gaussian blur producing the glow layer.
            intensity (float): Weight of the blurred layer in the mix (0.0 to 1.0).
            workers (int): Threads used for the row bands.
        """
        self.radius = radius
        self.intensity = intensity
        self.workers = workers
        self.blur = Blurs(radius=radius, workers=workers)

    def process(self, image):
        """
        Applies the bloom effect to the input image.

        Args:
            image (np.ndarray): The input image as a (H, W, 4) uint8 array.

        Returns:
            np.ndarray: The image with the bloom effect. Alpha is the blurred alpha.
        """
        h, w, c = image.shape

        # 1. Blur a copy to create the "glow"
        blurred = self.blur.process(image)

        # 2. Linear blend of RGB, original weighted by 1 - intensity
        original = image[..., :3].astype(np.float64)
        glow = blurred[..., :3].astype(np.float64)
        out = blurred.copy()

        def blend_rows(y_start, y_end):
            out[y_start:y_end, :, :3] = clamp_byte(
                original[y_start:y_end] * (1 - self.intensity) + glow[y_start:y_end] * self.intensity
            )

        run_row_bands(blend_rows, h, self.workers)
        return out
