
import numpy as np

from ..utils.parallel import run_row_bands
from ..utils.pixels import clamp_byte


class WetInWet:
    """
    Simulates painting wet-in-wet: each interior pixel is mixed with the mean
    of its 8 neighbours. The 1-pixel border is never touched.
    """

    def __init__(self, strength: float = 0.3, workers: int = 1, **kwargs):
        self.strength = strength
        self.workers = workers

    def process(self, image: np.ndarray) -> np.ndarray:
        h, w, _ = image.shape
        out = image.copy()
        if h < 3 or w < 3:
            return out

        source = image[..., :3].astype(np.float64)

        def blend_rows(y_start, y_end):
            y0 = max(y_start, 1)
            y1 = min(y_end, h - 1)
            if y0 >= y1:
                return
            total = np.zeros((y1 - y0, w - 2, 3))
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if dx == 0 and dy == 0:
                        continue
                    total += source[y0 + dy:y1 + dy, 1 + dx:w - 1 + dx]
            mean = total / 8
            own = source[y0:y1, 1:w - 1]
            out[y0:y1, 1:w - 1, :3] = clamp_byte(own * (1 - self.strength) + mean * self.strength)

        run_row_bands(blend_rows, h, self.workers)
        return out
