
import numpy as np

from ..utils.parallel import run_row_bands
from ..utils.pixels import channel_mean, to_byte

SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]], dtype=np.float64)

SOBEL_Y = np.array([[-1, -2, -1],
                    [0, 0, 0],
                    [1, 2, 1]], dtype=np.float64)


class EdgeDetect:
    """
    Sobel edge detection on the unweighted RGB mean.

    The result is a separate mask, the input image is left as is.
    """

    def __init__(self, threshold: float = 25.0, workers: int = 1, **kwargs):
        """
        Args:
            threshold (float): Gradient magnitude above which a pixel is an edge.
            workers (int): Threads used for the row bands.
        """
        self.threshold = threshold
        self.workers = workers

    @staticmethod
    def luminance(image: np.ndarray) -> np.ndarray:
        """(R + G + B) / 3 stored as bytes, shape (H, W)."""
        return to_byte(channel_mean(image))

    def process(self, image: np.ndarray) -> np.ndarray:
        """
        Builds the edge mask.

        Args:
            image (np.ndarray): (H, W, 4) uint8 image.

        Returns:
            np.ndarray: (H, W, 4) uint8 mask. Interior pixels are (255, 255, 255, 255)
            on edges and (0, 0, 0, 255) elsewhere; the 1-pixel border stays all zero.
        """
        h, w, _ = image.shape
        mask = np.zeros((h, w, 4), dtype=np.uint8)
        if h < 3 or w < 3:
            return mask

        gray = self.luminance(image).astype(np.float64)

        def edge_rows(y_start, y_end):
            # interior rows of this band only
            y0 = max(y_start, 1)
            y1 = min(y_end, h - 1)
            if y0 >= y1:
                return
            gx = np.zeros((y1 - y0, w - 2))
            gy = np.zeros((y1 - y0, w - 2))
            for dy in range(3):
                for dx in range(3):
                    window = gray[y0 - 1 + dy:y1 - 1 + dy, dx:w - 2 + dx]
                    if SOBEL_X[dy, dx]:
                        gx += SOBEL_X[dy, dx] * window
                    if SOBEL_Y[dy, dx]:
                        gy += SOBEL_Y[dy, dx] * window
            magnitude = np.sqrt(gx * gx + gy * gy)
            edge = np.where(magnitude > self.threshold, 255, 0).astype(np.uint8)
            mask[y0:y1, 1:w - 1, 0] = edge
            mask[y0:y1, 1:w - 1, 1] = edge
            mask[y0:y1, 1:w - 1, 2] = edge
            mask[y0:y1, 1:w - 1, 3] = 255

        run_row_bands(edge_rows, h, self.workers)
        return mask
