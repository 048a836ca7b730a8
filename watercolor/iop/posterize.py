
import logging

import numpy as np
from numba import njit

from ..core.datatypes import ColorSpace, ConfigurationError
from ..utils.color_science import rgb_to_lab
from ..utils.pixels import clamp_byte, round_half_up

logger = logging.getLogger(__name__)

KMEANS_ITERATIONS = 5


@njit
def _nearest_centroid(points, centroids):
    """
    Index of the closest centroid for every point (Euclidean distance).
    The first minimum wins on ties.
    """
    n = points.shape[0]
    k = centroids.shape[0]
    labels = np.zeros(n, dtype=np.int64)
    for i in range(n):
        best = np.inf
        best_idx = 0
        for j in range(k):
            dl = points[i, 0] - centroids[j, 0]
            da = points[i, 1] - centroids[j, 1]
            db = points[i, 2] - centroids[j, 2]
            dist = np.sqrt(dl * dl + da * da + db * db)
            if dist < best:
                best = dist
                best_idx = j
        labels[i] = best_idx
    return labels


@njit
def _kmeans_loop(points, centroids, iterations):
    """
    Lloyd iterations, updating `centroids` in place.
    A centroid that receives no points keeps its previous value.
    """
    k = centroids.shape[0]
    for _ in range(iterations):
        labels = _nearest_centroid(points, centroids)
        sums = np.zeros((k, 3))
        counts = np.zeros(k, dtype=np.int64)
        for i in range(points.shape[0]):
            c = labels[i]
            sums[c, 0] += points[i, 0]
            sums[c, 1] += points[i, 1]
            sums[c, 2] += points[i, 2]
            counts[c] += 1
        for j in range(k):
            if counts[j] > 0:
                centroids[j, 0] = sums[j, 0] / counts[j]
                centroids[j, 1] = sums[j, 1] / counts[j]
                centroids[j, 2] = sums[j, 2] / counts[j]
    return centroids


class Posterize:
    """
    Reduces the number of distinct colors.

    * srgb: every channel is snapped to the nearest multiple of 255 / (levels - 1).
    * lab: the pixels are clustered into `levels` colors with K-means in CIELAB.
    """

    def __init__(self, levels: int = 8, color_space: str = "srgb",
                 rng: np.random.Generator = None, iterations: int = KMEANS_ITERATIONS, **kwargs):
        """
        Initializes the Posterize operator.

        Args:
            levels (int): Number of levels per channel (srgb) or clusters (lab).
            color_space (str): 'srgb' or 'lab'.
            rng (np.random.Generator): Source for the K-means seeding.
            iterations (int): Number of Lloyd iterations in lab mode.
        """
        try:
            self.color_space = ColorSpace(color_space)
        except ValueError:
            raise ConfigurationError(
                f"'{color_space}' is not a valid color space. "
                f"Available: {[e.value for e in ColorSpace]}"
            )
        min_levels = 2 if self.color_space == ColorSpace.SRGB else 1
        if levels < min_levels:
            raise ConfigurationError(
                f"levels must be >= {min_levels} in {self.color_space.value} mode, got {levels}"
            )
        self.levels = int(levels)
        self.iterations = iterations
        self.rng = rng if rng is not None else np.random.default_rng()

    def process(self, image: np.ndarray) -> np.ndarray:
        """
        Args:
            image (np.ndarray): (H, W, 4) uint8 image.

        Returns:
            np.ndarray: New (H, W, 4) uint8 image, alpha unchanged.
        """
        if self.color_space == ColorSpace.LAB:
            return self._posterize_lab(image)
        return self._posterize_rgb(image)

    def _posterize_rgb(self, image: np.ndarray) -> np.ndarray:
        step = 255 / (self.levels - 1)
        out = image.copy()
        rgb = image[..., :3].astype(np.float64)
        out[..., :3] = clamp_byte(round_half_up(rgb / step) * step)
        return out

    def _posterize_lab(self, image: np.ndarray) -> np.ndarray:
        h, w, _ = image.shape
        points = rgb_to_lab(image[..., :3]).reshape(-1, 3)

        centroids = self.initial_centroids()
        centroids = _kmeans_loop(points, centroids, self.iterations)
        labels = _nearest_centroid(points, centroids)
        logger.debug("K-means finished, %d of %d clusters used",
                     len(np.unique(labels)), self.levels)

        # Approximate reconstruction: L scaled to bytes, a/b offset by 128.
        # This is not an inverse of the Lab conversion.
        palette = np.empty((self.levels, 3), dtype=np.uint8)
        palette[:, 0] = clamp_byte(centroids[:, 0] * 2.55)
        palette[:, 1] = clamp_byte(centroids[:, 1] + 128)
        palette[:, 2] = clamp_byte(centroids[:, 2] + 128)

        out = image.copy()
        out[..., :3] = palette[labels].reshape(h, w, 3)
        return out

    def initial_centroids(self) -> np.ndarray:
        """L uniform in [0, 100), a and b uniform in [-128, 128)."""
        centroids = np.empty((self.levels, 3))
        draws = self.rng.random((self.levels, 3))
        centroids[:, 0] = draws[:, 0] * 100
        centroids[:, 1] = (draws[:, 1] - 0.5) * 256
        centroids[:, 2] = (draws[:, 2] - 0.5) * 256
        return centroids
