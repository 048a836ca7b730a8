
import numpy as np

from ..core.datatypes import ConfigurationError
from ..utils.parallel import run_row_bands
from ..utils.pixels import clamp_byte, round_half_up


class ColorBleed:
    """
    Stochastic color diffusion.

    Every pixel picks a random flow vector, samples the (pre-bleed) image at
    the displaced position and mixes that color into its own RGB.
    """

    def __init__(self, strength: float = 0.4, max_offset: float = 4,
                 rng: np.random.Generator = None, workers: int = 1, **kwargs):
        """
        Initializes the ColorBleed operation.

        Args:
            strength (float): Weight of the sampled color, 0 keeps the image as is.
            max_offset (float): Largest displacement along each axis, in pixels.
            rng (np.random.Generator): Source of the flow vectors.
            workers (int): Threads used for the row bands.
        """
        if max_offset < 0:
            raise ConfigurationError(f"max_offset must be >= 0, got {max_offset}")
        self.strength = strength
        self.max_offset = max_offset
        self.rng = rng if rng is not None else np.random.default_rng()
        self.workers = workers

    def flow_field(self, height: int, width: int) -> np.ndarray:
        """(H, W, 2) offsets (dx, dy), each uniform in [-max_offset, max_offset)."""
        return (self.rng.random((height, width, 2)) - 0.5) * 2 * self.max_offset

    def process(self, image: np.ndarray) -> np.ndarray:
        h, w, _ = image.shape
        # drawn up front so the result does not depend on the banding
        flow = self.flow_field(h, w)
        ys, xs = np.mgrid[0:h, 0:w]
        nx = np.clip(round_half_up(xs + flow[..., 0]), 0, w - 1).astype(np.intp)
        ny = np.clip(round_half_up(ys + flow[..., 1]), 0, h - 1).astype(np.intp)

        source = image.astype(np.float64)
        out = image.copy()

        def bleed_rows(y_start, y_end):
            own = source[y_start:y_end, :, :3]
            sampled = source[ny[y_start:y_end], nx[y_start:y_end], :3]
            out[y_start:y_end, :, :3] = clamp_byte(
                own * (1 - self.strength) + sampled * self.strength
            )

        run_row_bands(bleed_rows, h, self.workers)
        return out
