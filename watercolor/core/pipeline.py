"""
pipeline - The core processing pipeline for the watercolor project.

The stage order is fixed:

    1. edge-preserving blur (or plain blur)
    2. posterize
    3. color bleed
    4. wet-in-wet
    5. granulation
    6. bloom
    7. vibrance / saturation

Every stage takes the current pixel array and returns a new one. The
caller's buffer is only written once all stages have succeeded.
"""

import logging
import os
import time
from typing import Optional

import numpy as np
import yaml

from ..iop.bleed import ColorBleed
from ..iop.bloom import Bloom
from ..iop.blurs import Blurs
from ..iop.coloradjust import ColorAdjust
from ..iop.edges import EdgeDetect
from ..iop.grain import Grain
from ..iop.posterize import Posterize
from ..iop.wet_in_wet import WetInWet
from ..utils.image_io import load_image, save_image
from ..utils.noise import generate_noise_field
from ..utils.pixels import to_byte
from .config import DEFAULTS, WatercolorConfig
from .datatypes import RasterBuffer

logger = logging.getLogger(__name__)

# Weight of the edge mask in the edge-preserving blend
EDGE_MASK_WEIGHT = 0.4


class WatercolorProcessor:
    """
    Holds one image and exposes every watercolor stage as a method.

    Each method replaces `self.image` with the stage output. `run()` applies
    the whole sequence in the fixed order.

    usage:
        processor = WatercolorProcessor(buffer, config)
        processor.gaussian_blur(4)
        processor.bloom(3, 0.2)
        result = processor.image
    """

    def __init__(self, buffer: RasterBuffer, config: Optional[WatercolorConfig] = None):
        self.config = (config or DEFAULTS).validate()
        self.width = buffer.width
        self.height = buffer.height
        self.image = buffer.data.copy()
        self.workers = self.config.thread_count
        self.rng = np.random.default_rng(self.config.seed)
        self.noise = generate_noise_field(self.width, self.height, self.config.precision_enum)

    def gaussian_blur(self, radius: int) -> np.ndarray:
        self.image = Blurs(radius=radius, workers=self.workers).process(self.image)
        return self.image

    def detect_edges(self, threshold: float) -> np.ndarray:
        """Returns the Sobel edge mask of the current image without changing it."""
        return EdgeDetect(threshold=threshold, workers=self.workers).process(self.image)

    def edge_preserving_blur(self, radius: int, threshold: float) -> np.ndarray:
        """
        Blurs, then pulls the pixels on detected edges toward the mask value.
        The mask is computed from the image before the blur.
        """
        edges = self.detect_edges(threshold)
        blurred = Blurs(radius=radius, workers=self.workers).process(self.image)

        on_edge = edges[..., 0] > 0
        mixed = (blurred[on_edge, :3].astype(np.float64) * (1 - EDGE_MASK_WEIGHT)
                 + edges[on_edge, 0:1].astype(np.float64) * EDGE_MASK_WEIGHT)
        blurred[on_edge, :3] = to_byte(mixed)
        self.image = blurred
        return self.image

    def posterize(self, levels: int) -> np.ndarray:
        self.image = Posterize(
            levels=levels, color_space=self.config.color_space, rng=self.rng
        ).process(self.image)
        return self.image

    def color_bleed(self, strength: float, max_offset: float) -> np.ndarray:
        self.image = ColorBleed(
            strength=strength, max_offset=max_offset, rng=self.rng, workers=self.workers
        ).process(self.image)
        return self.image

    def wet_in_wet(self, strength: float) -> np.ndarray:
        self.image = WetInWet(strength=strength, workers=self.workers).process(self.image)
        return self.image

    def granulation(self, intensity: float) -> np.ndarray:
        self.image = Grain(
            intensity=intensity,
            threshold=self.config.edge_threshold,
            noise=self.noise,
            workers=self.workers,
        ).process(self.image)
        return self.image

    def bloom(self, radius: int, intensity: float) -> np.ndarray:
        self.image = Bloom(radius=radius, intensity=intensity, workers=self.workers).process(self.image)
        return self.image

    def adjust_colors(self) -> np.ndarray:
        self.image = ColorAdjust(
            vibrance=self.config.vibrance,
            saturation=self.config.saturation,
            workers=self.workers,
        ).process(self.image)
        return self.image

    def run(self) -> np.ndarray:
        """Applies all stages in order and returns the final image."""
        cfg = self.config
        steps = [
            ("blur", self._blur_step),
            ("posterize", lambda: self.posterize(cfg.posterize_levels)),
            ("color_bleed", lambda: self.color_bleed(cfg.color_bleed_strength, cfg.color_spread_max_offset)),
            ("wet_in_wet", lambda: self.wet_in_wet(cfg.wet_in_wet_effect)),
            ("granulation", lambda: self.granulation(cfg.granulation_intensity)),
            ("bloom", lambda: self.bloom(cfg.bloom_radius, cfg.bloom_intensity)),
            ("adjust_colors", self.adjust_colors),
        ]
        for i, (name, step) in enumerate(steps):
            logger.debug("Step %d/%d: %s", i + 1, len(steps), name)
            step()
        return self.image

    def _blur_step(self) -> np.ndarray:
        if self.config.edge_preserve:
            return self.edge_preserving_blur(self.config.blur_radius, self.config.edge_detection_threshold)
        return self.gaussian_blur(self.config.blur_radius)


def create_processor(buffer: RasterBuffer, config: Optional[WatercolorConfig] = None) -> WatercolorProcessor:
    return WatercolorProcessor(buffer, config)


def process(buffer: RasterBuffer, config: Optional[WatercolorConfig] = None) -> RasterBuffer:
    """
    Applies the watercolor effect to `buffer`.

    Args:
        buffer (RasterBuffer): The image. Written in place on success.
        config (WatercolorConfig): Tunables, defaults to `DEFAULTS`.

    Returns:
        RasterBuffer: The same buffer, now holding the result.

    Raises:
        ConfigurationError: invalid tunables, raised before any work.
        DimensionError: invalid buffer.
    """
    start_time = time.time()
    config = (config or DEFAULTS).validate()
    buffer.validate()

    try:
        result = WatercolorProcessor(buffer, config).run()
    except Exception:
        logger.exception("Watercolor pipeline failed, buffer left unchanged")
        raise

    buffer.data[...] = result
    logger.info("Watercolor applied to %dx%d image in %.2f seconds",
                buffer.width, buffer.height, time.time() - start_time)
    return buffer


def run_pipeline(config_path: str) -> str:
    """
    Runs the watercolor effect on one file described by a YAML config.

    Expected keys: `input_file`, `output_file` (both relative to the config
    file), and an optional `params` mapping of WatercolorConfig fields.

    Returns:
        str: Path of the written image.
    """
    print("--- Starting Watercolor Pipeline ---")
    start_time = time.time()

    base_dir = os.path.dirname(os.path.abspath(config_path))

    # 1. Load Configuration
    print(f"1. Loading configuration from: {config_path}")
    with open(config_path, 'r', encoding='utf-8') as f:
        yml = yaml.safe_load(f) or {}
    config = WatercolorConfig.from_dict(yml.get('params')).validate()
    input_path = os.path.join(base_dir, yml['input_file'])
    output_path = os.path.join(base_dir, yml['output_file'])

    # 2. Decode image
    print(f"2. Decoding image: {input_path}")
    buffer = load_image(input_path)
    print(f"   - Image dimensions: {buffer.width}x{buffer.height}")

    # 3. Process
    print("3. Applying watercolor effect...")
    process(buffer, config)

    # 4. Save
    print(f"4. Saving final image to: {output_path}")
    save_image(buffer, output_path, quality=config.quality)

    print(f"--- Pipeline Finished in {time.time() - start_time:.2f} seconds ---")
    return output_path
