"""
Test color bleed, wet-in-wet, granulation, bloom and color adjustment
"""
import numpy as np
import pytest

from watercolor.core.datatypes import ConfigurationError, DimensionError
from watercolor.iop.bleed import ColorBleed
from watercolor.iop.bloom import Bloom
from watercolor.iop.blurs import Blurs
from watercolor.iop.coloradjust import ColorAdjust
from watercolor.iop.grain import Grain
from watercolor.iop.wet_in_wet import WetInWet


class TestColorBleed:

    def test_zero_strength_is_identity(self, noisy_image):
        out = ColorBleed(strength=0.0, max_offset=4, rng=np.random.default_rng(1)).process(noisy_image)
        assert np.array_equal(out, noisy_image)

    def test_zero_offset_is_identity(self, noisy_image):
        out = ColorBleed(strength=0.7, max_offset=0, rng=np.random.default_rng(1)).process(noisy_image)
        assert np.array_equal(out, noisy_image)

    def test_alpha_untouched(self, noisy_image):
        out = ColorBleed(strength=0.9, max_offset=6, rng=np.random.default_rng(2)).process(noisy_image)
        assert np.array_equal(out[..., 3], noisy_image[..., 3])
        assert not np.array_equal(out[..., :3], noisy_image[..., :3])

    def test_uniform_image_stays_uniform(self, uniform_image):
        out = ColorBleed(strength=0.5, max_offset=10, rng=np.random.default_rng(3)).process(uniform_image)
        assert np.array_equal(out, uniform_image)

    def test_same_seed_same_result(self, noisy_image):
        a = ColorBleed(strength=0.4, max_offset=4, rng=np.random.default_rng(8)).process(noisy_image)
        b = ColorBleed(strength=0.4, max_offset=4, rng=np.random.default_rng(8)).process(noisy_image)
        assert np.array_equal(a, b)

    def test_flow_field_bounds(self):
        bleed = ColorBleed(strength=0.4, max_offset=3, rng=np.random.default_rng(4))
        flow = bleed.flow_field(20, 30)
        assert flow.shape == (20, 30, 2)
        assert flow.min() >= -3 and flow.max() < 3

    def test_negative_offset_rejected(self):
        with pytest.raises(ConfigurationError):
            ColorBleed(strength=0.4, max_offset=-1)

    def test_threaded_bands_match_sequential(self):
        image = np.random.default_rng(5).integers(0, 256, size=(64, 20, 4), dtype=np.uint8)
        single = ColorBleed(strength=0.4, max_offset=4, rng=np.random.default_rng(6), workers=1).process(image)
        banded = ColorBleed(strength=0.4, max_offset=4, rng=np.random.default_rng(6), workers=4).process(image)
        assert np.array_equal(single, banded)


class TestWetInWet:

    def test_border_never_modified(self, noisy_image):
        out = WetInWet(strength=0.8).process(noisy_image)
        assert np.array_equal(out[0], noisy_image[0])
        assert np.array_equal(out[-1], noisy_image[-1])
        assert np.array_equal(out[:, 0], noisy_image[:, 0])
        assert np.array_equal(out[:, -1], noisy_image[:, -1])
        assert not np.array_equal(out[1:-1, 1:-1], noisy_image[1:-1, 1:-1])

    def test_zero_strength_is_identity(self, noisy_image):
        assert np.array_equal(WetInWet(strength=0.0).process(noisy_image), noisy_image)

    def test_blends_with_neighbour_mean(self, make_image):
        image = make_image(3, 3, (80, 40, 0, 255))
        image[1, 1, :3] = (0, 0, 0)
        out = WetInWet(strength=0.5).process(image)
        assert out[1, 1, :3].tolist() == [40, 20, 0]

    def test_alpha_untouched(self, noisy_image):
        out = WetInWet(strength=0.5).process(noisy_image)
        assert np.array_equal(out[..., 3], noisy_image[..., 3])

    def test_threaded_bands_match_sequential(self):
        image = np.random.default_rng(9).integers(0, 256, size=(50, 33, 4), dtype=np.uint8)
        single = WetInWet(strength=0.3, workers=1).process(image)
        banded = WetInWet(strength=0.3, workers=3).process(image)
        assert np.array_equal(single, banded)


class TestGrain:

    @pytest.fixture
    def split_image(self, make_image):
        image = make_image(10, 8, (100, 100, 100, 255))
        image[:, 5:, :3] = 200
        return image

    @pytest.fixture
    def noise(self):
        return np.random.default_rng(0).uniform(-1, 1, size=(8, 10)).astype(np.float32)

    def test_only_light_pixels_change(self, split_image, noise):
        out = Grain(intensity=0.5, threshold=150, noise=noise).process(split_image)
        assert np.array_equal(out[:, :5], split_image[:, :5])

        n = noise[:, 5:].astype(np.float64) * 0.5 * 30
        assert np.array_equal(out[:, 5:, 0], np.floor(200 + n + 0.5).astype(np.uint8))
        assert np.array_equal(out[:, 5:, 1], np.floor(200 + n * 0.9 + 0.5).astype(np.uint8))
        assert np.array_equal(out[:, 5:, 2], np.floor(200 + n * 0.95 + 0.5).astype(np.uint8))
        assert np.array_equal(out[..., 3], split_image[..., 3])

    def test_threshold_is_exclusive(self, make_image):
        image = make_image(4, 4, (150, 150, 150, 255))
        noise = np.ones((4, 4), dtype=np.float32)
        out = Grain(intensity=1.0, threshold=150, noise=noise).process(image)
        assert np.array_equal(out, image)

    def test_results_clamped(self, make_image):
        image = make_image(4, 4, (250, 250, 250, 255))
        noise = np.ones((4, 4), dtype=np.float32)
        out = Grain(intensity=1.0, threshold=100, noise=noise).process(image)
        assert (out[..., :3] == 255).all()

    def test_noise_shape_mismatch(self, split_image):
        with pytest.raises(DimensionError):
            Grain(intensity=0.2, threshold=150, noise=np.zeros((3, 3))).process(split_image)


class TestBloom:

    def test_zero_intensity_keeps_color(self, noisy_image):
        image = noisy_image.copy()
        image[..., 3] = 255
        out = Bloom(radius=3, intensity=0.0).process(image)
        assert np.array_equal(out, image)

    def test_full_intensity_is_the_blur(self, noisy_image):
        out = Bloom(radius=2, intensity=1.0).process(noisy_image)
        assert np.array_equal(out, Blurs(radius=2).process(noisy_image))

    def test_alpha_comes_from_blur(self, noisy_image):
        out = Bloom(radius=2, intensity=0.3).process(noisy_image)
        assert np.array_equal(out[..., 3], Blurs(radius=2).process(noisy_image)[..., 3])

    def test_uniform_image_stays_uniform(self, uniform_image):
        assert np.array_equal(Bloom(radius=3, intensity=0.15).process(uniform_image), uniform_image)


class TestColorAdjust:

    def test_gray_is_preserved(self):
        gray = np.repeat(np.arange(256, dtype=np.uint8), 4).reshape(16, 16, 4)
        gray[..., 3] = 255
        out = ColorAdjust(vibrance=1.0, saturation=1.1).process(gray)
        assert np.array_equal(out, gray)

    def test_zero_saturation_gives_gray(self, noisy_image):
        out = ColorAdjust(vibrance=0.0, saturation=0.0).process(noisy_image)
        assert np.array_equal(out[..., 0], out[..., 1])
        assert np.array_equal(out[..., 1], out[..., 2])

    def test_vibrance_pulls_toward_max(self):
        image = np.array([[[200, 100, 50, 255]]], dtype=np.uint8)
        out = ColorAdjust(vibrance=0.02, saturation=1.0).process(image)
        # amt = (200 - 350 / 3) * 0.02 * 0.3 = 0.5
        assert out[0, 0].tolist() == [200, 150, 125, 255]

    def test_saturation_uses_vibrance_output(self):
        image = np.array([[[200, 100, 50, 255]]], dtype=np.uint8)
        adjust = ColorAdjust(vibrance=0.02, saturation=1.5)
        expected = adjust.apply_saturation(adjust.apply_vibrance(image[..., :3]))
        assert np.array_equal(adjust.process(image)[..., :3], expected)

    def test_alpha_untouched(self, noisy_image):
        out = ColorAdjust(vibrance=1.0, saturation=1.3).process(noisy_image)
        assert np.array_equal(out[..., 3], noisy_image[..., 3])
