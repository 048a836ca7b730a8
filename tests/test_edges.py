"""
Test Sobel edge detection
"""
import numpy as np
import pytest

from watercolor.iop.edges import EdgeDetect


class TestEdgeDetect:

    @pytest.mark.parametrize("threshold", [0.5, 1, 25, 300])
    def test_uniform_image_has_no_edges(self, uniform_image, threshold):
        mask = EdgeDetect(threshold=threshold).process(uniform_image)
        assert mask[..., :3].max() == 0

    def test_single_bright_pixel_marks_neighbours(self, make_image):
        image = make_image(5, 5, (0, 0, 0, 255))
        image[2, 2, :3] = 255

        mask = EdgeDetect(threshold=10).process(image)
        for y, x in [(1, 2), (3, 2), (2, 1), (2, 3)]:
            assert tuple(mask[y, x]) == (255, 255, 255, 255)

        mask = EdgeDetect(threshold=2000).process(image)
        assert mask[..., :3].max() == 0

    def test_border_left_empty_and_interior_opaque(self, noisy_image):
        mask = EdgeDetect(threshold=25).process(noisy_image)
        assert mask[0].max() == 0
        assert mask[-1].max() == 0
        assert mask[:, 0].max() == 0
        assert mask[:, -1].max() == 0
        assert (mask[1:-1, 1:-1, 3] == 255).all()
        assert set(np.unique(mask[..., :3])) <= {0, 255}

    def test_mask_channels_agree(self, gradient_image):
        mask = EdgeDetect(threshold=20).process(gradient_image)
        assert np.array_equal(mask[..., 0], mask[..., 1])
        assert np.array_equal(mask[..., 0], mask[..., 2])

    def test_vertical_step_is_detected(self, make_image):
        image = make_image(8, 6, (0, 0, 0, 255))
        image[:, 4:, :3] = 200
        mask = EdgeDetect(threshold=100).process(image)
        assert (mask[1:-1, 3, 0] == 255).all()
        assert (mask[1:-1, 4, 0] == 255).all()
        assert (mask[1:-1, 1, 0] == 0).all()

    def test_image_is_not_modified(self, noisy_image):
        before = noisy_image.copy()
        EdgeDetect().process(noisy_image)
        assert np.array_equal(before, noisy_image)

    def test_tiny_image_gives_empty_mask(self, make_image):
        mask = EdgeDetect(threshold=1).process(make_image(2, 2, (255, 0, 0, 255)))
        assert mask.shape == (2, 2, 4)
        assert mask.max() == 0

    def test_luminance_is_unweighted_mean(self):
        image = np.array([[[30, 60, 90, 255], [255, 0, 0, 255]]], dtype=np.uint8)
        assert EdgeDetect.luminance(image).tolist() == [[60, 85]]

    def test_threaded_bands_match_sequential(self):
        rng = np.random.default_rng(3)
        image = rng.integers(0, 256, size=(70, 30, 4), dtype=np.uint8)
        single = EdgeDetect(threshold=200, workers=1).process(image)
        banded = EdgeDetect(threshold=200, workers=3).process(image)
        assert np.array_equal(single, banded)
