"""
Pytest configuration and fixtures
"""
import os
import shutil
import sys
import tempfile

import numpy as np
import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)


def make_uniform(width, height, color=(128, 128, 128, 255)):
    """(H, W, 4) uint8 array filled with one RGBA color"""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[...] = color
    return image


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp(prefix="watercolor_test_")
    yield temp_path
    if os.path.exists(temp_path):
        shutil.rmtree(temp_path)


@pytest.fixture
def uniform_image():
    return make_uniform(12, 10, (90, 160, 200, 255))


@pytest.fixture
def noisy_image():
    """Reproducible random RGBA image with varying alpha"""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(40, 48, 4), dtype=np.uint8)


@pytest.fixture
def gradient_image():
    """Horizontal red ramp, vertical green ramp, constant blue"""
    h, w = 24, 32
    image = np.zeros((h, w, 4), dtype=np.uint8)
    image[..., 0] = np.linspace(0, 255, w, dtype=np.uint8)[None, :]
    image[..., 1] = np.linspace(0, 255, h, dtype=np.uint8)[:, None]
    image[..., 2] = 100
    image[..., 3] = 255
    return image


@pytest.fixture
def make_image():
    """Factory fixture: make_image(width, height, color)"""
    return make_uniform
