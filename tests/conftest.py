"""
Shared fixtures for card crop tool tests.

Provides profiles, natural image sizes, on-disk sample images and a blob
registry that is cleaned up after each test.
"""
import os
import sys

import pytest
from PIL import Image

# Qt widgets render offscreen during tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Ensure the project root is on the path when running without install
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from card_crop_tool.image_io import BlobRegistry
from card_crop_tool.models import NaturalImage
from card_crop_tool.profiles import CropProfile


@pytest.fixture
def news_profile():
    """News card profile: 900:520, 8% margin, 80px floor"""
    return CropProfile(name="news", ratio_w=900, ratio_h=520, min_size=80, margin=0.08)


@pytest.fixture
def wide_natural():
    """The 1600x900 source used throughout the scenarios"""
    return NaturalImage(1600, 900)


@pytest.fixture
def make_image(tmp_path):
    """Factory writing a gradient test image and returning its path."""
    def _make(width=1600, height=900, mode="RGB", name="photo.png"):
        img = Image.new(mode, (width, height))
        px = img.load()
        for x in range(0, width, max(1, width // 64)):
            for y in range(0, height, max(1, height // 64)):
                value = (x * 255 // width, y * 255 // height, 128)
                px[x, y] = value + (255,) if mode == "RGBA" else value
        path = tmp_path / name
        img.save(path)
        return path
    return _make


@pytest.fixture
def registry():
    """Blob registry removed after the test"""
    reg = BlobRegistry()
    yield reg
    reg.close()
