"""
Pytest fixtures for BlurStag tests
"""

import threading

import numpy as np
import pytest

from blurstag import Color, Image, PixelSource


class CountingSource(PixelSource):
    """Uniform pixel source recording every coordinate it was asked for."""

    def __init__(self, width: int, height: int, color: Color):
        self.width = width
        self.height = height
        self.color = color
        self.reads: list[tuple[int, int]] = []
        self._lock = threading.Lock()

    def read_pixel(self, x: int, y: int) -> Color | None:
        with self._lock:
            self.reads.append((x, y))
        if not self.in_bounds(x, y):
            return None
        return self.color


class GatedSource(PixelSource):
    """Pixel source whose reads block until its gate is opened."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.gate = threading.Event()

    def read_pixel(self, x: int, y: int) -> Color | None:
        self.gate.wait(10.0)
        if not self.in_bounds(x, y):
            return None
        return Color(0.5, 0.5, 0.5, 0.5)


@pytest.fixture
def dot_image() -> Image:
    """
    Returns a 3x3 white image with a single black center pixel
    """
    pixels = np.ones((3, 3, 4), dtype=np.float64)
    pixels[1, 1] = (0.0, 0.0, 0.0, 0.0)
    return Image(pixels)


@pytest.fixture
def single_pixel_image() -> Image:
    """
    Returns a 1x1 image
    """
    return Image.from_color((1, 1), (0.6, 0.3, 0.9, 1.0))


@pytest.fixture
def gradient_image() -> Image:
    """
    Returns a 12x9 RGB image with a horizontal red and vertical green ramp
    """
    pixels = np.zeros((9, 12, 3), dtype=np.uint8)
    for x in range(12):
        pixels[:, x, 0] = x * 255 // 11
    for y in range(9):
        pixels[y, :, 1] = y * 255 // 8
    pixels[:, :, 2] = 128
    return Image(pixels)


@pytest.fixture
def gated_source() -> GatedSource:
    """
    Returns a 4x4 pixel source which blocks until its gate is set. The gate
    is opened on teardown so no worker thread stays blocked.
    """
    source = GatedSource(4, 4)
    yield source
    source.gate.set()
