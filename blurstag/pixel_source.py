"""
Pixel sources provide bounds-checked, read-only access to the channels of an
input image. They are the only way the convolution engine reaches image data.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import numpy as np
import PIL.Image

from .color import Color
from .errors import DecodeError, InvalidParameterError
from .image import Image


class AlphaMode(Enum):
    """Defines how a pixel source derives the alpha channel."""

    MEAN_RGB = "mean_rgb"
    "Alpha is the mean of red, green and blue. The input's alpha is ignored."
    SOURCE = "source"
    "Alpha is taken from the input, 1.0 for inputs without alpha channel."


def parse_alpha_mode(alpha_mode: AlphaMode | str) -> AlphaMode:
    """
    Converts an alpha mode name to :class:`AlphaMode`.

    :param alpha_mode: An AlphaMode or its value, e.g. 'mean_rgb'
    :return: The alpha mode
    :raises InvalidParameterError: If alpha_mode names no known mode
    """
    try:
        return AlphaMode(alpha_mode)
    except ValueError:
        choices = ", ".join(repr(mode.value) for mode in AlphaMode)
        raise InvalidParameterError(
            f"alpha_mode must be one of {choices}, got {alpha_mode!r}"
        ) from None


class PixelSource(ABC):
    """
    Read-only access to the pixels of an image.

    Implementations must be safe to read from multiple threads at once.
    """

    width: int
    height: int

    def in_bounds(self, x: int, y: int) -> bool:
        """
        Returns if (x, y) lies within the image.
        """
        return 0 <= x < self.width and 0 <= y < self.height

    @abstractmethod
    def read_pixel(self, x: int, y: int) -> Color | None:
        """
        Reads the channels of a pixel.

        :param x: The x coordinate
        :param y: The y coordinate
        :return: The color, all channels in 0.0..1.0, or None if (x, y) is
            outside of the image
        """


class ArrayPixelSource(PixelSource):
    """
    Pixel source backed by an image decoded once into plain python floats.

    :param image: The image to read from
    :param alpha_mode: How to derive the alpha channel
    """

    def __init__(self, image: Image, alpha_mode: AlphaMode | str = AlphaMode.MEAN_RGB):
        self.alpha_mode = parse_alpha_mode(alpha_mode)
        pixels = image.get_pixels()
        self.height, self.width = pixels.shape[0], pixels.shape[1]
        rgba = np.array(pixels, dtype=np.float64)
        if self.alpha_mode == AlphaMode.MEAN_RGB:
            rgba[:, :, 3] = (rgba[:, :, 0] + rgba[:, :, 1] + rgba[:, :, 2]) / 3.0
        # indexed [y][x]
        self._rows: list[list[Color]] = [
            [Color(*pixel) for pixel in row] for row in rgba.tolist()
        ]

    def read_pixel(self, x: int, y: int) -> Color | None:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return None
        return self._rows[y][x]


def as_pixel_source(
    source: Any, alpha_mode: AlphaMode | str = AlphaMode.MEAN_RGB
) -> PixelSource:
    """
    Wraps an image like object into a pixel source.

    :param source: A PixelSource (returned as is), an :class:`Image`, a PIL
        image, a numpy array or encoded image data
    :param alpha_mode: How to derive the alpha channel
    :return: The pixel source
    :raises DecodeError: If no pixel data can be obtained from source
    """
    if isinstance(source, PixelSource):
        return source
    if source is None:
        raise DecodeError("No image provided")
    if not isinstance(source, (Image, PIL.Image.Image, np.ndarray, bytes, bytearray)):
        raise DecodeError(f"Unsupported image source type {type(source).__name__}")
    image = source if isinstance(source, Image) else Image(source)
    return ArrayPixelSource(image, alpha_mode=alpha_mode)


__all__ = [
    "AlphaMode",
    "parse_alpha_mode",
    "PixelSource",
    "ArrayPixelSource",
    "as_pixel_source",
]
