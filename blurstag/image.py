"""
Implements the class :class:`.Image`, BlurStag's immutable RGBA float image
which is both the input and the output of a blur.
"""

from __future__ import annotations

import io
from typing import Union

import numpy as np
import PIL.Image

from .color import Color
from .errors import DecodeError

Image = type

ImageSourceTypes = Union[np.ndarray, bytes, PIL.Image.Image, Image]
"The valid source types for creating an image"


def _to_rgba_float(pixels: np.ndarray) -> np.ndarray:
    """
    Converts a pixel array to a float64 RGBA array of shape (H, W, 4).

    Integer arrays are interpreted as 0..255, float arrays as 0.0..1.0.
    Arrays without alpha channel receive an opaque one.

    :param pixels: Grayscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4) data
    :return: The converted array (always a new array)
    """
    if not isinstance(pixels, np.ndarray):
        raise DecodeError(f"Expected a numpy array, got {type(pixels).__name__}")
    if pixels.ndim == 2:
        pixels = pixels[:, :, np.newaxis]
    if pixels.ndim != 3 or pixels.shape[2] not in (1, 3, 4):
        raise DecodeError(
            f"Expected image array (H, W), (H, W, 1|3|4), got shape {pixels.shape}"
        )
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise DecodeError(f"Image has no pixels, shape {pixels.shape}")
    if np.issubdtype(pixels.dtype, np.integer) or pixels.dtype == np.bool_:
        data = pixels.astype(np.float64) / (1.0 if pixels.dtype == np.bool_ else 255.0)
    elif np.issubdtype(pixels.dtype, np.floating):
        data = pixels.astype(np.float64)
    else:
        raise DecodeError(f"Unsupported pixel dtype {pixels.dtype}")
    height, width, channels = data.shape
    if channels == 4:
        return data
    rgba = np.ones((height, width, 4), dtype=np.float64)
    rgba[:, :, :3] = data  # a single gray channel broadcasts to r, g and b
    return rgba


def _decode_pil(pil_image: PIL.Image.Image) -> np.ndarray:
    """
    Extracts RGBA pixel data from a PIL image.

    :param pil_image: The PIL image
    :return: A uint8 array of shape (H, W, 4)
    """
    try:
        pil_image.load()
        return np.asarray(pil_image.convert("RGBA"))
    except (OSError, ValueError) as e:
        raise DecodeError(f"Could not access the pixel data of the image: {e}") from e


def _decode_bytes(data: bytes) -> np.ndarray:
    """
    Decodes an encoded image, e.g. PNG or JPEG data, via PIL.

    :param data: The encoded data
    :return: A uint8 array of shape (H, W, 4)
    """
    try:
        pil_image = PIL.Image.open(io.BytesIO(data))
    except (OSError, ValueError) as e:
        raise DecodeError(f"Could not decode image data: {e}") from e
    return _decode_pil(pil_image)


class Image:
    """
    An immutable image storing RGBA channels as float64 values.

    The pixels are stored as numpy array of shape (height, width, 4). Values
    are nominally in the range 0.0 to 1.0, but are not clamped - a blur does
    not clip its results. Clipping only happens when converting to 8 bit,
    e.g. in :meth:`to_pil`.
    """

    def __init__(self, source: ImageSourceTypes):
        """
        :param source: The image source. Either a numpy array (grayscale,
            RGB or RGBA, uint8 0..255 or float 0.0..1.0), a PIL image,
            encoded image data or another Image.

        Raises a DecodeError if no pixel data could be obtained.
        """
        if isinstance(source, Image):
            pixels = source._pixels
        elif isinstance(source, PIL.Image.Image):
            pixels = _to_rgba_float(_decode_pil(source))
        elif isinstance(source, (bytes, bytearray)):
            pixels = _to_rgba_float(_decode_bytes(bytes(source)))
        elif isinstance(source, np.ndarray):
            pixels = _to_rgba_float(source)
        else:
            raise DecodeError(
                f"Unsupported image source type {type(source).__name__}"
            )
        if pixels.flags.writeable:
            pixels.flags.writeable = False
        self._pixels: np.ndarray = pixels
        self.height: int = pixels.shape[0]
        "The image's height in pixels"
        self.width: int = pixels.shape[1]
        "The image's width in pixels"

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> Image:
        """
        Creates an image from a numpy array.

        :param pixels: Grayscale, RGB or RGBA pixel data
        :return: The image
        """
        return cls(pixels)

    @classmethod
    def from_pil(cls, pil_image: PIL.Image.Image) -> Image:
        """
        Creates an image from a PIL image.

        :param pil_image: The PIL image
        :return: The image
        """
        return cls(pil_image)

    @classmethod
    def from_color(cls, size: tuple[int, int], color: Color | tuple) -> Image:
        """
        Creates an image of the given size filled with a single color.

        :param size: The size (width, height)
        :param color: The float RGBA color
        :return: The image
        """
        width, height = size
        pixels = np.empty((height, width, 4), dtype=np.float64)
        pixels[:, :] = tuple(color)
        return cls(pixels)

    @property
    def size(self) -> tuple[int, int]:
        """
        The image's size in pixels (width, height)
        """
        return self.width, self.height

    def get_pixels(self) -> np.ndarray:
        """
        Returns the read-only float RGBA pixel array of shape (H, W, 4).
        """
        return self._pixels

    def get_pixel(self, x: int, y: int) -> Color:
        """
        Returns the color of a single pixel.

        :param x: The x coordinate
        :param y: The y coordinate
        :return: The color
        """
        return Color(*(float(value) for value in self._pixels[y, x]))

    def to_pil(self) -> PIL.Image.Image:
        """
        Converts the image to an 8 bit RGBA PIL image, clipping all channels.

        :return: The PIL image
        """
        data = np.clip(self._pixels, 0.0, 1.0) * 255.0
        return PIL.Image.fromarray(np.round(data).astype(np.uint8))

    def to_png(self) -> bytes:
        """
        Encodes the image as PNG.

        :return: The PNG data
        """
        output = io.BytesIO()
        self.to_pil().save(output, format="PNG")
        return output.getvalue()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._pixels, other._pixels)

    def __hash__(self):
        return hash((self.size, self._pixels.tobytes()))

    def __str__(self):
        return f"Image ({self.width} x {self.height})"

    def __repr__(self):
        return str(self)


__all__ = ["Image", "ImageSourceTypes"]
