"""
The convolution engine: computes a single blurred pixel.

Kernel samples falling outside of the image are skipped and the remaining
weights are not renormalized, so pixels close to the border receive less
total weight than interior pixels. Results are not clamped.
"""

from __future__ import annotations

from typing import Sequence

from .color import Color
from .pixel_source import PixelSource


def kernel_index(i: int, j: int, radius: int) -> int:
    """Returns the flat, row-major index of the kernel offset (i, j)."""
    return (i + radius) * (2 * radius + 1) + (j + radius)


def convolve_pixel(
    x: int,
    y: int,
    width: int,
    height: int,
    kernel: Sequence[float],
    radius: int,
    source: PixelSource,
) -> Color:
    """Computes the weighted sum of the neighborhood of (x, y).

    Offsets are visited with i (x offset) as outer and j (y offset) as inner
    loop, so the accumulation order and thus the result is deterministic.

    :param x: Output x coordinate
    :param y: Output y coordinate
    :param width: Image width
    :param height: Image height
    :param kernel: The flat kernel weights, ``(2 * radius + 1) ** 2`` values
    :param radius: The kernel radius
    :param source: The pixel source to sample
    :return: The accumulated color
    """
    side = 2 * radius + 1
    red = green = blue = alpha = 0.0
    for i in range(-radius, radius + 1):
        x_coord = x + i
        if x_coord < 0 or x_coord >= width:
            continue
        row_base = (i + radius) * side + radius
        for j in range(-radius, radius + 1):
            y_coord = y + j
            if y_coord < 0 or y_coord >= height:
                continue
            pixel = source.read_pixel(x_coord, y_coord)
            if pixel is None:
                continue
            weight = kernel[row_base + j]
            red += pixel[0] * weight
            green += pixel[1] * weight
            blue += pixel[2] * weight
            alpha += pixel[3] * weight
    return Color(red, green, blue, alpha)


__all__ = ["convolve_pixel", "kernel_index"]
