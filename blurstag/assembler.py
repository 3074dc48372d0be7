"""
Assembles the completed result grid into the output image.
"""

from __future__ import annotations

import numpy as np

from .errors import AssemblyError
from .image import Image
from .result_grid import ResultGrid


def assemble(result_grid: ResultGrid, width: int, height: int) -> Image:
    """
    Paints every cell of the result grid into a new image.

    Each cell covers a distinct single pixel region, so the order in which
    the cells are painted does not affect the result.

    :param result_grid: The fully written result grid
    :param width: Width of the output image
    :param height: Height of the output image
    :return: The output image
    :raises AssemblyError: If the grid is incomplete or does not match the
        requested size, or the output buffer can not be allocated
    """
    if result_grid.width != width or result_grid.height != height:
        raise AssemblyError(
            f"Result grid {result_grid.width} x {result_grid.height} does not "
            f"match the output size {width} x {height}"
        )
    if not result_grid.is_complete:
        raise AssemblyError(
            f"Result grid incomplete, {result_grid.written} of "
            f"{result_grid.cell_count} cells written"
        )
    try:
        buffer = np.zeros((height, width, 4), dtype=np.float64)
    except (MemoryError, ValueError) as e:
        raise AssemblyError(f"Could not allocate a {width} x {height} image: {e}") from e

    for color, region in result_grid.iter_cells():
        buffer[
            region.y : region.y + region.height, region.x : region.x + region.width
        ] = color

    try:
        return Image(buffer)
    except Exception as e:
        raise AssemblyError(f"Could not finalize the output image: {e}") from e


__all__ = ["assemble"]
