"""
The result grid collects one computed color per output pixel.

It is created by the scheduler, written by the convolution tasks (each cell
exactly once) and read by the assembler after all tasks finished. Writes are
guarded by a set of striped locks so that tasks working on different cells
rarely contend for the same lock.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterator, NamedTuple

from .color import CLEAR, Color
from .errors import ResultGridError

logger = logging.getLogger(__name__)


class CellRegion(NamedTuple):
    """The rectangle of the output image a grid cell is painted into."""

    x: int
    y: int
    width: int = 1
    height: int = 1


class GridCell(NamedTuple):
    """A computed color and the output region it belongs to."""

    color: Color
    region: CellRegion


PLACEHOLDER = GridCell(CLEAR, CellRegion(0, 0, 0, 0))
"Value of every cell before it was written"


class ResultGrid:
    """
    A width x height buffer of :class:`GridCell`, indexed [x][y].

    :param width: The grid width
    :param height: The grid height
    :param lock_stripes: Number of locks shared by the cells
    """

    def __init__(self, width: int, height: int, lock_stripes: int = 64):
        if width <= 0 or height <= 0:
            raise ResultGridError(f"Invalid grid size {width} x {height}")
        self.width = width
        self.height = height
        self._cells: list[list[GridCell]] = [
            [PLACEHOLDER] * height for _ in range(width)
        ]
        self._write_counts: list[list[int]] = [[0] * height for _ in range(width)]
        stripes = max(1, min(lock_stripes, width * height))
        self._locks = [threading.Lock() for _ in range(stripes)]
        self._written = 0
        self._written_lock = threading.Lock()
        logger.debug(f"Result grid {width} x {height} with {stripes} lock stripes")

    def _lock_for(self, x: int, y: int) -> threading.Lock:
        return self._locks[(y * self.width + x) % len(self._locks)]

    def write(self, x: int, y: int, color: Color) -> None:
        """
        Stores the color of the pixel (x, y).

        :param x: The x coordinate
        :param y: The y coordinate
        :param color: The computed color
        :raises ResultGridError: If (x, y) is outside of the grid or the cell
            was written before
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ResultGridError(
                f"Cell ({x}, {y}) outside of grid {self.width} x {self.height}"
            )
        with self._lock_for(x, y):
            count = self._write_counts[x][y]
            self._write_counts[x][y] = count + 1
            if count:
                raise ResultGridError(f"Cell ({x}, {y}) was already written")
            self._cells[x][y] = GridCell(color, CellRegion(x, y))
        with self._written_lock:
            self._written += 1

    def write_count(self, x: int, y: int) -> int:
        """
        Returns how often the cell (x, y) was written, including rejected
        second writes.
        """
        return self._write_counts[x][y]

    @property
    def written(self) -> int:
        """
        The number of cells written so far.
        """
        return self._written

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    @property
    def is_complete(self) -> bool:
        """
        True once every cell was written.
        """
        return self._written == self.cell_count

    def column(self, x: int) -> list[GridCell]:
        """
        Returns a copy of the cells of column x, ordered by y.
        """
        return list(self._cells[x])

    def iter_cells(self) -> Iterator[GridCell]:
        """
        Iterates all cells column by column.
        """
        for column in self._cells:
            yield from column

    def __getitem__(self, item: tuple[int, int]) -> GridCell:
        x, y = item
        return self._cells[x][y]

    def __len__(self) -> int:
        return self.cell_count


__all__ = ["CellRegion", "GridCell", "PLACEHOLDER", "ResultGrid"]
