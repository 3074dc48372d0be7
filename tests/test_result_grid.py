"""
Tests the shared result grid
"""

import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from blurstag import CellRegion, Color, GridCell, ResultGrid, ResultGridError
from blurstag.result_grid import PLACEHOLDER


class TestResultGrid:
    """Single threaded behavior."""

    def test_placeholders(self):
        grid = ResultGrid(3, 2)
        assert len(grid) == 6
        assert grid.written == 0
        assert not grid.is_complete
        assert all(cell == PLACEHOLDER for cell in grid.iter_cells())
        assert grid[2, 1].color == (0.0, 0.0, 0.0, 0.0)
        assert grid[2, 1].region == CellRegion(0, 0, 0, 0)

    def test_write(self):
        grid = ResultGrid(3, 2)
        color = Color(0.1, 0.2, 0.3, 0.2)
        grid.write(2, 1, color)
        assert grid[2, 1] == GridCell(color, CellRegion(2, 1, 1, 1))
        assert grid.write_count(2, 1) == 1
        assert grid.write_count(0, 0) == 0
        assert grid.written == 1

    def test_double_write_rejected(self):
        grid = ResultGrid(2, 2)
        grid.write(0, 1, Color(1.0, 1.0, 1.0, 1.0))
        with pytest.raises(ResultGridError):
            grid.write(0, 1, Color(0.0, 0.0, 0.0, 0.0))
        assert grid.write_count(0, 1) == 2
        assert grid[0, 1].color == (1.0, 1.0, 1.0, 1.0)
        assert grid.written == 1

    @pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (2, 0), (0, 3)])
    def test_out_of_range(self, x, y):
        grid = ResultGrid(2, 3)
        with pytest.raises(ResultGridError):
            grid.write(x, y, Color(0.0, 0.0, 0.0, 0.0))

    @pytest.mark.parametrize("width, height", [(0, 1), (1, 0), (-2, 3)])
    def test_invalid_size(self, width, height):
        with pytest.raises(ResultGridError):
            ResultGrid(width, height)

    def test_column_major_iteration(self):
        grid = ResultGrid(2, 3)
        for x in range(2):
            for y in range(3):
                grid.write(x, y, Color(x, y, 0.0, 0.0))
        assert grid.is_complete
        regions = [cell.region for cell in grid.iter_cells()]
        assert [(r.x, r.y) for r in regions] == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)]
        assert [cell.color.green for cell in grid.column(1)] == [0.0, 1.0, 2.0]

    def test_single_lock(self):
        """A single stripe still guards all cells."""
        grid = ResultGrid(4, 4, lock_stripes=1)
        for x in range(4):
            for y in range(4):
                grid.write(x, y, Color(0.0, 0.0, 0.0, 0.0))
        assert grid.is_complete


class TestResultGridConcurrency:
    """Concurrent writers."""

    @pytest.mark.parametrize("stripes", [1, 7, 64])
    def test_every_cell_written_once(self, stripes):
        width, height = 20, 15
        grid = ResultGrid(width, height, lock_stripes=stripes)
        coordinates = [(x, y) for x in range(width) for y in range(height)]
        random.Random(stripes).shuffle(coordinates)

        def write(coordinate):
            x, y = coordinate
            grid.write(x, y, Color(x / width, y / height, 0.0, 1.0))

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(write, coordinates))

        assert grid.is_complete
        assert grid.written == width * height
        for x in range(width):
            for y in range(height):
                assert grid.write_count(x, y) == 1
                assert grid[x, y].color == (x / width, y / height, 0.0, 1.0)

    def test_concurrent_double_writes(self):
        """Of many concurrent writes to one cell exactly one succeeds."""
        grid = ResultGrid(1, 1)
        failures = []

        def write(index):
            try:
                grid.write(0, 0, Color(index, 0.0, 0.0, 0.0))
            except ResultGridError as e:
                failures.append(e)

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(write, range(32)))

        assert len(failures) == 31
        assert grid.write_count(0, 0) == 32
        assert grid.written == 1
