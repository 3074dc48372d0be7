"""
Gaussian kernel construction.

The kernel is a square, row-major flattened table of
``(2 * radius + 1) ** 2`` weights, normalized so that they sum up to 1.0.
``radius`` is derived from sigma as ``floor(sigma * 3)``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real

import numpy as np

from .errors import InvalidParameterError

logger = logging.getLogger(__name__)


def _validate_sigma(sigma: float) -> float:
    if isinstance(sigma, bool) or not isinstance(sigma, Real):
        raise InvalidParameterError(f"sigma must be a real number, got {sigma!r}")
    sigma = float(sigma)
    if not math.isfinite(sigma) or sigma <= 0.0:
        raise InvalidParameterError(f"sigma must be positive and finite, got {sigma}")
    if math.floor(sigma * 3.0) < 1:
        raise InvalidParameterError(
            f"sigma {sigma} gives a kernel radius of 0, it must be at least 1/3"
        )
    return sigma


def kernel_radius(sigma: float) -> int:
    """Returns the kernel radius ``floor(sigma * 3)`` for a valid sigma."""
    return int(math.floor(_validate_sigma(sigma) * 3.0))


@dataclass(frozen=True)
class GaussianKernel:
    """A normalized, isotropic 2D Gaussian weight table.

    :param sigma: The standard deviation the kernel was built for
    :param radius: Half-width of the square footprint, excluding the center
    :param weights: ``(2 * radius + 1) ** 2`` weights, row-major with the
        x offset as outer and the y offset as inner index
    """

    sigma: float
    radius: int
    weights: tuple[float, ...]

    @property
    def side(self) -> int:
        """Side length of the square footprint."""
        return 2 * self.radius + 1

    @property
    def center_weight(self) -> float:
        """Weight of the (0, 0) offset."""
        return self.weight(0, 0)

    def weight(self, i: int, j: int) -> float:
        """Returns the weight of the offset (i, j), both in [-radius, radius]."""
        if abs(i) > self.radius or abs(j) > self.radius:
            raise IndexError(f"Offset ({i}, {j}) outside of radius {self.radius}")
        return self.weights[(i + self.radius) * self.side + (j + self.radius)]

    def to_array(self) -> np.ndarray:
        """Returns the weights as (side, side) array indexed [i + r, j + r]."""
        return np.array(self.weights, dtype=np.float64).reshape(self.side, self.side)

    def __len__(self) -> int:
        return len(self.weights)


def build_kernel(sigma: float) -> GaussianKernel:
    """Builds a normalized Gaussian kernel.

    For each offset pair (i, j) with i, j in [-radius, radius] the raw weight
    is ``exp(-d² / (2 sigma²))`` with ``d`` the euclidean distance of the
    offset. All raw weights get divided by their sum afterwards.

    :param sigma: The standard deviation, finite and at least 1/3 (radius >= 1)
    :return: The kernel
    :raises InvalidParameterError: If sigma is not a real number yielding radius >= 1
    """
    sigma = _validate_sigma(sigma)
    radius = int(math.floor(sigma * 3.0))
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    ii, jj = np.meshgrid(offsets, offsets, indexing="ij")
    distance = np.sqrt(ii * ii + jj * jj)
    raw = np.exp(-(distance * distance) / (2.0 * sigma * sigma))
    normalized = raw / raw.sum()
    logger.debug(f"Built gaussian kernel sigma={sigma} radius={radius} side={2 * radius + 1}")
    return GaussianKernel(
        sigma=sigma,
        radius=radius,
        weights=tuple(normalized.ravel().tolist()),
    )


__all__ = ["GaussianKernel", "build_kernel", "kernel_radius"]
