"""
Defines :class:`Color`, the four channel value computed for every output pixel.
"""

from __future__ import annotations

from typing import NamedTuple


class Color(NamedTuple):
    """
    An RGBA color with float channels, nominally in the range 0.0 to 1.0.

    Values are not clamped. A blurred pixel may leave the nominal range and
    keeps its value until it gets exported, e.g. via :meth:`Image.to_pil`.
    """

    red: float
    green: float
    blue: float
    alpha: float

    def scaled(self, factor: float) -> Color:
        """
        Returns a copy with every channel multiplied by factor.

        :param factor: The multiplier
        :return: The scaled color
        """
        return Color(
            self.red * factor,
            self.green * factor,
            self.blue * factor,
            self.alpha * factor,
        )

    def to_int_rgba(self) -> tuple[int, int, int, int]:
        """
        Converts the color to 8 bit integer channels, clipping to 0..255.

        :return: The (r, g, b, a) tuple
        """
        return tuple(  # type: ignore[return-value]
            int(round(min(max(value, 0.0), 1.0) * 255.0)) for value in self
        )


CLEAR = Color(0.0, 0.0, 0.0, 0.0)
"Fully transparent black, the placeholder of not yet computed pixels"

__all__ = ["Color", "CLEAR"]
