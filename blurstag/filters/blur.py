# BlurStag Filters - Blur
"""
Gaussian blur filter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .base import Filter, register_filter
from blurstag import config
from blurstag.kernel import GaussianKernel, build_kernel
from blurstag.pixel_source import AlphaMode, parse_alpha_mode
from blurstag.scheduler import (
    BlurJob,
    CancellationToken,
    CompletionCallback,
    ErrorCallback,
    run_convolution,
)

if TYPE_CHECKING:
    from blurstag import Image


@register_filter
@dataclass
class GaussianBlur(Filter):
    """Gaussian blur filter.

    Every output pixel is the kernel weighted sum of its neighborhood.
    Samples outside the image are skipped without renormalizing, so borders
    darken.

    Parameters:
        sigma: Standard deviation of the gaussian, kernel radius is floor(3 * sigma)
        num_workers: Worker threads (None = cpu count)
        block_rows: Image rows computed per task (None = settings)
        timeout: Max seconds to wait for the blur (None = settings)
        alpha_mode: 'mean_rgb' (alpha = mean of r, g, b) or 'source'
    """

    sigma: float = field(default_factory=lambda: config.settings.SIGMA)
    num_workers: int | None = None
    block_rows: int | None = None
    timeout: float | None = None
    alpha_mode: str = AlphaMode.MEAN_RGB.value

    def __post_init__(self):
        # Rejects invalid sigmas before anything gets scheduled
        build_kernel(self.sigma)
        self.alpha_mode = parse_alpha_mode(self.alpha_mode).value

    @property
    def kernel(self) -> GaussianKernel:
        """A freshly built kernel for the current sigma."""
        return build_kernel(self.sigma)

    def _options(self) -> dict[str, Any]:
        return {
            'num_workers': self.num_workers,
            'block_rows': self.block_rows,
            'timeout': self.timeout,
            'alpha_mode': self.alpha_mode,
        }

    def apply(self, image: 'Image') -> 'Image':
        return run_convolution(image, self.sigma, **self._options()).wait()

    def apply_async(
        self,
        image: Any,
        completion: CompletionCallback,
        on_error: ErrorCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BlurJob:
        """Blur in the background and call completion with the result.

        :param image: The input image
        :param completion: Called with the blurred image
        :param on_error: Called with the exception if the blur failed
        :param cancel_token: Optional token to cancel the blur with
        :returns: The running job
        """
        return run_convolution(
            image,
            self.sigma,
            completion,
            on_error=on_error,
            cancel_token=cancel_token,
            **self._options(),
        )


__all__ = ['GaussianBlur']
