# BlurStag Filters
"""
Filter front end of BlurStag.

Usage:
    from blurstag.filters import GaussianBlur

    blurred = GaussianBlur(sigma=2.0).apply(image)
    job = GaussianBlur(sigma=2.0).apply_async(image, completion=show)
"""

from .base import Filter, FILTER_REGISTRY, register_filter
from .blur import GaussianBlur

__all__ = [
    'Filter',
    'FILTER_REGISTRY',
    'register_filter',
    'GaussianBlur',
]
