"""
BlurStag - Parallel gaussian blur for raster images
"""

from .color import Color, CLEAR
from .errors import (
    BlurError,
    InvalidParameterError,
    DecodeError,
    AssemblyError,
    ResultGridError,
    BlurCancelledError,
    BlurTimeoutError,
)
from .config import BlurSettings, settings
from .image import Image, ImageSourceTypes
from .kernel import GaussianKernel, build_kernel, kernel_radius
from .pixel_source import (
    AlphaMode,
    PixelSource,
    ArrayPixelSource,
    as_pixel_source,
    parse_alpha_mode,
)
from .convolution import convolve_pixel, kernel_index
from .result_grid import CellRegion, GridCell, ResultGrid
from .assembler import assemble
from .scheduler import (
    BlurJob,
    BlurMetrics,
    CancellationToken,
    CountdownLatch,
    run_convolution,
    gaussian_blur,
)

__all__ = [
    # Colors and images
    "Color",
    "CLEAR",
    "Image",
    "ImageSourceTypes",
    # Errors
    "BlurError",
    "InvalidParameterError",
    "DecodeError",
    "AssemblyError",
    "ResultGridError",
    "BlurCancelledError",
    "BlurTimeoutError",
    # Configuration
    "BlurSettings",
    "settings",
    # Kernel
    "GaussianKernel",
    "build_kernel",
    "kernel_radius",
    # Pixel access
    "AlphaMode",
    "PixelSource",
    "ArrayPixelSource",
    "as_pixel_source",
    "parse_alpha_mode",
    # Convolution
    "convolve_pixel",
    "kernel_index",
    # Result grid and assembly
    "CellRegion",
    "GridCell",
    "ResultGrid",
    "assemble",
    # Scheduling
    "BlurJob",
    "BlurMetrics",
    "CancellationToken",
    "CountdownLatch",
    "run_convolution",
    "gaussian_blur",
]

__version__ = "0.1.0"
