"""
Exception types raised by BlurStag.

Every error derives from :class:`BlurError` so callers can catch the whole
family at once.
"""


class BlurError(Exception):
    """Base class of all BlurStag errors."""


class InvalidParameterError(BlurError, ValueError):
    """A blur parameter (sigma, worker count, block size, ...) is invalid."""


class DecodeError(BlurError):
    """The input image could not provide a pixel buffer."""


class AssemblyError(BlurError):
    """The output image buffer could not be created or finalized."""


class ResultGridError(BlurError):
    """A result grid cell was written twice or outside the grid."""


class BlurCancelledError(BlurError):
    """The blur job was cancelled before all pixels were computed."""


class BlurTimeoutError(BlurError, TimeoutError):
    """Waiting for the blur job exceeded the configured timeout."""


__all__ = [
    "BlurError",
    "InvalidParameterError",
    "DecodeError",
    "AssemblyError",
    "ResultGridError",
    "BlurCancelledError",
    "BlurTimeoutError",
]
