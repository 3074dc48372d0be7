"""
Tests the pixel sources
"""

import io

import numpy as np
import PIL.Image
import pytest

from blurstag import (
    AlphaMode,
    ArrayPixelSource,
    Color,
    DecodeError,
    Image,
    InvalidParameterError,
    as_pixel_source,
)


def _png_bytes(pil_image: PIL.Image.Image) -> bytes:
    output = io.BytesIO()
    pil_image.save(output, format="PNG")
    return output.getvalue()


class TestReadPixel:
    """Tests reading channels."""

    def test_uint8_rgb(self):
        """8 bit values get normalized, alpha is the mean of r, g and b."""
        pixels = np.zeros((2, 3, 3), dtype=np.uint8)
        pixels[1, 2] = (255, 0, 51)
        source = as_pixel_source(pixels)
        assert (source.width, source.height) == (3, 2)
        color = source.read_pixel(2, 1)
        assert isinstance(color, Color)
        assert color.red == 1.0
        assert color.green == 0.0
        assert color.blue == pytest.approx(0.2)
        assert color.alpha == pytest.approx(0.4)
        assert source.read_pixel(0, 0) == (0.0, 0.0, 0.0, 0.0)

    def test_input_alpha_ignored_by_default(self):
        pixels = np.array([[[0.3, 0.6, 0.9, 0.1]]])
        source = as_pixel_source(pixels)
        assert source.alpha_mode == AlphaMode.MEAN_RGB
        assert source.read_pixel(0, 0).alpha == pytest.approx(0.6)

    def test_source_alpha(self):
        pixels = np.array([[[0.3, 0.6, 0.9, 0.1]]])
        source = as_pixel_source(pixels, alpha_mode="source")
        assert source.read_pixel(0, 0) == pytest.approx((0.3, 0.6, 0.9, 0.1))

    def test_source_alpha_opaque_without_channel(self):
        pixels = np.full((1, 1, 3), 0.5)
        source = as_pixel_source(pixels, alpha_mode=AlphaMode.SOURCE)
        assert source.read_pixel(0, 0).alpha == 1.0

    def test_grayscale(self):
        pixels = np.array([[0, 255]], dtype=np.uint8)
        source = as_pixel_source(pixels)
        assert source.read_pixel(1, 0) == (1.0, 1.0, 1.0, 1.0)

    @pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (4, 0), (0, 3), (-7, 9), (4, 3)])
    def test_out_of_bounds(self, x, y):
        """Coordinates outside the image return the boundary signal None."""
        source = as_pixel_source(np.zeros((3, 4, 3), dtype=np.uint8))
        assert source.read_pixel(x, y) is None
        assert not source.in_bounds(x, y)

    def test_corners_in_bounds(self):
        source = as_pixel_source(np.zeros((3, 4, 3), dtype=np.uint8))
        for x, y in [(0, 0), (3, 0), (0, 2), (3, 2)]:
            assert source.read_pixel(x, y) is not None

    def test_invalid_alpha_mode(self):
        with pytest.raises(InvalidParameterError, match="premultiplied"):
            as_pixel_source(np.zeros((1, 1, 3)), alpha_mode="premultiplied")


class TestSourceTypes:
    """Tests the accepted input types."""

    def test_image(self, gradient_image):
        source = as_pixel_source(gradient_image)
        assert isinstance(source, ArrayPixelSource)
        assert (source.width, source.height) == (12, 9)
        assert source.read_pixel(11, 8).red == 1.0
        assert source.read_pixel(11, 8).green == 1.0

    def test_pil(self):
        pil_image = PIL.Image.new("RGB", (2, 3), (255, 0, 0))
        source = as_pixel_source(pil_image)
        assert (source.width, source.height) == (2, 3)
        assert source.read_pixel(1, 2) == pytest.approx((1.0, 0.0, 0.0, 1.0 / 3.0))

    def test_png_bytes(self):
        data = _png_bytes(PIL.Image.new("RGBA", (5, 4), (0, 0, 255, 255)))
        source = as_pixel_source(data)
        assert (source.width, source.height) == (5, 4)
        assert source.read_pixel(4, 3).blue == 1.0

    def test_pixel_source_passthrough(self):
        source = as_pixel_source(np.zeros((2, 2, 3)))
        assert as_pixel_source(source) is source


class TestDecodeErrors:
    """Tests inputs which can not provide pixel data."""

    def test_none(self):
        with pytest.raises(DecodeError):
            as_pixel_source(None)

    def test_garbage_bytes(self):
        with pytest.raises(DecodeError):
            as_pixel_source(b"this is not an image")

    def test_truncated_png(self):
        noise = np.random.default_rng(7).integers(0, 256, (64, 64, 3), dtype=np.uint8)
        data = _png_bytes(PIL.Image.fromarray(noise))
        with pytest.raises(DecodeError):
            as_pixel_source(data[: len(data) // 2])

    @pytest.mark.parametrize(
        "shape", [(2, 2, 2), (2, 2, 5), (4,), (2, 2, 3, 1), (0, 3, 3), (3, 0, 4)]
    )
    def test_invalid_shapes(self, shape):
        with pytest.raises(DecodeError):
            as_pixel_source(np.zeros(shape))

    def test_unsupported_type(self):
        with pytest.raises(DecodeError):
            as_pixel_source([[0, 0, 0]])

    def test_unsupported_dtype(self):
        with pytest.raises(DecodeError):
            as_pixel_source(np.array([["a", "b"]]))
