"""Tests for image decode/encode helpers."""

import io

import numpy as np
import pytest
from PIL import Image

from services.imaging import InvalidInputError, decode_image, encode_png, to_png

from .conftest import make_image_bytes


class TestDecodeImage:
    def test_png(self, solid_png):
        raster = decode_image(solid_png)
        assert raster.shape == (256, 256, 3)
        assert raster.dtype == np.uint8
        assert tuple(raster[0, 0]) == (100, 150, 200)

    def test_jpeg(self, jpeg_bytes):
        assert decode_image(jpeg_bytes).shape == (256, 256, 3)

    def test_non_square_keeps_shape(self, wide_png):
        assert decode_image(wide_png).shape == (200, 400, 3)

    def test_transparent_flattened_onto_black(self):
        data = make_image_bytes((8, 8), (255, 255, 255, 0), mode="RGBA")
        assert tuple(decode_image(data)[4, 4]) == (0, 0, 0)

    def test_grayscale_converted(self):
        data = make_image_bytes((8, 8), 128, mode="L")
        assert tuple(decode_image(data)[0, 0]) == (128, 128, 128)

    def test_sixteen_bit_grayscale_scaled_not_clipped(self):
        gradient = np.tile(np.arange(64, dtype=np.uint16) * 1040, (64, 1))
        buf = io.BytesIO()
        Image.fromarray(gradient).save(buf, format="PNG")

        raster = decode_image(buf.getvalue())

        assert raster.shape == (64, 64, 3)
        assert tuple(raster[0, 0]) == (0, 0, 0)
        assert tuple(raster[0, 32]) == (129, 129, 129)
        assert tuple(raster[0, 63]) == (255, 255, 255)
        assert (raster[..., 0] == 255).mean() < 0.05

    def test_float_image_scaled(self):
        values = np.full((4, 4), 0.5, dtype=np.float32)
        buf = io.BytesIO()
        Image.fromarray(values).save(buf, format="TIFF")
        assert tuple(decode_image(buf.getvalue())[0, 0]) == (128, 128, 128)

    @pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n" + b"\x00" * 20])
    def test_undecodable(self, data):
        with pytest.raises(InvalidInputError):
            decode_image(data)

    def test_truncated_jpeg(self, jpeg_bytes):
        with pytest.raises(InvalidInputError):
            decode_image(jpeg_bytes[: len(jpeg_bytes) // 3])


class TestEncode:
    def test_encode_png_roundtrip(self):
        raster = np.zeros((4, 6, 3), dtype=np.uint8)
        raster[1, 2] = (1, 2, 3)
        with Image.open(io.BytesIO(encode_png(raster))) as img:
            assert img.format == "PNG"
            assert img.size == (6, 4)
            assert img.getpixel((2, 1)) == (1, 2, 3)

    def test_to_png_converts_jpeg(self, jpeg_bytes):
        with Image.open(io.BytesIO(to_png(jpeg_bytes))) as img:
            assert img.format == "PNG"
