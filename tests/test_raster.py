"""
Pixel Rasterizer Tests
======================

Dimension choice, byte/pixel packing, container sniffing and PNG I/O.
"""

import struct
import zlib

import cv2
import numpy as np
import pytest

from pixelframe.codec.errors import (
    ImageIOError,
    UnreadableImageError,
    UnsupportedChannelDepthError,
    UnsupportedImageFormatError,
)
from pixelframe.codec.raster import (
    ImageFormat,
    choose_dimensions,
    decode_png,
    derasterize,
    encode_png,
    load_image,
    rasterize,
    save_image,
    sniff_format,
)


def _png_chunk(chunk_type: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + chunk_type + data + struct.pack(">I", crc)


def _grey_alpha_png(pixels):
    """Build a one-row 8-bit grey+alpha PNG (colour type 4) by hand."""
    ihdr = struct.pack(">IIBBBBB", len(pixels), 1, 8, 4, 0, 0, 0)
    raw = b"\x00" + b"".join(bytes(pixel) for pixel in pixels)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(raw))
        + _png_chunk(b"IEND", b"")
    )


class TestChooseDimensions:
    """Tests for choose_dimensions."""

    def test_small_frame_scenario(self):
        # 32-byte header + 10-byte payload = 42 bytes = 14 pixels
        assert choose_dimensions(42) == (4, 4)

    def test_known_values(self):
        assert choose_dimensions(1) == (1, 1)
        assert choose_dimensions(3) == (1, 1)
        assert choose_dimensions(4) == (2, 1)
        assert choose_dimensions(12) == (2, 2)
        assert choose_dimensions(13) == (3, 2)
        assert choose_dimensions(27) == (3, 3)

    def test_zero_bytes(self):
        assert choose_dimensions(0) == (1, 1)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            choose_dimensions(-1)

    def test_capacity_and_minimality(self):
        for n in range(0, 3000):
            width, height = choose_dimensions(n)
            assert width * height * 3 >= n
            assert height <= width
            if n > 0:
                # One fewer row would not fit
                assert width * (height - 1) * 3 < n

    def test_large_values(self):
        for n in (10**6, 10**7 + 1, 2**32 + 32):
            width, height = choose_dimensions(n)
            assert width * height * 3 >= n
            assert width * (height - 1) * 3 < n

    def test_deterministic(self):
        assert choose_dimensions(12345) == choose_dimensions(12345)


class TestRasterize:
    """Tests for rasterize and derasterize."""

    def test_channel_order_and_padding(self):
        image = rasterize(b"\x01\x02\x03\x04")

        assert image.shape == (1, 2, 3)
        assert image.dtype == np.uint8
        assert image[0, 0].tolist() == [1, 2, 3]
        assert image[0, 1].tolist() == [4, 0, 0]

    def test_row_major(self):
        data = bytes(range(1, 37))
        image = rasterize(data)

        # 12 pixels -> width 4, height 3
        assert image.shape == (3, 4, 3)
        assert image[0, 2].tolist() == [7, 8, 9]
        assert image[1, 0].tolist() == [13, 14, 15]
        assert image[2, 3].tolist() == [34, 35, 36]

    def test_derasterize_includes_padding(self):
        data = b"\x01\x02\x03\x04\x05"
        raw = derasterize(rasterize(data))

        assert raw == data + b"\x00"

    def test_derasterize_drops_alpha(self):
        rgba = np.array([[[1, 2, 3, 255], [4, 5, 6, 255]]], dtype=np.uint8)
        assert derasterize(rgba) == b"\x01\x02\x03\x04\x05\x06"

    def test_derasterize_rejects_wide_channels(self):
        with pytest.raises(UnsupportedChannelDepthError):
            derasterize(np.zeros((2, 2, 3), dtype=np.uint16))

    def test_derasterize_rejects_grayscale(self):
        with pytest.raises(UnreadableImageError):
            derasterize(np.zeros((2, 2), dtype=np.uint8))


class TestSniffFormat:
    """Tests for sniff_format."""

    def test_known_signatures(self):
        assert sniff_format(b"\x89PNG\r\n\x1a\n" + b"\x00" * 8) is ImageFormat.PNG
        assert sniff_format(b"\xff\xd8\xff\xe0") is ImageFormat.JPEG
        assert sniff_format(b"BM\x00\x00") is ImageFormat.BMP
        assert sniff_format(b"GIF89a") is ImageFormat.GIF
        assert sniff_format(b"RIFF\x00\x00\x00\x00WEBPVP8 ") is ImageFormat.WEBP
        assert sniff_format(b"II*\x00") is ImageFormat.TIFF

    def test_unknown(self):
        assert sniff_format(b"") is None
        assert sniff_format(b"TALU\x00\x01") is None


class TestPngIO:
    """Tests for PNG encode/decode and file I/O."""

    def test_png_round_trip(self):
        image = rasterize(bytes(range(256)) * 3)
        decoded = decode_png(encode_png(image))

        assert decoded.dtype == np.uint8
        assert np.array_equal(decoded, image)

    def test_all_compression_levels_lossless(self):
        image = rasterize(bytes(range(256)))
        for level in range(10):
            assert np.array_equal(decode_png(encode_png(image, compression_level=level)), image)

    def test_saved_file_is_rgb_on_disk(self, image_path):
        save_image(rasterize(b"\x01\x02\x03"), image_path)

        # OpenCV reads BGR, so the first pixel comes back reversed
        bgr = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
        assert bgr.shape == (1, 1, 3)
        assert bgr[0, 0].tolist() == [3, 2, 1]

    def test_save_and_load(self, image_path):
        image = rasterize(b"pixel data")
        save_image(image, image_path)

        assert image_path.read_bytes().startswith(b"\x89PNG")
        assert np.array_equal(load_image(image_path), image)

    def test_rgba_png_accepted(self):
        bgra = np.zeros((1, 2, 4), dtype=np.uint8)
        bgra[0, 0] = [3, 2, 1, 255]
        bgra[0, 1] = [6, 5, 4, 255]
        ok, encoded = cv2.imencode(".png", bgra)
        assert ok

        rgb = decode_png(encoded.tobytes())
        assert rgb.shape == (1, 2, 3)
        assert derasterize(rgb) == b"\x01\x02\x03\x04\x05\x06"

    def test_jpeg_rejected(self):
        ok, encoded = cv2.imencode(".jpg", np.zeros((4, 4, 3), dtype=np.uint8))
        assert ok

        with pytest.raises(UnsupportedImageFormatError) as exc_info:
            decode_png(encoded.tobytes())

        assert exc_info.value.actual == "jpeg"
        assert isinstance(exc_info.value, UnreadableImageError)

    def test_bmp_rejected(self):
        ok, encoded = cv2.imencode(".bmp", np.zeros((4, 4, 3), dtype=np.uint8))
        assert ok

        with pytest.raises(UnsupportedImageFormatError):
            decode_png(encoded.tobytes())

    def test_sixteen_bit_png_rejected(self):
        ok, encoded = cv2.imencode(".png", np.zeros((2, 2, 3), dtype=np.uint16))
        assert ok

        with pytest.raises(UnsupportedChannelDepthError) as exc_info:
            decode_png(encoded.tobytes())

        assert exc_info.value.actual == 16

    def test_grayscale_png_rejected(self):
        ok, encoded = cv2.imencode(".png", np.zeros((2, 2), dtype=np.uint8))
        assert ok

        with pytest.raises(UnreadableImageError) as exc_info:
            decode_png(encoded.tobytes())

        assert exc_info.value.field == "color_type"
        assert exc_info.value.actual == 0

    def test_grey_alpha_png_rejected(self):
        data = _grey_alpha_png([(10, 255), (20, 255)])

        with pytest.raises(UnreadableImageError) as exc_info:
            decode_png(data)

        assert exc_info.value.field == "color_type"
        assert exc_info.value.actual == 4

    def test_not_an_image(self):
        with pytest.raises(UnreadableImageError):
            decode_png(b"definitely not an image")

    def test_corrupt_png(self):
        data = encode_png(rasterize(bytes(range(200))))

        with pytest.raises(UnreadableImageError):
            decode_png(data[:40])

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnreadableImageError):
            load_image(tmp_path / "missing.png")

    def test_load_directory_is_io_failure(self, tmp_path):
        with pytest.raises(ImageIOError):
            load_image(tmp_path)

    def test_save_to_missing_directory(self, tmp_path):
        with pytest.raises(ImageIOError):
            save_image(rasterize(b"abc"), tmp_path / "missing" / "out.png")
