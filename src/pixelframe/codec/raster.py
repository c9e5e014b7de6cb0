"""
Pixel Rasterizer
================

Maps a framed byte buffer onto an RGB pixel grid and back, and handles
the PNG container on disk and in memory.

Pixel Layout:
    Bytes are packed R, G, B, R, G, B, ... row-major, left to right,
    top to bottom. Channels past the end of the buffer are zero.
    Images are written as 3-channel 8-bit PNG; on read an alpha
    channel, if present, is discarded.

Design Rules:
    - Arrays are numpy (H, W, 3) uint8 in RGB order at this module's API
    - OpenCV is used only for PNG encode/decode (BGR internally)
    - The container format is decided by magic bytes, not by the decoder
    - Channel depth is checked from the PNG header before decoding
    - The rasterizer never interprets frame contents
"""

import logging
import math
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from pixelframe.codec.errors import (
    ImageIOError,
    UnreadableImageError,
    UnsupportedChannelDepthError,
    UnsupportedImageFormatError,
)


logger = logging.getLogger(__name__)


BYTES_PER_PIXEL = 3
BITS_PER_CHANNEL = 8
DEFAULT_PNG_COMPRESSION = 6

PathLike = Union[str, Path]


class ImageFormat(str, Enum):
    """
    Closed set of container formats recognised by magic bytes.

    Only PNG is accepted for decoding; the others are recognised so the
    rejection can name what was supplied.
    """

    PNG = "png"
    JPEG = "jpeg"
    BMP = "bmp"
    GIF = "gif"
    WEBP = "webp"
    TIFF = "tiff"


_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# IHDR colour types 0 (grey) and 4 (grey + alpha)
_PNG_GREY_COLOR_TYPES = (0, 4)

_SIGNATURES = (
    (_PNG_SIGNATURE, ImageFormat.PNG),
    (b"\xff\xd8\xff", ImageFormat.JPEG),
    (b"BM", ImageFormat.BMP),
    (b"GIF87a", ImageFormat.GIF),
    (b"GIF89a", ImageFormat.GIF),
    (b"II*\x00", ImageFormat.TIFF),
    (b"MM\x00*", ImageFormat.TIFF),
)


def sniff_format(data: bytes) -> Optional[ImageFormat]:
    """
    Identify the container format from leading magic bytes.

    Returns:
        The detected ImageFormat, or None if unrecognised
    """
    head = bytes(data[:16])
    for signature, image_format in _SIGNATURES:
        if head.startswith(signature):
            return image_format
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return ImageFormat.WEBP
    return None


# =============================================================================
# Dimensions
# =============================================================================

def choose_dimensions(byte_count: int) -> Tuple[int, int]:
    """
    Pick the smallest near-square grid holding `byte_count` bytes.

    pixels_needed = ceil(byte_count / 3)
    width         = ceil(sqrt(pixels_needed))
    height        = ceil(pixels_needed / width)

    Integer arithmetic throughout. Zero bytes still gets a 1x1 image.

    Args:
        byte_count: Number of bytes to fit

    Returns:
        Tuple of (width, height)
    """
    if byte_count < 0:
        raise ValueError(f"byte_count must be >= 0, got {byte_count}")

    pixels_needed = max(1, -(-byte_count // BYTES_PER_PIXEL))

    width = math.isqrt(pixels_needed)
    if width * width < pixels_needed:
        width += 1
    height = -(-pixels_needed // width)

    return width, height


# =============================================================================
# Packing
# =============================================================================

def rasterize(framed_bytes: bytes) -> np.ndarray:
    """
    Pack a byte buffer into an RGB image.

    Args:
        framed_bytes: Bytes to pack (normally a full frame)

    Returns:
        RGB image as np.ndarray (H, W, 3), dtype=uint8
    """
    width, height = choose_dimensions(len(framed_bytes))

    flat = np.zeros(width * height * BYTES_PER_PIXEL, dtype=np.uint8)
    if framed_bytes:
        flat[:len(framed_bytes)] = np.frombuffer(bytes(framed_bytes), dtype=np.uint8)

    logger.debug(
        f"Rasterized {len(framed_bytes)} bytes into {width}x{height} image "
        f"({flat.size - len(framed_bytes)} padding bytes)"
    )

    return flat.reshape(height, width, BYTES_PER_PIXEL)


def derasterize(image: np.ndarray) -> bytes:
    """
    Read an RGB(A) image back into a byte buffer.

    The result includes the zero padding tail; trimming is the frame
    codec's job.

    Args:
        image: Image as np.ndarray (H, W, 3) or (H, W, 4), dtype=uint8

    Returns:
        All R, G, B channel values in row-major order

    Raises:
        UnsupportedChannelDepthError: If dtype is not uint8
        UnreadableImageError: If the array is not RGB or RGBA
    """
    if image.dtype != np.uint8:
        raise UnsupportedChannelDepthError(
            f"Expected 8-bit channels, got dtype {image.dtype}",
            field="dtype",
            expected="uint8",
            actual=str(image.dtype),
        )

    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise UnreadableImageError(
            f"Expected an RGB or RGBA image, got shape {image.shape}",
            field="shape",
            expected="(H, W, 3|4)",
            actual=str(image.shape),
        )

    rgb = image[:, :, :BYTES_PER_PIXEL]
    return np.ascontiguousarray(rgb).tobytes()


# =============================================================================
# PNG Encode / Decode
# =============================================================================

def encode_png(image: np.ndarray, compression_level: int = DEFAULT_PNG_COMPRESSION) -> bytes:
    """
    Encode an RGB image as PNG bytes.

    Args:
        image: RGB image (H, W, 3), dtype=uint8
        compression_level: zlib level 0-9 (lossless at every level)

    Returns:
        PNG file contents

    Raises:
        ImageIOError: If the PNG encoder fails
    """
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[2] != BYTES_PER_PIXEL:
        raise ValueError(
            f"Expected (H, W, 3) uint8 image, got {image.shape} {image.dtype}"
        )

    bgr = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
    ok, encoded = cv2.imencode(
        ".png", bgr, [cv2.IMWRITE_PNG_COMPRESSION, int(compression_level)]
    )

    if not ok:
        raise ImageIOError(
            f"PNG encoder failed for {image.shape[1]}x{image.shape[0]} image",
            field="png",
        )

    return encoded.tobytes()


def _png_ihdr(data: bytes) -> Tuple[int, int]:
    # IHDR is always the first chunk: length(4) type(4) width(4) height(4) depth(1) colour(1)
    if len(data) < 26 or data[12:16] != b"IHDR":
        raise UnreadableImageError(
            "PNG is missing its IHDR chunk",
            field="IHDR",
        )
    return data[24], data[25]


def decode_png(data: bytes) -> np.ndarray:
    """
    Decode PNG bytes into an RGB image.

    Args:
        data: File contents

    Returns:
        RGB image as np.ndarray (H, W, 3), dtype=uint8

    Raises:
        UnsupportedImageFormatError: If the data is a non-PNG image
        UnreadableImageError: If the data is not a decodable RGB(A) PNG
        UnsupportedChannelDepthError: If the PNG is not 8 bits per channel
    """
    image_format = sniff_format(data)

    if image_format is None:
        raise UnreadableImageError(
            "Data is not a recognised image container",
            field="format",
            expected=ImageFormat.PNG.value,
        )

    if image_format is not ImageFormat.PNG:
        raise UnsupportedImageFormatError(
            f"Unsupported image format: {image_format.value}",
            field="format",
            expected=ImageFormat.PNG.value,
            actual=image_format.value,
        )

    bit_depth, color_type = _png_ihdr(data)
    if bit_depth != BITS_PER_CHANNEL:
        raise UnsupportedChannelDepthError(
            f"Unsupported channel depth: {bit_depth} bits (expected {BITS_PER_CHANNEL})",
            field="bit_depth",
            expected=BITS_PER_CHANNEL,
            actual=bit_depth,
        )

    if color_type in _PNG_GREY_COLOR_TYPES:
        raise UnreadableImageError(
            f"Expected an RGB, RGBA or palette PNG, got grey colour type {color_type}",
            field="color_type",
            expected="2|3|6",
            actual=color_type,
        )

    decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)

    if decoded is None:
        raise UnreadableImageError(
            "Failed to decode PNG: cv2.imdecode returned None",
            field="png",
        )

    if decoded.dtype != np.uint8:
        raise UnsupportedChannelDepthError(
            f"Unsupported channel dtype: {decoded.dtype}",
            field="dtype",
            expected="uint8",
            actual=str(decoded.dtype),
        )

    if decoded.ndim != 3 or decoded.shape[2] not in (3, 4):
        raise UnreadableImageError(
            f"Expected an RGB or RGBA PNG, got shape {decoded.shape}",
            field="shape",
            expected="(H, W, 3|4)",
            actual=str(decoded.shape),
        )

    if decoded.shape[2] == 4:
        return cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGB)
    return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)


# =============================================================================
# File I/O
# =============================================================================

def save_image(
    image: np.ndarray,
    path: PathLike,
    compression_level: int = DEFAULT_PNG_COMPRESSION,
) -> None:
    """
    Write an RGB image to `path` as PNG.

    Raises:
        ImageIOError: On encoder or filesystem failure
    """
    data = encode_png(image, compression_level=compression_level)

    try:
        Path(path).write_bytes(data)
    except OSError as e:
        raise ImageIOError(
            f"Failed to write image to {path}: {e}",
            field="path",
            actual=str(path),
        ) from e

    logger.debug(f"Saved {image.shape[1]}x{image.shape[0]} PNG to {path} ({len(data)} bytes)")


def load_image(path: PathLike) -> np.ndarray:
    """
    Read a PNG from `path` into an RGB image.

    Raises:
        UnreadableImageError: If the file is missing or not a usable PNG
        UnsupportedChannelDepthError: If the PNG is not 8 bits per channel
        ImageIOError: On any other filesystem failure
    """
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError as e:
        raise UnreadableImageError(
            f"Image file not found: {path}",
            field="path",
            actual=str(path),
        ) from e
    except OSError as e:
        raise ImageIOError(
            f"Failed to read image from {path}: {e}",
            field="path",
            actual=str(path),
        ) from e

    return decode_png(data)
