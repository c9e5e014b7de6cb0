"""
Codec Pipeline
==============

Top-level operations composing the frame codec and the rasterizer.

    encode: payload -> encode_frame -> rasterize -> PNG
    decode: PNG -> derasterize -> decode_frame -> payload

File-based and in-memory variants share the same stages.
"""

import logging
from typing import Tuple

from pixelframe.codec.frame import FrameHeader, decode_frame, encode_frame, parse_header
from pixelframe.codec.raster import (
    DEFAULT_PNG_COMPRESSION,
    PathLike,
    decode_png,
    derasterize,
    encode_png,
    load_image,
    rasterize,
    save_image,
)


logger = logging.getLogger(__name__)


def encode_bytes_to_image(
    payload: bytes,
    path: PathLike,
    use_compression: bool,
    png_compression: int = DEFAULT_PNG_COMPRESSION,
) -> Tuple[int, int]:
    """
    Embed a payload in a PNG file.

    Args:
        payload: Non-empty bytes to embed
        path: Destination PNG path
        use_compression: Whether to gzip the payload
        png_compression: PNG zlib level (does not affect the payload)

    Returns:
        Tuple of (width, height) of the written image
    """
    framed = encode_frame(payload, use_compression)
    image = rasterize(framed)
    save_image(image, path, compression_level=png_compression)

    height, width = image.shape[:2]
    logger.info(
        f"Encoded {len(payload)} bytes into {path} ({width}x{height}, "
        f"frame={len(framed)} bytes)"
    )
    return width, height


def decode_bytes_from_image(path: PathLike) -> bytes:
    """Recover the payload embedded in a PNG file."""
    image = load_image(path)
    payload = decode_frame(derasterize(image))

    logger.info(f"Decoded {len(payload)} bytes from {path}")
    return payload


def encode_bytes_to_png(
    payload: bytes,
    use_compression: bool,
    png_compression: int = DEFAULT_PNG_COMPRESSION,
) -> Tuple[bytes, Tuple[int, int]]:
    """
    Embed a payload in in-memory PNG bytes.

    Returns:
        Tuple of (png_bytes, (width, height))
    """
    image = rasterize(encode_frame(payload, use_compression))
    height, width = image.shape[:2]
    return encode_png(image, compression_level=png_compression), (width, height)


def decode_bytes_from_png(data: bytes) -> bytes:
    """Recover the payload embedded in in-memory PNG bytes."""
    return decode_frame(derasterize(decode_png(data)))


def inspect_png(data: bytes) -> Tuple[FrameHeader, Tuple[int, int]]:
    """
    Read the frame header of in-memory PNG bytes without verifying the payload.

    Returns:
        Tuple of (header, (width, height))
    """
    image = decode_png(data)
    height, width = image.shape[:2]
    return parse_header(derasterize(image)), (width, height)


def inspect_image(path: PathLike) -> Tuple[FrameHeader, Tuple[int, int]]:
    """File variant of inspect_png."""
    image = load_image(path)
    height, width = image.shape[:2]
    return parse_header(derasterize(image)), (width, height)
