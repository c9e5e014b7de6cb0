"""
Codec Module
============

Data-in-image codec: a byte payload is wrapped in a checksummed,
optionally gzip-compressed frame and rasterized into an RGB PNG.

Components:
    - frame: Header layout, checksum, compression
    - raster: Byte/pixel packing, dimension choice, PNG I/O
    - pipeline: Composed encode/decode operations
    - errors: Error taxonomy

Example:
    from pixelframe.codec import encode_bytes_to_image, decode_bytes_from_image

    encode_bytes_to_image(b"hello", "out.png", use_compression=True)
    assert decode_bytes_from_image("out.png") == b"hello"
"""

from pixelframe.codec.errors import (
    BadMagicError,
    ChecksumMismatchError,
    CodecError,
    DecompressionError,
    EmptyPayloadError,
    FrameError,
    FrameTooSmallError,
    ImageError,
    ImageIOError,
    PayloadTooLargeError,
    TruncatedFrameError,
    UnreadableImageError,
    UnsupportedChannelDepthError,
    UnsupportedImageFormatError,
    UnsupportedVersionError,
)
from pixelframe.codec.frame import (
    HEADER_SIZE,
    MAGIC,
    VERSION,
    FrameHeader,
    compute_digest,
    decode_frame,
    encode_frame,
    parse_header,
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
from pixelframe.codec.pipeline import (
    decode_bytes_from_image,
    decode_bytes_from_png,
    encode_bytes_to_image,
    encode_bytes_to_png,
    inspect_image,
    inspect_png,
)

__all__ = [
    # Errors
    "CodecError",
    "FrameError",
    "EmptyPayloadError",
    "PayloadTooLargeError",
    "FrameTooSmallError",
    "TruncatedFrameError",
    "BadMagicError",
    "UnsupportedVersionError",
    "DecompressionError",
    "ChecksumMismatchError",
    "ImageError",
    "UnreadableImageError",
    "UnsupportedImageFormatError",
    "UnsupportedChannelDepthError",
    "ImageIOError",
    # Frame
    "HEADER_SIZE",
    "MAGIC",
    "VERSION",
    "FrameHeader",
    "compute_digest",
    "encode_frame",
    "decode_frame",
    "parse_header",
    # Raster
    "ImageFormat",
    "choose_dimensions",
    "rasterize",
    "derasterize",
    "encode_png",
    "decode_png",
    "save_image",
    "load_image",
    "sniff_format",
    # Pipeline
    "encode_bytes_to_image",
    "decode_bytes_from_image",
    "encode_bytes_to_png",
    "decode_bytes_from_png",
    "inspect_image",
    "inspect_png",
]
