"""
PixelFrame
==========

Lossless data-in-image container format.

An arbitrary byte payload is wrapped in a fixed 32-byte header
(magic, version, sizes, truncated SHA-256), optionally gzip-compressed,
and packed three bytes per pixel into an RGB PNG. Decoding reverses the
process and verifies the digest.

Components:
    - codec: Frame codec, pixel rasterizer, composed pipeline
    - models: Pydantic response models
    - main: FastAPI service
    - cli: Command line front-end

Example:
    from pixelframe.codec import encode_bytes_to_image, decode_bytes_from_image

    encode_bytes_to_image(b"payload", "frame.png", use_compression=False)
    data = decode_bytes_from_image("frame.png")

Note:
    This is not steganography. Images survive only lossless handling;
    any recompression, resize or crop destroys the payload.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
