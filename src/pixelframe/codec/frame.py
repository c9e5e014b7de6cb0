"""
Frame Codec
===========

Builds and parses the self-describing binary frame that carries a payload
inside an image.

Frame Layout (big-endian):
    offset  size  field
    0       4     magic             0x54414C55 ("TALU")
    4       2     version           1
    6       2     reserved          always 0 on encode
    8       4     original_size     payload length before compression
    12      4     stored_size       payload length as stored
    16      16    integrity_digest  SHA-256(original payload)[:16]
    32      n     payload           gzip or raw, n = stored_size

Design Rules:
    - Pure functions; the compression toggle is a per-call argument
    - Compression is signalled only by stored_size != original_size
    - The digest always covers the ORIGINAL payload and is verified
      after decompression
    - Bytes past the declared payload are ignored (raster padding)
"""

import gzip
import hashlib
import logging
import struct
import zlib
from dataclasses import dataclass

from pixelframe.codec.errors import (
    BadMagicError,
    ChecksumMismatchError,
    DecompressionError,
    EmptyPayloadError,
    FrameTooSmallError,
    PayloadTooLargeError,
    TruncatedFrameError,
    UnsupportedVersionError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Protocol Constants
# =============================================================================

MAGIC = 0x54414C55
VERSION = 1
HEADER_FORMAT = ">IHHII16s"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
DIGEST_SIZE = 16
MAX_PAYLOAD_SIZE = 0xFFFFFFFF


@dataclass(frozen=True, slots=True)
class FrameHeader:
    """
    Fixed-size frame header.

    Attributes:
        original_size: Payload length before compression
        stored_size: Payload length as stored after the header
        digest: Truncated SHA-256 of the original payload
        magic: Format identifier
        version: Format version
        reserved: Forward-compatibility slot
    """

    original_size: int
    stored_size: int
    digest: bytes
    magic: int = MAGIC
    version: int = VERSION
    reserved: int = 0

    @property
    def is_compressed(self) -> bool:
        """Version 1 has no flag; unequal sizes mean gzip."""
        return self.stored_size != self.original_size

    @property
    def payload_end(self) -> int:
        """Offset one past the last payload byte."""
        return HEADER_SIZE + self.stored_size

    def pack(self) -> bytes:
        return struct.pack(
            HEADER_FORMAT,
            self.magic,
            self.version,
            self.reserved,
            self.original_size,
            self.stored_size,
            self.digest,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "FrameHeader":
        """Unpack the first HEADER_SIZE bytes without validating them."""
        magic, version, reserved, original_size, stored_size, digest = (
            struct.unpack_from(HEADER_FORMAT, data, 0)
        )
        return cls(
            original_size=original_size,
            stored_size=stored_size,
            digest=digest,
            magic=magic,
            version=version,
            reserved=reserved,
        )


def compute_digest(payload: bytes) -> bytes:
    """Return the first 16 bytes of the SHA-256 of `payload`."""
    return hashlib.sha256(payload).digest()[:DIGEST_SIZE]


# =============================================================================
# Encode
# =============================================================================

def encode_frame(payload: bytes, use_compression: bool) -> bytes:
    """
    Wrap a payload in a frame.

    When compression is requested the gzip output is stored even if it is
    larger than the input; there is no general fallback to raw.

    The single deviation from that rule is a gzip output whose length
    equals the input length. Version 1 has no compression flag and would
    read such a frame back as uncompressed, failing the checksum, so the
    raw payload is stored instead and a warning is logged. The resulting
    frame is a valid uncompressed version 1 frame, so the wire format is
    unchanged.

    Args:
        payload: Non-empty bytes to embed
        use_compression: Whether to gzip the payload

    Returns:
        Header followed by the stored payload

    Raises:
        EmptyPayloadError: If payload is empty
        PayloadTooLargeError: If payload length does not fit in u32
    """
    payload = bytes(payload)
    original_size = len(payload)

    if original_size == 0:
        raise EmptyPayloadError(
            "Cannot encode an empty payload",
            field="original_size",
            expected="> 0",
            actual=0,
        )

    if original_size > MAX_PAYLOAD_SIZE:
        raise PayloadTooLargeError(
            f"Payload of {original_size} bytes exceeds {MAX_PAYLOAD_SIZE}",
            field="original_size",
            expected=f"<= {MAX_PAYLOAD_SIZE}",
            actual=original_size,
        )

    stored = payload
    if use_compression:
        compressed = gzip.compress(payload, mtime=0)
        if len(compressed) == original_size:
            logger.warning(
                f"Compressed size equals original size ({original_size} bytes); "
                f"storing payload uncompressed"
            )
        elif len(compressed) > MAX_PAYLOAD_SIZE:
            raise PayloadTooLargeError(
                f"Compressed payload of {len(compressed)} bytes exceeds {MAX_PAYLOAD_SIZE}",
                field="stored_size",
                expected=f"<= {MAX_PAYLOAD_SIZE}",
                actual=len(compressed),
            )
        else:
            stored = compressed

    header = FrameHeader(
        original_size=original_size,
        stored_size=len(stored),
        digest=compute_digest(payload),
    )

    logger.debug(
        f"Encoded frame: original_size={header.original_size}, "
        f"stored_size={header.stored_size}, compressed={header.is_compressed}"
    )

    return header.pack() + stored


# =============================================================================
# Decode
# =============================================================================

def parse_header(framed_bytes: bytes) -> FrameHeader:
    """
    Parse and validate the frame header.

    Checks length, magic, version and a non-zero original size; the
    payload is not touched.

    Raises:
        FrameTooSmallError: If the buffer is shorter than the header
        BadMagicError: If the magic does not match
        UnsupportedVersionError: If the version does not match
        EmptyPayloadError: If the header declares a zero-length payload
    """
    if len(framed_bytes) < HEADER_SIZE:
        raise FrameTooSmallError(
            f"Buffer of {len(framed_bytes)} bytes is shorter than the "
            f"{HEADER_SIZE}-byte header",
            field="length",
            expected=f">= {HEADER_SIZE}",
            actual=len(framed_bytes),
        )

    header = FrameHeader.unpack(framed_bytes)

    if header.magic != MAGIC:
        raise BadMagicError(
            f"Invalid magic number: 0x{header.magic:08X} (expected 0x{MAGIC:08X})",
            field="magic",
            expected=f"0x{MAGIC:08X}",
            actual=f"0x{header.magic:08X}",
        )

    if header.version != VERSION:
        raise UnsupportedVersionError(
            f"Unsupported version: {header.version} (expected {VERSION})",
            field="version",
            expected=VERSION,
            actual=header.version,
        )

    if header.original_size == 0:
        raise EmptyPayloadError(
            "Frame declares an empty payload",
            field="original_size",
            expected="> 0",
            actual=0,
        )

    return header


def decode_frame(framed_bytes: bytes) -> bytes:
    """
    Recover and verify the original payload from a frame.

    Args:
        framed_bytes: Header + payload, optionally followed by padding

    Returns:
        The original payload bytes

    Raises:
        FrameTooSmallError, BadMagicError, UnsupportedVersionError,
        EmptyPayloadError: Header problems (see parse_header)
        TruncatedFrameError: If the declared payload is not fully present
        DecompressionError: If a compressed payload fails to inflate
        ChecksumMismatchError: If the recovered payload fails verification
    """
    header = parse_header(framed_bytes)

    available = len(framed_bytes) - HEADER_SIZE
    if available < header.stored_size:
        raise TruncatedFrameError(
            f"Frame declares {header.stored_size} payload bytes but only "
            f"{available} are present",
            field="stored_size",
            expected=header.stored_size,
            actual=available,
        )

    stored = bytes(framed_bytes[HEADER_SIZE:header.payload_end])

    if header.is_compressed:
        payload = _decompress(stored, header)
    else:
        payload = stored

    digest = compute_digest(payload)
    if digest != header.digest:
        raise ChecksumMismatchError(
            "Checksum verification failed",
            field="integrity_digest",
            expected=header.digest,
            actual=digest,
        )

    logger.debug(
        f"Decoded frame: original_size={header.original_size}, "
        f"stored_size={header.stored_size}"
    )

    return payload


def _decompress(stored: bytes, header: FrameHeader) -> bytes:
    try:
        payload = gzip.decompress(stored)
    except (OSError, EOFError, zlib.error) as e:
        raise DecompressionError(
            f"Failed to inflate {len(stored)}-byte payload: {e}",
            field="payload",
        ) from e

    if len(payload) != header.original_size:
        raise DecompressionError(
            f"Inflated payload is {len(payload)} bytes, header declares "
            f"{header.original_size}",
            field="original_size",
            expected=header.original_size,
            actual=len(payload),
        )

    return payload
