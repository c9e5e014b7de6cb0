"""
Frame Info Model
================

Serializable description of a frame read back from an image.

Output Contract:
    {
        "magic": "0x54414C55",
        "version": 1,
        "original_size": 1000,
        "stored_size": 29,
        "compressed": true,
        "digest": "9f2c...",
        "width": 4,
        "height": 4
    }

Produced by the inspect endpoint and the `inspect` CLI command. The
payload is NOT verified when this is built; only the header is parsed.
"""

from pydantic import BaseModel, Field

from pixelframe.codec.frame import FrameHeader


class FrameInfo(BaseModel):
    """
    Header fields and image geometry of an encoded frame.

    Attributes:
        magic: Magic number as hex string
        version: Frame version
        original_size: Payload length before compression
        stored_size: Payload length as stored
        compressed: Whether the payload is stored gzip-compressed
        digest: Integrity digest as hex string
        width: Image width in pixels
        height: Image height in pixels
    """

    magic: str = Field(..., description="Magic number (hex)")
    version: int = Field(..., ge=0, description="Frame version")
    original_size: int = Field(..., ge=0, description="Original payload bytes")
    stored_size: int = Field(..., ge=0, description="Stored payload bytes")
    compressed: bool = Field(..., description="Payload is gzip-compressed")
    digest: str = Field(..., description="Truncated SHA-256 (hex)")
    width: int = Field(..., ge=1, description="Image width in pixels")
    height: int = Field(..., ge=1, description="Image height in pixels")

    @classmethod
    def from_header(cls, header: FrameHeader, width: int, height: int) -> "FrameInfo":
        return cls(
            magic=f"0x{header.magic:08X}",
            version=header.version,
            original_size=header.original_size,
            stored_size=header.stored_size,
            compressed=header.is_compressed,
            digest=header.digest.hex(),
            width=width,
            height=height,
        )
