"""
Codec Errors
============

Closed error taxonomy for the frame codec and the pixel rasterizer.

Hierarchy:
    CodecError
        FrameError
            EmptyPayloadError
            PayloadTooLargeError
            FrameTooSmallError
            TruncatedFrameError
            BadMagicError
            UnsupportedVersionError
            DecompressionError
            ChecksumMismatchError
        ImageError
            UnreadableImageError
                UnsupportedImageFormatError
            UnsupportedChannelDepthError
        ImageIOError

Every error carries the offending field and, where it makes sense,
the expected and actual values so callers can log precisely.
"""

from typing import Any, Optional


class CodecError(Exception):
    """
    Base class for all codec errors.

    Attributes:
        field: Name of the offending field or stage (optional)
        expected: Expected value (optional)
        actual: Observed value (optional)
    """

    kind: str = "codec_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict:
        """Serializable view for API responses and structured logs."""
        data = {"error": self.kind, "detail": self.message}
        if self.field is not None:
            data["field"] = self.field
        if self.expected is not None:
            data["expected"] = _jsonable(self.expected)
        if self.actual is not None:
            data["actual"] = _jsonable(self.actual)
        return data


def _jsonable(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.hex()
    return value


# =============================================================================
# Frame Errors
# =============================================================================

class FrameError(CodecError):
    """Raised when a frame cannot be built or parsed."""

    kind = "frame_error"


class EmptyPayloadError(FrameError):
    """Raised when encoding a zero-length payload."""

    kind = "empty_payload"


class PayloadTooLargeError(FrameError):
    """Raised when a payload length does not fit the u32 size fields."""

    kind = "payload_too_large"


class FrameTooSmallError(FrameError):
    """Raised when the buffer is shorter than the fixed header."""

    kind = "too_small"


class TruncatedFrameError(FrameError):
    """Raised when fewer than `stored_size` payload bytes follow the header."""

    kind = "truncated"


class BadMagicError(FrameError):
    """Raised when the header magic does not identify a frame."""

    kind = "bad_magic"


class UnsupportedVersionError(FrameError):
    """Raised when the header version is not the one this codec speaks."""

    kind = "unsupported_version"


class DecompressionError(FrameError):
    """Raised when a payload marked as compressed fails to inflate."""

    kind = "decompression_failed"


class ChecksumMismatchError(FrameError):
    """
    Raised when the recomputed digest disagrees with the stored one.

    Signals corruption, or a format mismatch not caught by the
    magic/version checks.
    """

    kind = "checksum_mismatch"


# =============================================================================
# Image Errors
# =============================================================================

class ImageError(CodecError):
    """Raised when an image cannot be used as a frame container."""

    kind = "image_error"


class UnreadableImageError(ImageError):
    """Raised when an image file is missing or cannot be decoded."""

    kind = "unreadable_image"


class UnsupportedImageFormatError(UnreadableImageError):
    """Raised when the container is a known format other than PNG."""

    kind = "unsupported_image_format"


class UnsupportedChannelDepthError(ImageError):
    """Raised when an image does not carry 8-bit channels."""

    kind = "unsupported_channel_depth"


class ImageIOError(CodecError):
    """Raised on filesystem failure while saving or loading an image."""

    kind = "io_failure"
