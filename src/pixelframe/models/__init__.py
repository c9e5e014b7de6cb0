"""
Data Models
===========

Pydantic models for the PixelFrame service and CLI.

Models:
    - FrameInfo: Header fields and image geometry of an encoded frame
"""

from pixelframe.models.frame_info import FrameInfo

__all__ = [
    "FrameInfo",
]
