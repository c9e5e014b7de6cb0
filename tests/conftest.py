"""
Test Configuration
==================

Pytest fixtures and test configuration for PixelFrame.
"""

import numpy as np
import pytest


@pytest.fixture
def small_payload():
    """Provide a 10-byte payload (42-byte frame, 4x4 image)."""
    return b"0123456789"


@pytest.fixture
def repetitive_payload():
    """Provide 1000 repeated bytes (highly compressible)."""
    return b"A" * 1000


@pytest.fixture
def random_payload():
    """Provide 1000 high-entropy bytes (incompressible)."""
    return np.random.default_rng(seed=1234).bytes(1000)


@pytest.fixture
def image_path(tmp_path):
    """Provide a PNG path inside a temporary directory."""
    return tmp_path / "frame.png"
