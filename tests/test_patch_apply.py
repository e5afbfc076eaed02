from __future__ import annotations
import numpy as np
import pytest

from chpkcodec.config import DiffConfig
from chpkcodec.errors import ChannelMismatch, DimensionMismatch
from chpkcodec.patch import apply_patches, diff_variant, extract_region
from chpkcodec.pixels import Patch, PixelBuffer, Rectangle


def _ramp(w=12, h=10, c=4) -> PixelBuffer:
    return PixelBuffer.from_array((np.arange(w * h * c) % 251).astype(np.uint8).reshape(h, w, c))


def test_extract_region_is_row_contiguous():
    img = _ramp()
    data = extract_region(img, Rectangle(2, 3, 4, 2))
    assert data == img.as_array()[3:5, 2:6].tobytes()
    with pytest.raises(DimensionMismatch):
        extract_region(img, Rectangle(10, 0, 4, 2))


def test_apply_does_not_touch_base_and_last_patch_wins():
    base = PixelBuffer.from_array(np.zeros((4, 4, 3), dtype=np.uint8))
    p1 = Patch(Rectangle(0, 0, 2, 2), bytes([1]) * 12)
    p2 = Patch(Rectangle(1, 1, 2, 2), bytes([2]) * 12)
    out = apply_patches(base, [p1, p2])
    arr = out.as_array()
    assert arr[0, 0, 0] == 1 and arr[1, 1, 0] == 2 and arr[3, 3, 0] == 0
    assert base.data == bytes(48)
    assert out is not base


def test_apply_validates_patches():
    base = PixelBuffer.from_array(np.zeros((4, 4, 4), dtype=np.uint8))
    with pytest.raises(ChannelMismatch):
        apply_patches(base, [Patch(Rectangle(0, 0, 2, 2), bytes(12))])   # données RGB sur base RGBA
    with pytest.raises(DimensionMismatch):
        apply_patches(base, [Patch(Rectangle(3, 3, 2, 2), bytes(16))])


def test_diff_then_apply_reconstructs_exactly():
    rng = np.random.default_rng(11)
    base = rng.integers(0, 256, size=(37, 29, 4), dtype=np.uint8)
    target = base.copy()
    target[5:9, 3:20] = rng.integers(0, 256, size=(4, 17, 4), dtype=np.uint8)
    target[30:37, 25:29] = 0
    b, t = PixelBuffer.from_array(base), PixelBuffer.from_array(target)
    for bs in (1, 4, 8, 32, 64):
        patches = diff_variant(b, t, DiffConfig(block_size=bs))
        assert apply_patches(b, patches) == t
