from __future__ import annotations
import numpy as np
import pytest

from chpkcodec.errors import ChannelMismatch, DimensionMismatch, DuplicateVariantName, InvalidVariantName, VariantNotFound
from chpkcodec.pixels import Container, Patch, PixelBuffer, Rectangle, Variant


def test_pixelbuffer_validates_length_and_channels():
    PixelBuffer(2, 2, 4, bytes(16))
    with pytest.raises(DimensionMismatch):
        PixelBuffer(2, 2, 4, bytes(15))
    with pytest.raises(ChannelMismatch):
        PixelBuffer(2, 2, 2, bytes(8))
    with pytest.raises(DimensionMismatch):
        PixelBuffer(0, 2, 3, b"")
    # ChannelMismatch reste attrapable comme DimensionMismatch (et ValueError)
    assert issubclass(ChannelMismatch, DimensionMismatch)
    assert issubclass(DimensionMismatch, ValueError)


def test_pixelbuffer_array_view_is_readonly():
    arr = np.arange(3 * 2 * 3, dtype=np.uint8).reshape(2, 3, 3)
    buf = PixelBuffer.from_array(arr)
    assert (buf.width, buf.height, buf.channels) == (3, 2, 3)
    view = buf.as_array()
    assert np.array_equal(view, arr)
    with pytest.raises(ValueError):
        view[0, 0, 0] = 1


def test_rectangle_geometry():
    a = Rectangle(0, 0, 8, 8)
    b = Rectangle(8, 0, 8, 8)
    assert a.area == 64 and a.right == 8 and a.bottom == 8
    assert not a.overlaps(b)                       # bord commun seulement
    assert a.overlaps(Rectangle(4, 4, 8, 8))
    assert a.union(b) == Rectangle(0, 0, 16, 8)
    assert a.fits(8, 8) and not b.fits(8, 8)


def test_container_rejects_duplicates_and_out_of_bounds():
    base = PixelBuffer(4, 4, 4, bytes(64))
    with pytest.raises(DuplicateVariantName):
        Container(1, 4, 4, 4, base, [Variant("a"), Variant("a")])
    with pytest.raises(DimensionMismatch):
        Container(1, 4, 4, 4, base, [Variant("a", [Patch(Rectangle(2, 2, 4, 4), bytes(64))])])
    with pytest.raises(ChannelMismatch):
        Container(1, 4, 4, 3, base, [])
    with pytest.raises(InvalidVariantName):
        Variant("")


def test_container_lookup():
    base = PixelBuffer(1, 1, 3, b"\x00\x00\x00")
    c = Container(1, 1, 1, 3, base, [Variant("idle"), Variant("smile")])
    assert c.names() == ["idle", "smile"]
    assert c.variant("smile").name == "smile"
    with pytest.raises(VariantNotFound) as ei:
        c.variant("angry")
    assert isinstance(ei.value, KeyError)
    assert "angry" in str(ei.value)
