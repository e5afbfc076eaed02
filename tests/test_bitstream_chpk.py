from __future__ import annotations
import struct
import zlib

import numpy as np
import pytest

from chpkcodec.bitstream import (
    MAGIC, VERSION, BytesSource, check_index, deserialize, pack_header, pack_index,
    parse_header_and_index, read_container, serialize, unpack_variant_block, write_container,
)
from chpkcodec.compress import DEFLATE
from chpkcodec.errors import (
    ContainerFormatError, CorruptPayload, MagicMismatch, TruncatedData, UnsupportedVersion,
)
from chpkcodec.pixels import Container, Patch, PixelBuffer, Rectangle, Variant


def _container() -> Container:
    base = PixelBuffer(2, 1, 4, bytes([1, 2, 3, 4, 5, 6, 7, 8]))
    return Container(VERSION, 2, 1, 4, base, [
        Variant("a"),
        Variant("bé", [Patch(Rectangle(1, 0, 1, 1), bytes([9, 9, 9, 9]))]),
    ])


def test_layout_is_bit_exact():
    c = _container()
    buf = serialize(c)

    base_z = zlib.compress(c.base_image.data, 6)
    patch_z = zlib.compress(bytes([9, 9, 9, 9]), 6)
    head = MAGIC + struct.pack("<IIIB", 1, 2, 1, 4) + struct.pack("<I", len(base_z)) + base_z
    name_b = "bé".encode("utf-8")
    index_len = 4 + (4 + 1 + 8) + (4 + len(name_b) + 8)
    block_a = struct.pack("<I", 0)
    block_b = struct.pack("<I", 1) + struct.pack("<IIIII", 1, 0, 1, 1, len(patch_z)) + patch_z
    off_a = len(head) + index_len
    off_b = off_a + len(block_a)
    index = (struct.pack("<I", 2)
             + struct.pack("<I", 1) + b"a" + struct.pack("<II", off_a, len(block_a))
             + struct.pack("<I", len(name_b)) + name_b + struct.pack("<II", off_b, len(block_b)))
    assert buf == head + index + block_a + block_b


def test_roundtrip_and_header_only_parse(tmp_path):
    c = _container()
    out = tmp_path / "x.chpk"
    write_container(serialize(c), out)
    buf = read_container(out)
    d = deserialize(buf)
    assert d.names() == ["a", "bé"]
    assert d.base_image == c.base_image
    assert d.variant("bé").patches == c.variant("bé").patches

    h = parse_header_and_index(BytesSource(buf), decode_base_image=False)
    assert h.base_image is None
    assert (h.width, h.height, h.channels, h.version) == (2, 1, 4, 1)
    assert [e.name for e in h.index] == ["a", "bé"]
    check_index(h.index, len(buf), h.index_end)
    for e in h.index:
        assert e.byte_offset >= h.index_end and e.end <= len(buf)


def test_wrong_magic_is_rejected():
    buf = bytearray(serialize(_container()))
    buf[:4] = b"PNG\x00"
    with pytest.raises(MagicMismatch):
        deserialize(bytes(buf))
    with pytest.raises(MagicMismatch):
        deserialize(b"")


def test_unsupported_version():
    buf = bytearray(serialize(_container()))
    buf[4:8] = struct.pack("<I", 2)
    with pytest.raises(UnsupportedVersion) as ei:
        deserialize(bytes(buf))
    assert ei.value.version == 2


@pytest.mark.parametrize("cut", [6, 17, 25, 40, -1])
def test_truncation_is_detected(cut):
    buf = serialize(_container())
    with pytest.raises(ContainerFormatError):
        deserialize(buf[:cut])


def test_block_past_end_is_truncated_data():
    buf = serialize(_container())
    with pytest.raises(TruncatedData):
        deserialize(buf[:-1])


def test_corrupt_base_payload():
    buf = bytearray(serialize(_container()))
    buf[21:25] = b"\xff\xff\xff\xff"   # premiers octets du flux zlib de la base
    with pytest.raises(CorruptPayload):
        deserialize(bytes(buf))


def test_inflate_is_bounded_by_expected_size():
    z = zlib.compress(bytes(100))
    assert DEFLATE.decompress(z, 100) == bytes(100)
    with pytest.raises(CorruptPayload):
        DEFLATE.decompress(z, 10)
    with pytest.raises(CorruptPayload):
        DEFLATE.decompress(z[:-6], 100)   # flux tronqué


def test_oversized_base_payload_is_rejected():
    # 1x1 RGBA annoncé, 10 Mo de zéros dans le flux
    bomb = zlib.compress(bytes(10_000_000), 9)
    buf = pack_header(1, 1, 4, bomb) + pack_index([])
    h = parse_header_and_index(buf, decode_base_image=False)
    assert h.base_payload == bomb
    with pytest.raises(CorruptPayload):
        parse_header_and_index(buf)


def test_oversized_patch_payload_is_rejected():
    bomb = zlib.compress(bytes(10_000_000), 9)
    block = struct.pack("<I", 1) + struct.pack("<IIIII", 0, 0, 1, 1, len(bomb)) + bomb
    with pytest.raises(CorruptPayload):
        unpack_variant_block(block, width=2, height=1, channels=4)


def test_overlapping_index_ranges_are_rejected():
    c = _container()
    buf = bytearray(serialize(c))
    h = parse_header_and_index(bytes(buf), decode_base_image=False)
    # fait pointer la 2e entrée sur le bloc de la 1re
    second = h.index[1]
    pos = h.index_offset + 4 + (4 + 1 + 8) + 4 + len("bé".encode("utf-8"))
    buf[pos:pos + 8] = struct.pack("<II", h.index[0].byte_offset, second.byte_length)
    with pytest.raises(ContainerFormatError):
        deserialize(bytes(buf))


def test_u32_overflow_on_write():
    base = PixelBuffer(1, 1, 3, b"\x00\x00\x00")
    c = Container(VERSION, 1, 1, 3, base, [])
    object.__setattr__(c, "width", 2 ** 32)
    with pytest.raises(ValueError):
        serialize(c)


def test_rgb_container_roundtrip():
    arr = np.random.default_rng(5).integers(0, 256, size=(6, 5, 3), dtype=np.uint8)
    base = PixelBuffer.from_array(arr)
    c = Container(VERSION, 5, 6, 3, base, [Variant("only")])
    d = deserialize(serialize(c))
    assert d.channels == 3 and d.base_image == base
