# [STORE:OVERWRITE] - sérialisation binaire des blocs de variantes
from __future__ import annotations
import io
import struct
from typing import List, Sequence

from ..compress import DEFLATE, ByteCompressor
from ..errors import ContainerFormatError, CorruptPayload
from ..pixels import Patch, Rectangle, VariantIndexEntry
from .source import ByteSource, BytesSource, read_u32, u32

__all__ = ["PATCH_HEAD_FMT", "PATCH_HEAD_SIZE", "pack_variant_block", "unpack_variant_block", "read_variant_block"]

_LE = "<"  # little-endian

# x:u32 y:u32 w:u32 h:u32 compressedSize:u32
PATCH_HEAD_FMT = _LE + "IIIII"
PATCH_HEAD_SIZE = struct.calcsize(PATCH_HEAD_FMT)  # = 20 bytes


def pack_variant_block(patches: Sequence[Patch], compressor: ByteCompressor = DEFLATE) -> bytes:
    """patchCount:u32 puis, par patch, rect + payload compressé."""
    buf = io.BytesIO()
    buf.write(struct.pack(_LE + "I", u32(len(patches), "patchCount")))
    for p in patches:
        r = p.rect
        blob = compressor.compress(p.data)
        buf.write(struct.pack(
            PATCH_HEAD_FMT,
            u32(r.x, "x"), u32(r.y, "y"), u32(r.width, "w"), u32(r.height, "h"),
            u32(len(blob), "compressedSize"),
        ))
        buf.write(blob)
    return buf.getvalue()


def unpack_variant_block(
    block: bytes,
    *,
    width: int,
    height: int,
    channels: int,
    compressor: ByteCompressor = DEFLATE,
    name: str = "?",
) -> List[Patch]:
    """Parse un bloc complet (octets exacts de la plage indexée)."""
    src = BytesSource(block)
    count, off = read_u32(src, 0)
    if off + PATCH_HEAD_SIZE * count > src.size():
        raise ContainerFormatError(f"variant '{name}': {count} patches announced, block too short")
    out: List[Patch] = []
    for _ in range(count):
        x, y, w, h, size = struct.unpack(PATCH_HEAD_FMT, src.read_at(off, PATCH_HEAD_SIZE))
        off += PATCH_HEAD_SIZE
        rect = Rectangle(int(x), int(y), int(w), int(h))
        if not rect.fits(width, height):
            raise ContainerFormatError(f"variant '{name}': patch {rect} outside {width}x{height}")
        raw = compressor.decompress(src.read_at(off, size), rect.area * channels)
        off += size
        if len(raw) != rect.area * channels:
            raise CorruptPayload(
                f"variant '{name}': patch {rect} inflates to {len(raw)} bytes, expected {rect.area * channels}"
            )
        out.append(Patch(rect=rect, data=raw))
    if off != src.size():
        raise ContainerFormatError(f"variant '{name}': {src.size() - off} trailing bytes in block")
    return out


def read_variant_block(
    src: ByteSource,
    entry: VariantIndexEntry,
    *,
    width: int,
    height: int,
    channels: int,
    compressor: ByteCompressor = DEFLATE,
) -> List[Patch]:
    """Lit exactement la plage `entry` dans `src` puis la décode."""
    block = src.read_at(entry.byte_offset, entry.byte_length)
    return unpack_variant_block(block, width=width, height=height, channels=channels,
                                compressor=compressor, name=entry.name)
