# packages/chpkcodec/src/chpkcodec/bitstream/header.py
from __future__ import annotations
import struct
from dataclasses import dataclass, field
from typing import List, Optional

from ..compress import DEFLATE, ByteCompressor
from ..errors import ContainerFormatError, CorruptPayload, MagicMismatch, UnsupportedVersion
from ..pixels import SUPPORTED_CHANNELS, PixelBuffer, VariantIndexEntry
from .index import unpack_index
from .source import U32_MAX, ByteSource, as_source, read_u32, u32

__all__ = [
    "MAGIC", "VERSION", "FIXED_FMT", "FIXED_SIZE", "U32_MAX",
    "ContainerHeader", "pack_header", "decode_base", "parse_header_and_index",
]

MAGIC = b"CHPK"
VERSION = 1
# magic[4] version:u32 width:u32 height:u32 channels:u8
FIXED_FMT = "<4sIIIB"
FIXED_SIZE = struct.calcsize(FIXED_FMT)  # = 17 bytes


@dataclass
class ContainerHeader:
    """Tout ce qui précède les blocs de variantes (header + base + index)."""
    version: int
    width: int
    height: int
    channels: int
    base_payload: bytes = field(repr=False)   # base compressée, telle que stockée
    index: List[VariantIndexEntry]
    index_offset: int                          # position du champ variantCount
    index_end: int                             # premier octet après l'index
    base_image: Optional[PixelBuffer] = field(default=None, repr=False)

    def names(self) -> List[str]:
        return [e.name for e in self.index]

    def find(self, name: str) -> Optional[VariantIndexEntry]:
        for e in self.index:
            if e.name == name:
                return e
        return None


def pack_header(width: int, height: int, channels: int, base_payload: bytes) -> bytes:
    """Header fixe + taille et octets de la base compressée (sans l'index)."""
    if channels not in SUPPORTED_CHANNELS:
        raise ValueError(f"channels must be 3 or 4 (got {channels})")
    fixed = struct.pack(FIXED_FMT, MAGIC, VERSION, u32(width, "width"), u32(height, "height"), int(channels))
    return fixed + struct.pack("<I", u32(len(base_payload), "baseImageCompressedSize")) + bytes(base_payload)


def decode_base(header: ContainerHeader, compressor: ByteCompressor = DEFLATE) -> PixelBuffer:
    expected = header.width * header.height * header.channels
    raw = compressor.decompress(header.base_payload, expected)
    if len(raw) != expected:
        raise CorruptPayload(f"base image inflates to {len(raw)} bytes, expected {expected}")
    return PixelBuffer(header.width, header.height, header.channels, raw)


def parse_header_and_index(
    src: ByteSource | bytes,
    *,
    decode_base_image: bool = True,
    compressor: ByteCompressor = DEFLATE,
) -> ContainerHeader:
    """
    Lit magic / version / dimensions / base / index et s'arrête avant le premier
    bloc de variante. Aucun bloc n'est lu ni décompressé.
    """
    src = as_source(src)
    if src.size() < 4 or src.read_at(0, 4) != MAGIC:
        raise MagicMismatch("not a CHPK container (magic mismatch)")
    magic, version, width, height, channels = struct.unpack(FIXED_FMT, src.read_at(0, FIXED_SIZE))
    if version != VERSION:
        raise UnsupportedVersion(int(version), VERSION)
    if width == 0 or height == 0:
        raise ContainerFormatError(f"invalid container size {width}x{height}")
    if channels not in SUPPORTED_CHANNELS:
        raise ContainerFormatError(f"unsupported channel count {channels}")

    off = FIXED_SIZE
    base_len, off = read_u32(src, off)
    base_payload = src.read_at(off, base_len)
    off += base_len

    index_offset = off
    index, off = unpack_index(src, off)

    header = ContainerHeader(
        version=int(version), width=int(width), height=int(height), channels=int(channels),
        base_payload=base_payload, index=index, index_offset=index_offset, index_end=off,
    )
    if decode_base_image:
        header.base_image = decode_base(header, compressor)
    return header
