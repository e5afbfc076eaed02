# packages/chpkcodec/src/chpkcodec/bitstream/stream.py
from __future__ import annotations

"""
CHPK - Container stream (v1)
============================

Little-endian, all integers unsigned::

    magic[4]="CHPK"  version:u32  width:u32  height:u32  channels:u8
    baseImageCompressedSize:u32  baseImageCompressedBytes[...]
    variantCount:u32
    -- index (variantCount entries) --
      nameLength:u32  nameUtf8[nameLength]  blockOffset:u32  blockSize:u32
    -- variant blocks (referenced by index) --
      patchCount:u32
      patchCount × { x:u32 y:u32 w:u32 h:u32 compressedSize:u32 compressedBytes[...] }

`blockOffset` est absolu (depuis le début du conteneur). La base et chaque
payload de patch sont compressés indépendamment (DEFLATE par défaut).
"""

from typing import List, Sequence, Tuple

from ..compress import DEFLATE, ByteCompressor
from ..pixels import Container, Variant, VariantIndexEntry
from .header import VERSION, pack_header, parse_header_and_index
from .index import check_index, index_size, pack_index
from .records_io import pack_variant_block, read_variant_block
from .source import as_source

__all__ = ["assemble", "serialize", "deserialize"]


def assemble(header_bytes: bytes, blocks: Sequence[Tuple[str, bytes]]) -> Tuple[bytes, List[VariantIndexEntry]]:
    """
    Place `blocks` (nom, octets) à la suite de `header_bytes` + index.

    La taille de l'index est calculée d'abord pour connaître l'offset absolu
    du premier bloc ; les offsets suivants s'accumulent.
    """
    first = len(header_bytes) + index_size(name for name, _ in blocks)
    entries: List[VariantIndexEntry] = []
    off = first
    for name, block in blocks:
        entries.append(VariantIndexEntry(name=name, byte_offset=off, byte_length=len(block)))
        off += len(block)
    out = bytearray(header_bytes)
    out += pack_index(entries)
    for _, block in blocks:
        out += block
    return bytes(out), entries


def serialize(container: Container, compressor: ByteCompressor = DEFLATE) -> bytes:
    base_payload = compressor.compress(container.base_image.data)
    head = pack_header(container.width, container.height, container.channels, base_payload)
    blocks = [(v.name, pack_variant_block(v.patches, compressor)) for v in container.variants]
    blob, _ = assemble(head, blocks)
    return blob


def deserialize(buf: bytes, compressor: ByteCompressor = DEFLATE) -> Container:
    """
    Lecture complète : header, base décompressée, index, puis chaque bloc dans
    l'ordre de l'index. Toute erreur lève avant qu'un `Container` n'existe.
    """
    src = as_source(buf)
    header = parse_header_and_index(src, compressor=compressor)
    check_index(header.index, src.size(), header.index_end)
    variants = [
        Variant(
            name=e.name,
            patches=read_variant_block(src, e, width=header.width, height=header.height,
                                       channels=header.channels, compressor=compressor),
        )
        for e in header.index
    ]
    return Container(
        version=VERSION,
        width=header.width,
        height=header.height,
        channels=header.channels,
        base_image=header.base_image,
        variants=variants,
    )
