# [STORE:OVERWRITE] - table d'index des variantes (nom → plage d'octets)
from __future__ import annotations
import io
import struct
from typing import Iterable, List, Sequence, Tuple

from ..errors import ContainerFormatError, TruncatedData
from ..pixels import VariantIndexEntry
from .source import ByteSource, read_u32, u32

__all__ = ["entry_size", "index_size", "pack_index", "unpack_index", "check_index"]

_LE = "<"


def entry_size(name: str) -> int:
    # nameLength:u32 + nameUtf8 + blockOffset:u32 + blockSize:u32
    return 4 + len(name.encode("utf-8")) + 4 + 4


def index_size(names: Iterable[str]) -> int:
    """Taille de variantCount + index, connue avant de placer les blocs."""
    return 4 + sum(entry_size(n) for n in names)


def pack_index(entries: Sequence[VariantIndexEntry]) -> bytes:
    buf = io.BytesIO()
    buf.write(struct.pack(_LE + "I", u32(len(entries), "variantCount")))
    for e in entries:
        name = e.name.encode("utf-8")
        buf.write(struct.pack(_LE + "I", len(name)))
        buf.write(name)
        buf.write(struct.pack(_LE + "II", u32(e.byte_offset, "blockOffset"), u32(e.byte_length, "blockSize")))
    return buf.getvalue()


def unpack_index(src: ByteSource, offset: int) -> Tuple[List[VariantIndexEntry], int]:
    count, off = read_u32(src, offset)
    # chaque entrée fait au moins 12 octets : refuse un count absurde avant de boucler
    if off + 12 * count > src.size():
        raise TruncatedData(f"index announces {count} variants, container too short")
    out: List[VariantIndexEntry] = []
    for _ in range(count):
        name_len, off = read_u32(src, off)
        raw = src.read_at(off, name_len)
        off += name_len
        try:
            name = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ContainerFormatError(f"variant name is not valid UTF-8: {e}") from e
        block_off, off = read_u32(src, off)
        block_len, off = read_u32(src, off)
        out.append(VariantIndexEntry(name=name, byte_offset=block_off, byte_length=block_len))
    return out, off


def check_index(entries: Sequence[VariantIndexEntry], total_size: int, index_end: int) -> None:
    """
    Cohérence de l'index : chaque plage dans le fichier, après l'index,
    sans recouvrement, noms uniques et non vides.
    """
    names = set()
    for e in entries:
        if not e.name:
            raise ContainerFormatError("empty variant name in index")
        if e.name in names:
            raise ContainerFormatError(f"duplicate variant name '{e.name}' in index")
        names.add(e.name)
        if e.byte_length < 4:
            raise ContainerFormatError(f"variant '{e.name}' block too small ({e.byte_length} bytes)")
        if e.byte_offset < index_end:
            raise ContainerFormatError(f"variant '{e.name}' block overlaps the header/index")
        if e.end > total_size:
            raise TruncatedData(f"variant '{e.name}' block ends at {e.end}, container has {total_size} bytes")
    spans = sorted((e.byte_offset, e.end, e.name) for e in entries)
    for (s0, e0, n0), (s1, _e1, n1) in zip(spans, spans[1:]):
        if s1 < e0:
            raise ContainerFormatError(f"variant blocks '{n0}' and '{n1}' overlap")
