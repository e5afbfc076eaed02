# packages/chpkcodec/src/chpkcodec/bitstream/source.py
from __future__ import annotations
import os
import struct
from typing import BinaryIO, Tuple

from ..errors import TruncatedData

__all__ = ["U32_MAX", "ByteSource", "BytesSource", "FileSource", "as_source", "read_u32", "read_u8", "u32"]

_LE = "<"  # little-endian
U32_MAX = 0xFFFFFFFF


def u32(value: int, what: str) -> int:
    v = int(value)
    if not (0 <= v <= U32_MAX):
        raise ValueError(f"{what}={v} does not fit in u32")
    return v


class ByteSource:
    """Lecture d'une plage d'octets à un offset absolu (bytes en mémoire ou fichier)."""

    def size(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    def _read(self, offset: int, n: int) -> bytes:  # pragma: no cover - interface
        raise NotImplementedError

    def read_at(self, offset: int, n: int) -> bytes:
        if n < 0 or offset < 0 or offset + n > self.size():
            raise TruncatedData(
                f"need {n} bytes at offset {offset}, container has {self.size()} bytes"
            )
        out = self._read(offset, n)
        if len(out) != n:
            raise TruncatedData(f"short read at offset {offset}: {len(out)}/{n} bytes")
        return out


class BytesSource(ByteSource):
    def __init__(self, data: bytes | bytearray | memoryview):
        self._mv = memoryview(data).cast("B")

    def size(self) -> int:
        return len(self._mv)

    def _read(self, offset: int, n: int) -> bytes:
        return bytes(self._mv[offset:offset + n])


class FileSource(ByteSource):
    """Accès partiel à un fichier ouvert en binaire (seek + read)."""

    def __init__(self, fp: BinaryIO):
        self._fp = fp
        self._size = os.fstat(fp.fileno()).st_size

    def size(self) -> int:
        return self._size

    def _read(self, offset: int, n: int) -> bytes:
        self._fp.seek(offset)
        return self._fp.read(n)


def as_source(obj) -> ByteSource:
    if isinstance(obj, ByteSource):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BytesSource(obj)
    raise TypeError(f"expected bytes-like or ByteSource, got {type(obj).__name__}")


def read_u32(src: ByteSource, offset: int) -> Tuple[int, int]:
    (v,) = struct.unpack(_LE + "I", src.read_at(offset, 4))
    return int(v), offset + 4


def read_u8(src: ByteSource, offset: int) -> Tuple[int, int]:
    return src.read_at(offset, 1)[0], offset + 1
