# packages/chpkcodec/src/chpkcodec/compress.py
# -----------------------------------------------------------------------------
# Compression générique des payloads (base + patches) - DEFLATE via zlib.
# Le format ne stocke pas l'algorithme : tout changement incompatible de
# compresseur doit s'accompagner d'un bump de VERSION du conteneur.

from __future__ import annotations
import zlib
from dataclasses import dataclass
from typing import Optional, Protocol

from .errors import CorruptPayload

__all__ = ["ByteCompressor", "DeflateCompressor", "DEFLATE", "deflate_for_level"]


class ByteCompressor(Protocol):
    def compress(self, data: bytes) -> bytes: ...
    def decompress(self, data: bytes, expected: Optional[int] = None) -> bytes: ...


@dataclass(frozen=True)
class DeflateCompressor:
    """zlib stream (RFC 1950), déterministe pour un niveau donné."""
    level: int = 6

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(bytes(data), self.level)

    def decompress(self, data: bytes, expected: Optional[int] = None) -> bytes:
        """
        Inflate `data`. Avec `expected`, la sortie est bornée à expected + 1
        octets : un payload qui gonfle au-delà lève `CorruptPayload` sans être
        décompressé en entier.
        """
        d = zlib.decompressobj()
        try:
            if expected is None:
                raw = d.decompress(bytes(data)) + d.flush()
            else:
                raw = d.decompress(bytes(data), int(expected) + 1)
        except zlib.error as e:
            raise CorruptPayload(f"payload does not inflate: {e}") from e
        if expected is not None and (len(raw) > expected or d.unconsumed_tail):
            raise CorruptPayload(f"payload inflates past {expected} bytes")
        if not d.eof:
            raise CorruptPayload("payload does not inflate: incomplete or truncated stream")
        return raw


DEFLATE = DeflateCompressor(level=6)


def deflate_for_level(level: int) -> DeflateCompressor:
    return DEFLATE if int(level) == DEFLATE.level else DeflateCompressor(level=int(level))
