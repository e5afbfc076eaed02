# packages/chpkcodec/src/chpkcodec/bitstream/__init__.py
from __future__ import annotations

# I/O bruts du conteneur
from .io import read_container, write_container          # [STORE:OVERWRITE]

# Accès par plage d'octets (mémoire ou fichier)
from .source import ByteSource, BytesSource, FileSource

# Header + index
from .header import MAGIC, VERSION, ContainerHeader, pack_header, decode_base, parse_header_and_index
from .index import index_size, pack_index, unpack_index, check_index

# Blocs de variantes
from .records_io import pack_variant_block, unpack_variant_block, read_variant_block

# Framing complet
from .stream import assemble, serialize, deserialize

__all__ = [
    "read_container", "write_container",
    "ByteSource", "BytesSource", "FileSource",
    "MAGIC", "VERSION", "ContainerHeader", "pack_header", "decode_base", "parse_header_and_index",
    "index_size", "pack_index", "unpack_index", "check_index",
    "pack_variant_block", "unpack_variant_block", "read_variant_block",
    "assemble", "serialize", "deserialize",
]
