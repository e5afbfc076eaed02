# packages/chpkcodec/src/chpkcodec/reader.py
from __future__ import annotations

"""
Lecture par accès direct (Random-Access Reader).

`extract_variant` ne lit que header + base + index, puis exactement la plage
d'octets de la variante demandée : le coût dépend de la taille de cette
variante, pas du nombre de variantes du conteneur.
"""

import logging
from pathlib import Path
from typing import BinaryIO, List, Optional

from .bitstream import ContainerHeader, FileSource, check_index, parse_header_and_index, read_variant_block
from .bitstream.source import ByteSource, as_source
from .errors import VariantNotFound
from .patch import apply_patches
from .pixels import Patch, PixelBuffer

__all__ = ["read_patches", "extract_variant", "PackReader"]

log = logging.getLogger("chpk.reader")


def read_patches(src: ByteSource, header: ContainerHeader, name: str) -> List[Patch]:
    entry = header.find(name)
    if entry is None:
        raise VariantNotFound(name)
    check_index([entry], src.size(), header.index_end)
    return read_variant_block(src, entry, width=header.width, height=header.height, channels=header.channels)


def _extract(src: ByteSource, name: str) -> PixelBuffer:
    header = parse_header_and_index(src)
    patches = read_patches(src, header, name)
    log.debug("extract '%s': %d patches", name, len(patches))
    return apply_patches(header.base_image, patches)


def extract_variant(container: bytes | bytearray | memoryview | str | Path, name: str) -> PixelBuffer:
    """
    Reconstruit la variante `name` depuis des octets en mémoire ou un chemin.

    Avec un chemin, le fichier est lu par plages (seek + read) : les blocs des
    autres variantes ne sont jamais chargés.
    """
    if isinstance(container, (str, Path)):
        with open(container, "rb") as fp:
            return _extract(FileSource(fp), name)
    return _extract(as_source(container), name)


class PackReader:
    """
    Lecteur multi-variantes : garde header, index et base décodée en cache,
    lit un bloc par appel. `refresh()` relit le fichier (après une mutation).

        with PackReader("hero.chpk") as pack:
            smile = pack.image("smile")
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._fp: Optional[BinaryIO] = None
        self._src: Optional[FileSource] = None
        self._header: Optional[ContainerHeader] = None
        self.refresh()

    # -- cycle de vie -------------------------------------------------------
    def refresh(self) -> None:
        self.close()
        fp = open(self.path, "rb")
        try:
            src = FileSource(fp)
            header = parse_header_and_index(src)
            check_index(header.index, src.size(), header.index_end)
        except BaseException:
            fp.close()
            raise
        self._fp, self._src, self._header = fp, src, header

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
        self._fp = self._src = self._header = None

    dispose = close

    def __enter__(self) -> "PackReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -- accès ----------------------------------------------------------------
    @property
    def header(self) -> ContainerHeader:
        if self._header is None:
            raise ValueError(f"PackReader({self.path}) is closed")
        return self._header

    def names(self) -> List[str]:
        return self.header.names()

    def __contains__(self, name: str) -> bool:
        return self.header.find(name) is not None

    @property
    def base_image(self) -> PixelBuffer:
        return self.header.base_image

    def patches(self, name: str) -> List[Patch]:
        return read_patches(self._src, self.header, name)

    def image(self, name: str) -> PixelBuffer:
        return apply_patches(self.header.base_image, self.patches(name))
