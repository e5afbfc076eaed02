# packages/chpkcodec/src/chpkcodec/mutate.py
from __future__ import annotations

"""
Mutations d'un conteneur sur disque (ajout / retrait de variantes).

Ordre valider-puis-écrire : toute erreur de validation lève avant la première
écriture, le fichier reste alors identique à l'octet près.

- `add_variants` réécrit tout le fichier (écriture atomique tmp + replace).
  Les blocs existants sont recopiés tels quels, sans décompression ; la base
  compressée aussi. Coût : proportionnel à la taille du fichier.
- `remove_variants` ne réécrit que `variantCount` + index, en place. Les blocs
  retirés restent physiquement présents mais ne sont plus référencés.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from .bitstream import (
    ContainerHeader,
    FileSource,
    assemble,
    check_index,
    pack_header,
    pack_index,
    pack_variant_block,
    parse_header_and_index,
    write_container,
)
from .compress import DEFLATE, ByteCompressor, deflate_for_level
from .config import DiffConfig
from .diff import check_same_geometry
from .errors import CannotRemoveAllVariants, ChannelMismatch, DimensionMismatch, DuplicateVariantName, VariantNotFound
from .patch import diff_variant
from .pixels import PixelBuffer, Variant, VariantIndexEntry

__all__ = ["read_header", "add_variants", "add_images", "remove_variants"]

log = logging.getLogger("chpk.mutate")


def read_header(path: str | Path, *, decode_base_image: bool = False) -> ContainerHeader:
    with open(path, "rb") as fp:
        src = FileSource(fp)
        header = parse_header_and_index(src, decode_base_image=decode_base_image)
        check_index(header.index, src.size(), header.index_end)
    return header


def _check_new_names(header: ContainerHeader, names: Iterable[str]) -> None:
    taken = set(header.names())
    for name in names:
        if name in taken:
            raise DuplicateVariantName(name)
        taken.add(name)


def _check_geometry(header: ContainerHeader, v: Variant) -> None:
    for p in v.patches:
        if not p.rect.fits(header.width, header.height):
            raise DimensionMismatch(f"patch {p.rect} of '{v.name}' is outside {header.width}x{header.height}")
        if len(p.data) != p.rect.area * header.channels:
            raise ChannelMismatch(f"patch {p.rect} of '{v.name}' does not carry {header.channels}-channel data")


def add_variants(
    path: str | Path,
    variants: Sequence[Variant],
    compressor: ByteCompressor = DEFLATE,
) -> List[VariantIndexEntry]:
    """
    Ajoute des variantes déjà diffées contre la base du conteneur.

    Lève `DuplicateVariantName` (collision avec l'existant ou dans le lot),
    `DimensionMismatch` / `ChannelMismatch` (patch hors géométrie).
    Retourne le nouvel index.
    """
    path = Path(path)
    variants = list(variants)
    with open(path, "rb") as fp:
        src = FileSource(fp)
        header = parse_header_and_index(src, decode_base_image=False)
        check_index(header.index, src.size(), header.index_end)
        if not variants:
            return list(header.index)
        _check_new_names(header, (v.name for v in variants))
        for v in variants:
            _check_geometry(header, v)
        old_blocks = [(e.name, src.read_at(e.byte_offset, e.byte_length)) for e in header.index]

    new_blocks = [(v.name, pack_variant_block(v.patches, compressor)) for v in variants]
    head = pack_header(header.width, header.height, header.channels, header.base_payload)
    blob, entries = assemble(head, old_blocks + new_blocks)
    write_container(blob, path)
    log.info("add_variants %s: +%d variants (%d total, %d bytes)", path, len(variants), len(entries), len(blob))
    return entries


def add_images(
    path: str | Path,
    images: Mapping[str, PixelBuffer],
    cfg: Optional[DiffConfig] = None,
) -> List[VariantIndexEntry]:
    """Diffe `images` contre la base stockée, puis `add_variants`."""
    cfg = cfg or DiffConfig()
    header = read_header(path, decode_base_image=True)
    _check_new_names(header, images.keys())
    base = header.base_image
    for img in images.values():
        check_same_geometry(base, img)
    variants = [Variant(name=name, patches=diff_variant(base, img, cfg)) for name, img in images.items()]
    return add_variants(path, variants, deflate_for_level(cfg.compress_level))


def remove_variants(path: str | Path, names: Iterable[str]) -> List[VariantIndexEntry]:
    """
    Retire `names` de l'index, en place.

    Lève `VariantNotFound` pour un nom absent et `CannotRemoveAllVariants` si
    l'index deviendrait vide. Retourne l'index restant.
    """
    path = Path(path)
    drop = list(dict.fromkeys(names))
    header = read_header(path)
    if not drop:
        return list(header.index)
    for name in drop:
        if header.find(name) is None:
            raise VariantNotFound(name)
    dropped = set(drop)
    remaining = [e for e in header.index if e.name not in dropped]
    if not remaining:
        raise CannotRemoveAllVariants(
            f"removing {len(drop)} variant(s) would leave '{path.name}' without variants"
        )

    new_index = pack_index(remaining)
    old_len = header.index_end - header.index_offset
    with open(path, "r+b") as fp:
        fp.seek(header.index_offset)
        fp.write(new_index)
        fp.write(b"\x00" * (old_len - len(new_index)))
        fp.flush()
        os.fsync(fp.fileno())
    log.info("remove_variants %s: -%d variants (%d left)", path, len(drop), len(remaining))
    return remaining
