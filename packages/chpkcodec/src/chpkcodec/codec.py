# packages/chpkcodec/src/chpkcodec/codec.py
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from .bitstream import VERSION, deserialize, serialize
from .compress import deflate_for_level
from .config import DiffConfig
from .diff import check_same_geometry
from .errors import EmptyInput
from .patch import apply_patches, diff_variant
from .pixels import Container, PixelBuffer, Variant

__all__ = ["pack_buffers", "pack_bytes", "unpack_bytes", "reconstruct", "container_stats"]

log = logging.getLogger("chpk.codec")


# ---------------------------------------------------------------------------
# PACK - N buffers → Container (le premier sert de base)
# ---------------------------------------------------------------------------

def pack_buffers(images: Mapping[str, PixelBuffer], cfg: Optional[DiffConfig] = None) -> Container:
    """
    Construit un `Container` en mémoire.

    - La **première** entrée de `images` (ordre d'itération) devient l'image de base.
    - Chaque entrée, base comprise, devient une variante (la base a 0 patch).
    - Toutes les images doivent partager (largeur, hauteur, canaux).

    Lève `EmptyInput` si `images` est vide, `DimensionMismatch` / `ChannelMismatch`
    si une géométrie diffère (avant tout diff).
    """
    cfg = cfg or DiffConfig()
    if not images:
        raise EmptyInput("no images to pack")
    items = list(images.items())
    base_name, base = items[0]
    for _name, img in items[1:]:
        check_same_geometry(base, img)

    variants = []
    for name, img in items:
        patches = diff_variant(base, img, cfg)
        variants.append(Variant(name=name, patches=patches))
        log.debug("pack: '%s' -> %d patches (%d bytes raw)", name, len(patches), sum(len(p.data) for p in patches))

    log.info("pack: %d variants, base='%s', %dx%dx%d", len(variants), base_name, base.width, base.height, base.channels)
    return Container(
        version=VERSION,
        width=base.width,
        height=base.height,
        channels=base.channels,
        base_image=base,
        variants=variants,
    )


def pack_bytes(images: Mapping[str, PixelBuffer], cfg: Optional[DiffConfig] = None) -> bytes:
    cfg = cfg or DiffConfig()
    return serialize(pack_buffers(images, cfg), deflate_for_level(cfg.compress_level))


# ---------------------------------------------------------------------------
# UNPACK - bytes → {nom: PixelBuffer}
# ---------------------------------------------------------------------------

def reconstruct(container: Container, name: str) -> PixelBuffer:
    return apply_patches(container.base_image, container.variant(name).patches)


def unpack_bytes(buf: bytes) -> Dict[str, PixelBuffer]:
    container = deserialize(buf)
    return {v.name: apply_patches(container.base_image, v.patches) for v in container.variants}


def container_stats(container: Container) -> Dict[str, Any]:
    """Statistiques simples par variante (nombre de patches, pixels et octets bruts)."""
    per_variant = [
        {
            "name": v.name,
            "patches": len(v.patches),
            "pixels": sum(p.rect.area for p in v.patches),
            "raw_bytes": v.payload_bytes,
        }
        for v in container.variants
    ]
    return {
        "width": container.width,
        "height": container.height,
        "channels": container.channels,
        "variants": len(container.variants),
        "base_raw_bytes": len(container.base_image.data),
        "per_variant": per_variant,
    }
