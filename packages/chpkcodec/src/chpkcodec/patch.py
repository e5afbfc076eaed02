# packages/chpkcodec/src/chpkcodec/patch.py
from __future__ import annotations
import logging
from typing import Iterable, List, Optional

import numpy as np

from .config import DiffConfig
from .diff import difference_blocks
from .errors import ChannelMismatch, DimensionMismatch
from .merge import merge_rectangles
from .pixels import Patch, PixelBuffer, Rectangle

__all__ = ["extract_region", "apply_patches", "diff_variant"]

log = logging.getLogger("chpk.patch")


def extract_region(image: PixelBuffer, rect: Rectangle) -> bytes:
    """Copie les pixels sous `rect`, ligne par ligne (row-contiguous)."""
    if not rect.fits(image.width, image.height):
        raise DimensionMismatch(f"{rect} is outside {image.width}x{image.height}")
    arr = image.as_array()
    return arr[rect.y:rect.bottom, rect.x:rect.right, :].tobytes()


def apply_patches(base: PixelBuffer, patches: Iterable[Patch]) -> PixelBuffer:
    """
    Reconstruit une variante : copie de `base` puis écrasement de chaque patch,
    dans l'ordre (le dernier gagne en cas de recouvrement).

    `base` n'est jamais modifiée ; le buffer retourné est une nouvelle instance.
    """
    out = base.as_array().copy()
    c = base.channels
    for p in patches:
        r = p.rect
        if not r.fits(base.width, base.height):
            raise DimensionMismatch(f"patch {r} is outside {base.width}x{base.height}")
        expected = r.area * c
        if len(p.data) != expected:
            raise ChannelMismatch(
                f"patch {r} carries {len(p.data)} bytes, expected {expected} for {c} channels"
            )
        out[r.y:r.bottom, r.x:r.right, :] = np.frombuffer(p.data, dtype=np.uint8).reshape(r.height, r.width, c)
    return PixelBuffer.from_array(out)


def diff_variant(base: PixelBuffer, target: PixelBuffer, cfg: Optional[DiffConfig] = None) -> List[Patch]:
    """Differencer → Merger → Extractor pour une variante."""
    cfg = cfg or DiffConfig()
    blocks = difference_blocks(base, target, cfg.block_size, cfg)
    rects = merge_rectangles(blocks)
    log.debug("diff_variant: %d blocks -> %d patches", len(blocks), len(rects))
    return [Patch(rect=r, data=extract_region(target, r)) for r in rects]
