# packages/chpkcodec/src/chpkcodec/diff.py
from __future__ import annotations

"""
chpkcodec.diff - détection des blocs différents (Block Differencer)

The image is cut into a `block_size` grid (edge cells clipped to the image,
never padded). A per-pixel "differs" mask is computed once for the whole image
with numpy, then reduced per cell with `np.add.reduceat`. A cell is reported
when its differing-pixel count exceeds `floor(cell_pixels * ratio)`.

Output order is row-major (top-to-bottom, left-to-right); the merger relies
on it for deterministic results.
"""

import logging
import math
from typing import List, Optional

import numpy as np

from .config import DiffConfig
from .errors import ChannelMismatch, DimensionMismatch
from .pixels import PixelBuffer, Rectangle

__all__ = ["check_same_geometry", "pixel_diff_mask", "block_diff_counts", "difference_blocks"]

log = logging.getLogger("chpk.diff")


def check_same_geometry(base: PixelBuffer, target: PixelBuffer) -> None:
    if (base.width, base.height) != (target.width, target.height):
        raise DimensionMismatch(
            f"images must share dimensions: base {base.width}x{base.height}, "
            f"target {target.width}x{target.height}"
        )
    if base.channels != target.channels:
        raise ChannelMismatch(f"images must share channels: base {base.channels}, target {target.channels}")


def pixel_diff_mask(base: PixelBuffer, target: PixelBuffer, cfg: DiffConfig) -> np.ndarray:
    """Masque booléen (H, W) : True là où le pixel est considéré différent."""
    check_same_geometry(base, target)
    a = base.as_array().astype(np.int16)
    b = target.as_array().astype(np.int16)
    delta = a - b
    if cfg.uses_color_distance:
        rgb = delta[..., :3].astype(np.int32)
        dist2 = np.sum(rgb * rgb, axis=-1)
        # sqrt(d2) > t  <=>  d2 > t*t  (t > 0)
        t = float(cfg.color_distance_threshold)
        return dist2 > t * t
    return np.any(np.abs(delta) > int(cfg.diff_threshold), axis=-1)


def _grid_starts(length: int, block_size: int) -> np.ndarray:
    return np.arange(0, length, block_size, dtype=np.intp)


def block_diff_counts(mask: np.ndarray, block_size: int) -> np.ndarray:
    """Nombre de pixels différents par cellule, shape (rows, cols)."""
    if block_size <= 0:
        raise ValueError("block_size must be > 0")
    h, w = mask.shape
    ys = _grid_starts(h, block_size)
    xs = _grid_starts(w, block_size)
    m = mask.astype(np.int64)
    per_row_band = np.add.reduceat(m, ys, axis=0)
    return np.add.reduceat(per_row_band, xs, axis=1)


def difference_blocks(
    base: PixelBuffer,
    target: PixelBuffer,
    block_size: Optional[int] = None,
    tolerance: Optional[DiffConfig] = None,
) -> List[Rectangle]:
    """
    Retourne les cellules différentes entre `base` et `target` (ordre ligne par ligne).

    - `block_size` surcharge `tolerance.block_size` s'il est fourni.
    - Lève `DimensionMismatch` / `ChannelMismatch` si les géométries diffèrent.
    """
    cfg = tolerance or DiffConfig()
    size = int(block_size if block_size is not None else cfg.block_size)
    if size <= 0:
        raise ValueError("block_size must be > 0")

    mask = pixel_diff_mask(base, target, cfg)
    if cfg.strict and not mask.any():
        return []

    counts = block_diff_counts(mask, size)
    ratio = float(cfg.diff_tolerance_ratio)
    out: List[Rectangle] = []
    for r, y in enumerate(range(0, base.height, size)):
        bh = min(size, base.height - y)
        for c, x in enumerate(range(0, base.width, size)):
            bw = min(size, base.width - x)
            allowed = math.floor(bw * bh * ratio)
            if int(counts[r, c]) > allowed:
                out.append(Rectangle(x, y, bw, bh))
    log.debug("difference_blocks: %d/%d cells differ (block=%d)", len(out), counts.size, size)
    return out
