from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, Mapping

import numpy as np
from PIL import Image

from chpkcodec.patch import apply_patches
from chpkcodec.pixels import Container, PixelBuffer, Rectangle

SHARED_RGB = (0, 100, 200)      # bleu : pixels jamais patchés
SHARED_ALPHA = 0.6
PATCH_RGB = (200, 50, 50)       # rouge : zones patchées d'une variante
PATCH_ALPHA = 0.7


def _blend(rgb: np.ndarray, color, alpha: float) -> np.ndarray:
    out = rgb.astype(np.float64) * (1.0 - alpha) + np.asarray(color, dtype=np.float64) * alpha
    return np.floor(out + 0.5).astype(np.uint8)


def coverage_mask(width: int, height: int, rects: Iterable[Rectangle]) -> np.ndarray:
    """Masque bool (H, W) : True là où au moins un rectangle passe."""
    mask = np.zeros((height, width), dtype=bool)
    for r in rects:
        mask[r.y:r.bottom, r.x:r.right] = True
    return mask


def visualize_compression(container: Container) -> PixelBuffer:
    """
    Base + voile bleu (60 %) sur les régions partagées par toutes les variantes.
    Les zones couvertes par au moins un patch gardent leur couleur d'origine.
    """
    base = container.base_image
    rects = [p.rect for v in container.variants for p in v.patches]
    covered = coverage_mask(base.width, base.height, rects)
    arr = np.array(base.as_array())
    shared = ~covered
    arr[shared, :3] = _blend(arr[shared, :3], SHARED_RGB, SHARED_ALPHA)
    return PixelBuffer.from_array(arr)


def visualize_variant_patches(container: Container, name: str) -> PixelBuffer:
    """Image de la variante `name` + voile rouge (70 %) sur ses patches."""
    variant = container.variant(name)
    image = apply_patches(container.base_image, variant.patches)
    arr = np.array(image.as_array())
    mask = coverage_mask(image.width, image.height, (p.rect for p in variant.patches))
    arr[mask, :3] = _blend(arr[mask, :3], PATCH_RGB, PATCH_ALPHA)
    return PixelBuffer.from_array(arr)


def montage(buffers: list[PixelBuffer], cols: int) -> Image.Image:
    """Planche RGBA : les buffers (même géométrie) en grille de `cols` colonnes."""
    if not buffers:
        raise ValueError("montage needs at least one image")
    first = buffers[0]
    H, W = first.height, first.width
    rows = (len(buffers) + cols - 1) // cols
    canvas = np.zeros((rows * H, cols * W, 4), dtype=np.uint8)
    for i, buf in enumerate(buffers):
        r, c = divmod(i, cols)
        arr = buf.as_array()
        canvas[r*H:(r+1)*H, c*W:(c+1)*W, :buf.channels] = arr
        if buf.channels == 3:
            canvas[r*H:(r+1)*H, c*W:(c+1)*W, 3] = 255
    return Image.fromarray(canvas, mode="RGBA")


def plot_variant_sizes(stats: Mapping[str, Any], out_png: str | Path) -> None:
    """Histogramme des octets bruts de patches par variante (`container_stats`)."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    rows = stats.get("per_variant", [])
    names = [r["name"] for r in rows]
    sizes = [r["raw_bytes"] for r in rows]
    fig = plt.figure()
    plt.bar(range(len(names)), sizes)
    plt.xticks(range(len(names)), names, rotation=45, ha="right")
    plt.ylabel("patch bytes (raw)")
    plt.title(f"Variantes ({stats.get('width')}x{stats.get('height')})")
    Path(out_png).parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_png, bbox_inches="tight")
    plt.close(fig)
