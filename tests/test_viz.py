from __future__ import annotations
import numpy as np
import pytest

from chpkcodec import DiffConfig, VariantNotFound, pack_buffers
from chpkcodec.pixels import PixelBuffer
from chpkviz import coverage_mask, montage, plot_variant_sizes, visualize_compression, visualize_variant_patches


def _container():
    black = np.zeros((32, 32, 4), dtype=np.uint8)
    black[..., 3] = 255
    red = black.copy()
    red[2:6, 2:6, 0] = 250
    return pack_buffers({"base": PixelBuffer.from_array(black), "red": PixelBuffer.from_array(red)},
                        DiffConfig(block_size=8))


def test_visualize_compression_tints_shared_regions():
    arr = visualize_compression(_container()).as_array()
    assert tuple(arr[20, 20]) == (0, 60, 120, 255)      # jamais patché -> bleu 60 %
    assert tuple(arr[1, 1]) == (0, 0, 0, 255)           # sous un patch -> couleur d'origine


def test_visualize_variant_patches_tints_patches():
    c = _container()
    arr = visualize_variant_patches(c, "red").as_array()
    assert tuple(arr[7, 7]) == (140, 35, 35, 255)       # noir sous le patch
    assert tuple(arr[3, 3]) == (215, 35, 35, 255)       # rouge sous le patch
    assert tuple(arr[20, 20]) == (0, 0, 0, 255)         # hors patch
    with pytest.raises(VariantNotFound):
        visualize_variant_patches(c, "nope")


def test_coverage_and_montage():
    c = _container()
    rects = [p.rect for v in c.variants for p in v.patches]
    mask = coverage_mask(32, 32, rects)
    assert mask.sum() == 64
    img = montage([c.base_image, c.base_image, c.base_image], cols=2)
    assert img.size == (64, 64) and img.mode == "RGBA"


def test_plot_variant_sizes(tmp_path):
    stats = {"width": 4, "height": 4, "per_variant": [{"name": "a", "raw_bytes": 10}, {"name": "b", "raw_bytes": 0}]}
    out = tmp_path / "plots" / "sizes.png"
    plot_variant_sizes(stats, out)
    assert out.exists() and out.stat().st_size > 0
