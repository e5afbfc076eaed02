"""CHPK - unified API
Install once, import one namespace:

    pip install -e .

Usage:

    import chpk
    chpk.pack_files("hero/*.png", "hero.chpk")
    smile = chpk.extract_variant("hero.chpk", "smile")

Or detailed modules:

    from chpk import codec, data, metrics, viz, wf
"""

__version__ = "1.0.0"

import chpkcodec as codec
import chpkdata as data
import chpkmetrics as metrics
import chpkviz as viz
import chpkwf as wf

from chpkcodec import (
    DiffConfig,
    PixelBuffer,
    Container,
    pack_buffers,
    pack_bytes,
    unpack_bytes,
    serialize,
    deserialize,
    extract_variant,
    PackReader,
    add_variants,
    add_images,
    remove_variants,
)
from chpkdata import load_pixels, encode_pixels, resolve_inputs, scan_images
from chpkmetrics import psnr, ssim
from chpkviz import visualize_compression, visualize_variant_patches, plot_variant_sizes
from chpkwf import pack_files, unpack, atomic_write, log_append

__all__ = [
    # sub-namespaces
    "codec", "data", "metrics", "viz", "wf",
    # convenience
    "DiffConfig", "PixelBuffer", "Container",
    "pack_buffers", "pack_bytes", "unpack_bytes", "serialize", "deserialize",
    "extract_variant", "PackReader", "add_variants", "add_images", "remove_variants",
    "load_pixels", "encode_pixels", "resolve_inputs", "scan_images",
    "psnr", "ssim",
    "visualize_compression", "visualize_variant_patches", "plot_variant_sizes",
    "pack_files", "unpack", "atomic_write", "log_append",
    "__version__",
]
