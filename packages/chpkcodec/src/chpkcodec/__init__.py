# packages/chpkcodec/src/chpkcodec/__init__.py
from __future__ import annotations

"""CHPK - moteur diff & pack (surface publique).

Une image de base + N variantes stockées comme patches rectangulaires,
chacune lisible seule par accès direct.
"""

__version__ = "1.0.0"

from .config import DiffConfig
from .errors import (
    ChpkError,
    DimensionMismatch,
    ChannelMismatch,
    ContainerFormatError,
    MagicMismatch,
    UnsupportedVersion,
    TruncatedData,
    CorruptPayload,
    VariantNotFound,
    DuplicateVariantName,
    InvalidVariantName,
    CannotRemoveAllVariants,
    EmptyInput,
)
from .pixels import PixelBuffer, Rectangle, Patch, Variant, VariantIndexEntry, Container
from .diff import difference_blocks
from .merge import merge_rectangles
from .patch import extract_region, apply_patches, diff_variant
from .compress import DeflateCompressor, DEFLATE
from .bitstream import MAGIC, VERSION, serialize, deserialize, read_container, write_container
from .codec import pack_buffers, pack_bytes, unpack_bytes, reconstruct, container_stats
from .reader import extract_variant, PackReader
from .mutate import add_variants, add_images, remove_variants

__all__ = [
    "__version__",
    "DiffConfig",
    "ChpkError", "DimensionMismatch", "ChannelMismatch", "ContainerFormatError",
    "MagicMismatch", "UnsupportedVersion", "TruncatedData", "CorruptPayload",
    "VariantNotFound", "DuplicateVariantName", "InvalidVariantName",
    "CannotRemoveAllVariants", "EmptyInput",
    "PixelBuffer", "Rectangle", "Patch", "Variant", "VariantIndexEntry", "Container",
    "difference_blocks", "merge_rectangles",
    "extract_region", "apply_patches", "diff_variant",
    "DeflateCompressor", "DEFLATE",
    "MAGIC", "VERSION", "serialize", "deserialize", "read_container", "write_container",
    "pack_buffers", "pack_bytes", "unpack_bytes", "reconstruct", "container_stats",
    "extract_variant", "PackReader",
    "add_variants", "add_images", "remove_variants",
]
