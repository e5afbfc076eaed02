# packages/chpkwf/src/chpkwf/__init__.py
from __future__ import annotations

from .api import (
    ImageLoadError,
    atomic_write,
    log_append,
    chpk_name,
    load_images,
    pack_files,
    unpack,
    unpack_targets,
    encode_variant,
    variant_base64,
)
from .orchestrator import plan_pack, run_pack

__all__ = [
    "ImageLoadError",
    "atomic_write",
    "log_append",
    "chpk_name",
    "load_images",
    "pack_files",
    "unpack",
    "unpack_targets",
    "encode_variant",
    "variant_base64",
    "plan_pack",
    "run_pack",
    # on n'importe PAS le sous-module cli ici pour éviter les imports lourds au top-level
]

__version__ = "1.0.0"
