# packages/chpkcodec/src/chpkcodec/pixels.py
from __future__ import annotations

"""
Modèle de données partagé (pixel buffers, rectangles, patches, conteneur).

All types are plain dataclasses. `PixelBuffer.data` is immutable `bytes`:
reconstruction always works on a fresh copy, so a buffer handed to the
differencer or the applier is never mutated.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np

from .errors import ChannelMismatch, DimensionMismatch, DuplicateVariantName, InvalidVariantName, VariantNotFound

__all__ = [
    "SUPPORTED_CHANNELS",
    "PixelBuffer", "Rectangle", "Patch", "Variant", "Container", "VariantIndexEntry",
]

SUPPORTED_CHANNELS = (3, 4)  # RGB, RGBA


@dataclass(frozen=True)
class PixelBuffer:
    """Raw interleaved 8-bit image, row-major, `channels` bytes per pixel."""
    width: int
    height: int
    channels: int
    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise DimensionMismatch(f"PixelBuffer must be non-empty (got {self.width}x{self.height})")
        if self.channels not in SUPPORTED_CHANNELS:
            raise ChannelMismatch(f"PixelBuffer.channels must be 3 or 4 (got {self.channels})")
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        expected = self.width * self.height * self.channels
        if len(self.data) != expected:
            raise DimensionMismatch(
                f"PixelBuffer data has {len(self.data)} bytes, expected {expected} "
                f"({self.width}x{self.height}x{self.channels})"
            )

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.height, self.width, self.channels

    def as_array(self) -> np.ndarray:
        """Vue numpy (H, W, C) uint8 en lecture seule (pas de copie)."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.shape)

    @staticmethod
    def from_array(arr: np.ndarray) -> "PixelBuffer":
        if arr.ndim != 3:
            raise DimensionMismatch(f"expected (H, W, C) array, got shape {arr.shape}")
        h, w, c = arr.shape
        return PixelBuffer(width=int(w), height=int(h), channels=int(c),
                           data=np.ascontiguousarray(arr, dtype=np.uint8).tobytes())

    def same_geometry(self, other: "PixelBuffer") -> bool:
        return (self.width, self.height, self.channels) == (other.width, other.height, other.channels)


@dataclass(frozen=True, order=True)
class Rectangle:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def fits(self, width: int, height: int) -> bool:
        return (self.x >= 0 and self.y >= 0 and self.width > 0 and self.height > 0
                and self.right <= width and self.bottom <= height)

    def overlaps(self, other: "Rectangle") -> bool:
        return (self.x < other.right and other.x < self.right
                and self.y < other.bottom and other.y < self.bottom)

    def union(self, other: "Rectangle") -> "Rectangle":
        x0, y0 = min(self.x, other.x), min(self.y, other.y)
        x1, y1 = max(self.right, other.right), max(self.bottom, other.bottom)
        return Rectangle(x0, y0, x1 - x0, y1 - y0)


@dataclass(eq=True)
class Patch:
    rect: Rectangle
    data: bytes = field(default_factory=bytes, repr=False)


@dataclass(eq=True)
class Variant:
    name: str
    patches: List[Patch] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidVariantName("variant name must be a non-empty string")

    @property
    def payload_bytes(self) -> int:
        return sum(len(p.data) for p in self.patches)


@dataclass(frozen=True)
class VariantIndexEntry:
    name: str
    byte_offset: int
    byte_length: int

    @property
    def end(self) -> int:
        return self.byte_offset + self.byte_length


@dataclass
class Container:
    """Conteneur en mémoire : image de base + variantes (ordre d'insertion)."""
    version: int
    width: int
    height: int
    channels: int
    base_image: PixelBuffer
    variants: List[Variant] = field(default_factory=list)

    def __post_init__(self) -> None:
        if (self.base_image.width, self.base_image.height) != (self.width, self.height):
            raise DimensionMismatch("base image size does not match container size")
        if self.base_image.channels != self.channels:
            raise ChannelMismatch("base image channels do not match container channels")
        seen = set()
        for v in self.variants:
            if v.name in seen:
                raise DuplicateVariantName(v.name)
            seen.add(v.name)
            for p in v.patches:
                if not p.rect.fits(self.width, self.height):
                    raise DimensionMismatch(f"patch {p.rect} of '{v.name}' is outside {self.width}x{self.height}")

    def names(self) -> List[str]:
        return [v.name for v in self.variants]

    def variant(self, name: str) -> Variant:
        for v in self.variants:
            if v.name == name:
                return v
        raise VariantNotFound(name)

    def as_dict(self) -> Dict[str, Variant]:
        return {v.name: v for v in self.variants}
