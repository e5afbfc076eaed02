# packages/chpkcodec/src/chpkcodec/errors.py
from __future__ import annotations

"""Taxonomie des erreurs CHPK.

Every failure the core raises is a `ChpkError`, which is itself a `ValueError`
so callers that only know "bad input" can keep catching `ValueError`.
I/O errors (`OSError`) are never wrapped here.
"""

__all__ = [
    "ChpkError",
    "DimensionMismatch", "ChannelMismatch",
    "ContainerFormatError", "MagicMismatch", "UnsupportedVersion",
    "TruncatedData", "CorruptPayload",
    "VariantNotFound", "DuplicateVariantName", "InvalidVariantName",
    "CannotRemoveAllVariants", "EmptyInput",
]


class ChpkError(ValueError):
    """Racine de toutes les erreurs typées du codec."""


# ----------------------------- géométrie ----------------------------------

class DimensionMismatch(ChpkError):
    """Width/height differ, or a rectangle leaves the image bounds."""


class ChannelMismatch(DimensionMismatch):
    """Channel count differs (or patch payload size disagrees with it)."""


# ----------------------------- format conteneur ---------------------------

class ContainerFormatError(ChpkError):
    """The byte stream is not a valid CHPK container."""


class MagicMismatch(ContainerFormatError):
    pass


class UnsupportedVersion(ContainerFormatError):
    def __init__(self, version: int, supported: int):
        super().__init__(f"Unsupported CHPK version {version} (this codec reads {supported})")
        self.version = version
        self.supported = supported


class TruncatedData(ContainerFormatError):
    pass


class CorruptPayload(ContainerFormatError):
    """A compressed payload failed to inflate or inflated to the wrong size."""


# ----------------------------- variantes -----------------------------------

class VariantNotFound(ChpkError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"Variant '{name}' not found in container")
        self.name = name

    def __str__(self) -> str:
        # KeyError.__str__ ajoute des guillemets autour du message
        return str(self.args[0])


class DuplicateVariantName(ChpkError):
    def __init__(self, name: str):
        super().__init__(f"Duplicate variant name '{name}'")
        self.name = name


class InvalidVariantName(ChpkError):
    pass


class CannotRemoveAllVariants(ChpkError):
    pass


class EmptyInput(ChpkError):
    pass
