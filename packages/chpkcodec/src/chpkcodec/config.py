# packages/chpkcodec/src/chpkcodec/config.py
from __future__ import annotations
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict

__all__ = ["DiffConfig"]


@dataclass(frozen=True, slots=True)
class DiffConfig:
    """
    Configuration **publique et stable** du packer CHPK.

    Elle est consommée par `chpkcodec.diff.difference_blocks`,
    `chpkcodec.patch.diff_variant` et `chpkcodec.codec.pack_buffers`.

    Champs
    ------
    block_size : int, default=32
        Taille (carrée) des cellules de la grille de comparaison. Doit être > 0.
        Les cellules de bord sont rognées, jamais paddées.
    diff_threshold : int, default=0
        Mode par canal : un pixel diffère si `|base[c] - target[c]| > diff_threshold`
        pour au moins un canal (alpha compris). Dans [0..255].
    color_distance_threshold : float, default=0.0
        Mode euclidien RGB : un pixel diffère si `sqrt(dr²+dg²+db²) > seuil`.
        Prend le pas sur `diff_threshold` dès qu'il est > 0. Alpha exclu.
    diff_tolerance_ratio : float, default=0.0
        Une cellule est "différente" si le nombre de pixels différents dépasse
        `floor(pixels_cellule * ratio)`. 0 = mode strict. Dans [0, 1].
    compress_level : int, default=6
        Niveau DEFLATE (zlib) appliqué à la base et à chaque patch. Dans [0..9].

    Notes
    -----
    - Dataclass **immuable** : mêmes cfg ⇒ mêmes octets de conteneur.
    - Aucune conversion implicite : les bornes violées lèvent `ValueError`.
    """

    block_size: int = 32
    diff_threshold: int = 0
    color_distance_threshold: float = 0.0
    diff_tolerance_ratio: float = 0.0
    compress_level: int = 6

    def __post_init__(self) -> None:
        if int(self.block_size) <= 0:
            raise ValueError("DiffConfig.block_size must be > 0")
        if not (0 <= int(self.diff_threshold) <= 255):
            raise ValueError("DiffConfig.diff_threshold must be in [0..255]")
        if float(self.color_distance_threshold) < 0.0:
            raise ValueError("DiffConfig.color_distance_threshold must be >= 0")
        if not (0.0 <= float(self.diff_tolerance_ratio) <= 1.0):
            raise ValueError("DiffConfig.diff_tolerance_ratio must be in [0, 1]")
        if not (0 <= int(self.compress_level) <= 9):
            raise ValueError("DiffConfig.compress_level must be in [0..9]")

    @property
    def uses_color_distance(self) -> bool:
        return float(self.color_distance_threshold) > 0.0

    @property
    def strict(self) -> bool:
        return float(self.diff_tolerance_ratio) == 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_sources(cfg: Dict[str, Any] | None = None, read_env: bool = True) -> "DiffConfig":
        """Defaults ← dict `cfg` ← ENV (`CHPK_*`). Clés inconnues ignorées."""
        base: Dict[str, Any] = DiffConfig().to_dict()
        if cfg:
            base.update({k: v for k, v in cfg.items() if k in base and v is not None})
        if read_env:
            def _envf(name, cast, default):
                v = os.getenv(name)
                return cast(v) if v is not None and v.strip() != "" else default
            base["block_size"] = _envf("CHPK_BLOCK_SIZE", int, base["block_size"])
            base["diff_threshold"] = _envf("CHPK_DIFF_THRESHOLD", int, base["diff_threshold"])
            base["color_distance_threshold"] = _envf("CHPK_COLOR_DISTANCE", float, base["color_distance_threshold"])
            base["diff_tolerance_ratio"] = _envf("CHPK_TOLERANCE_RATIO", float, base["diff_tolerance_ratio"])
            base["compress_level"] = _envf("CHPK_COMPRESS_LEVEL", int, base["compress_level"])
        return DiffConfig(
            block_size=int(base["block_size"]),
            diff_threshold=int(base["diff_threshold"]),
            color_distance_threshold=float(base["color_distance_threshold"]),
            diff_tolerance_ratio=float(base["diff_tolerance_ratio"]),
            compress_level=int(base["compress_level"]),
        )
