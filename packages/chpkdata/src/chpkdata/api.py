from __future__ import annotations
import base64
import glob
import io
from pathlib import Path
from typing import Callable, Mapping, Sequence, Union

import numpy as np
from PIL import Image

from chpkcodec.errors import DuplicateVariantName, EmptyInput
from chpkcodec.pixels import PixelBuffer

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff"}
FORMATS = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG", "webp": "WEBP"}

InputSource = Union[str, Sequence[Union[str, Path]], Mapping[str, Union[str, Path]]]


class ImageLoadError(OSError):
    """Décodage impossible ; porte le chemin fautif."""

    def __init__(self, path: str | Path, reason: str):
        super().__init__(f"cannot load image '{path}': {reason}")
        self.path = str(path)


def _from_pil(img: Image.Image) -> PixelBuffer:
    # toujours RGBA : toutes les entrées d'un pack partagent 4 canaux
    arr = np.asarray(img.convert("RGBA"), dtype=np.uint8)
    return PixelBuffer.from_array(arr)


def load_pixels(path: str | Path) -> PixelBuffer:
    try:
        with Image.open(path) as img:
            return _from_pil(img)
    except (OSError, ValueError) as e:
        raise ImageLoadError(path, str(e)) from e


def decode_pixels(data: bytes) -> PixelBuffer:
    with Image.open(io.BytesIO(data)) as img:
        return _from_pil(img)


def to_pil(buf: PixelBuffer) -> Image.Image:
    mode = "RGBA" if buf.channels == 4 else "RGB"
    return Image.fromarray(np.array(buf.as_array()), mode=mode)


def encode_pixels(buf: PixelBuffer, fmt: str = "png", *, quality: int = 90) -> bytes:
    key = fmt.lower().lstrip(".")
    if key not in FORMATS:
        raise ValueError(f"unsupported image format: {fmt!r} (expected one of png, jpeg, webp)")
    img = to_pil(buf)
    out = io.BytesIO()
    if FORMATS[key] == "JPEG":
        img.convert("RGB").save(out, format="JPEG", quality=quality)
    elif FORMATS[key] == "WEBP":
        img.save(out, format="WEBP", quality=quality)
    else:
        img.save(out, format="PNG")
    return out.getvalue()


def format_for_path(path: str | Path) -> str:
    """Format de sortie déduit du suffixe (png par défaut)."""
    suffix = Path(path).suffix.lower().lstrip(".")
    return suffix if suffix in FORMATS else "png"


def to_base64(buf: PixelBuffer, fmt: str = "png") -> str:
    mime = "jpeg" if fmt.lower() in ("jpg", "jpeg") else fmt.lower()
    payload = base64.b64encode(encode_pixels(buf, fmt)).decode("ascii")
    return f"data:image/{mime};base64,{payload}"


def scan_images(root: str | Path) -> list[Path]:
    root = Path(root)
    return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in IMAGE_EXTS)


def _default_name(path: Path, with_extension: bool) -> str:
    return path.name if with_extension else path.stem


def resolve_inputs(
    source: InputSource,
    *,
    with_extension: bool = False,
    name_fn: Callable[[Path], str] | None = None,
) -> dict[str, Path]:
    """
    Normalise les entrées d'un pack en `{nom: chemin}` ordonné.

    - `str` : motif glob (trié, pour un ordre stable) ;
    - séquence de chemins : ordre conservé ;
    - mapping nom→chemin : pris tel quel.
    Le premier élément deviendra l'image de base.
    """
    if isinstance(source, Mapping):
        out = {str(k): Path(v) for k, v in source.items()}
    else:
        if isinstance(source, (str, Path)):
            paths = [Path(p) for p in sorted(glob.glob(str(source), recursive=True))]
        else:
            paths = [Path(p) for p in source]
        out = {}
        for p in paths:
            name = name_fn(p) if name_fn is not None else _default_name(p, with_extension)
            if name in out:
                raise DuplicateVariantName(name)
            out[name] = p
    if not out:
        raise EmptyInput(f"no input images matched {source!r}")
    return out
