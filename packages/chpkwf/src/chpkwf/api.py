from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from chpkcodec import DiffConfig, InvalidVariantName, PackReader, VariantNotFound, pack_buffers, serialize
from chpkcodec.bitstream import write_container
from chpkcodec.compress import deflate_for_level
from chpkcodec.pixels import Container, PixelBuffer
from chpkdata import ImageLoadError, encode_pixels, format_for_path, load_pixels, resolve_inputs, to_base64
from chpkdata.api import InputSource

log = logging.getLogger("chpk.wf")

UnpackTarget = Union[str, Path, Mapping[str, Union[str, Path]]]


def atomic_write(path: Path | str, data: bytes) -> None:
    write_container(data, path)


def log_append(path: Path | str, msg: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    ts = time.strftime("%Y-%m-%d %H:%M:%S")
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"[{ts}] {msg}\n")


def chpk_name(character: str) -> str:
    return f"{character}.chpk"


# ---------------------------------------------------------------------------
# PACK
# ---------------------------------------------------------------------------

def load_images(
    source: InputSource,
    *,
    with_extension: bool = False,
    name_fn: Optional[Callable[[Path], str]] = None,
) -> Dict[str, PixelBuffer]:
    """Résout puis décode les entrées (RGBA) ; un échec de décodage porte son chemin."""
    paths = resolve_inputs(source, with_extension=with_extension, name_fn=name_fn)
    images: Dict[str, PixelBuffer] = {}
    for name, p in paths.items():
        images[name] = load_pixels(p)  # ImageLoadError
        log.debug("loaded '%s' <- %s", name, p)
    return images


def pack_files(
    source: InputSource,
    output: str | Path,
    cfg: Optional[DiffConfig] = None,
    *,
    with_extension: bool = False,
    name_fn: Optional[Callable[[Path], str]] = None,
) -> Container:
    """Charge les images, construit le conteneur, écrit `output` atomiquement."""
    cfg = cfg or DiffConfig()
    images = load_images(source, with_extension=with_extension, name_fn=name_fn)
    container = pack_buffers(images, cfg)
    payload = serialize(container, deflate_for_level(cfg.compress_level))
    atomic_write(output, payload)
    log.info("pack -> %s (%d variants, %d bytes)", output, len(container.variants), len(payload))
    return container


# ---------------------------------------------------------------------------
# UNPACK (répertoire | fichier + variante | mapping nom→chemin)
# ---------------------------------------------------------------------------

def _check_file_name(name: str) -> None:
    # le nom vient du conteneur : il ne doit pas sortir du dossier cible
    if name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        raise InvalidVariantName(f"variant name {name!r} cannot be used as a file name")


def unpack_targets(
    names: List[str], output: UnpackTarget, variant: Optional[str] = None
) -> List[Tuple[str, Path]]:
    """Normalise la cible de sortie en paires (variante, chemin)."""
    if isinstance(output, Mapping):
        if variant is not None:
            raise ValueError("'variant' cannot be combined with a name->path mapping")
        pairs = [(str(n), Path(p)) for n, p in output.items()]
    elif variant is not None:
        pairs = [(variant, Path(output))]
    else:
        out_dir = Path(output)
        for n in names:
            _check_file_name(n)
        pairs = [(n, out_dir / f"{n}.png") for n in names]
    for n, _ in pairs:
        if n not in names:
            raise VariantNotFound(n)
    return pairs


def encode_variant(reader: PackReader, name: str, fmt: str = "png") -> bytes:
    return encode_pixels(reader.image(name), fmt)


def variant_base64(reader: PackReader, name: str, fmt: str = "png") -> str:
    return to_base64(reader.image(name), fmt)


def unpack(input: str | Path, output: UnpackTarget, variant: Optional[str] = None) -> List[Path]:
    """
    Reconstruit des variantes sur disque. Format choisi d'après le suffixe
    (png/jpg/jpeg/webp, png sinon). Les noms sont validés avant toute écriture.
    """
    written: List[Path] = []
    with PackReader(input) as reader:
        pairs = unpack_targets(reader.names(), output, variant)
        if not isinstance(output, Mapping) and variant is None:
            Path(output).mkdir(parents=True, exist_ok=True)
        for name, path in pairs:
            atomic_write(path, encode_variant(reader, name, format_for_path(path)))
            written.append(path)
            log.debug("unpack '%s' -> %s", name, path)
    log.info("unpack %s: %d file(s)", input, len(written))
    return written


__all__ = [
    "ImageLoadError",
    "atomic_write", "log_append", "chpk_name",
    "load_images", "pack_files",
    "unpack_targets", "encode_variant", "variant_base64", "unpack",
]
