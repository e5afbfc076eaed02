from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from chpkcodec import DiffConfig
from chpkdata import ImageLoadError

# codes de sortie communs
EXIT_OK, EXIT_FAILURE, EXIT_BAD_INPUT = 0, 1, 2

def setup_logging(log_file: Optional[Path], verbose: bool = True) -> None:
    log_fmt = "[%(asctime)s] %(levelname)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=log_fmt, datefmt=datefmt, handlers=handlers)

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def add_logging_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--log-file", default=None)
    p.add_argument("--verbose", action="store_true")

def add_diff_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help="(Optionnel) JSON cfg (block_size/diff_threshold/...)")
    p.add_argument("--block-size", type=int)
    p.add_argument("--diff-threshold", type=int)
    p.add_argument("--color-distance", type=float)
    p.add_argument("--tolerance-ratio", type=float)
    p.add_argument("--compress-level", type=int)

def merge_cfg(args) -> Dict[str, Any]:
    """--config JSON puis surcharges des flags (les ENV CHPK_* passent après)."""
    cfg: Dict[str, Any] = {}
    if getattr(args, "config", None):
        try:
            cfg.update(json.loads(Path(args.config).read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            logging.warning("Config illisible (%s): %s", args.config, e)
    flags = {
        "block_size": args.block_size,
        "diff_threshold": args.diff_threshold,
        "color_distance_threshold": args.color_distance,
        "diff_tolerance_ratio": args.tolerance_ratio,
        "compress_level": args.compress_level,
    }
    cfg.update({k: v for k, v in flags.items() if v is not None})
    return cfg

def diff_config(args) -> DiffConfig:
    return DiffConfig.from_sources(merge_cfg(args))

def input_source(items: List[str]) -> Union[str, List[str]]:
    """Un seul argument = motif glob (ou chemin), plusieurs = liste ordonnée."""
    return items[0] if len(items) == 1 else list(items)

def exit_code_for(e: BaseException) -> int:
    # ChpkError hérite de ValueError
    if isinstance(e, (ValueError, ImageLoadError, FileNotFoundError)):
        return EXIT_BAD_INPUT
    return EXIT_FAILURE
