from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import add_diff_args, add_logging_args, diff_config, exit_code_for, input_source, setup_logging
from chpkcodec import extract_variant
from chpkmetrics import compare
from chpkwf.api import load_images, pack_files

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Pack N images (même géométrie) en un .chpk")
    p.add_argument("inputs", nargs="+", help="Motif glob ou liste de fichiers (le premier = base)")
    p.add_argument("-o", "--out", required=True, help="Fichier .chpk de sortie")
    p.add_argument("--with-extension", action="store_true", help="Nom de variante = nom de fichier complet")
    p.add_argument("--verify", action="store_true", help="Relit chaque variante et vérifie la reconstruction exacte")
    add_diff_args(p)
    add_logging_args(p)
    return p.parse_args(argv)

def verify(out: Path, source, with_extension: bool) -> int:
    """Reconstruction exacte attendue pour chaque variante ; PSNR loggé."""
    bad = 0
    for name, img in load_images(source, with_extension=with_extension).items():
        scores = compare(img, extract_variant(out, name))
        if scores["exact"]:
            logging.info("verify '%s': OK (psnr=%.2f dB)", name, scores["psnr"])
        else:
            bad += 1
            logging.error("verify '%s': %d pixel(s) différents (psnr=%.2f dB)", name, scores["differing_pixels"], scores["psnr"])
    return bad

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    source = input_source(args.inputs)
    out = Path(args.out)
    try:
        cfg = diff_config(args)
        container = pack_files(source, out, cfg, with_extension=args.with_extension)
        logging.info("→ %s: %d variantes, %d octets", out, len(container.variants), out.stat().st_size)
        if args.verify and verify(out, source, args.with_extension):
            return 1
    except Exception as e:
        logging.exception("Échec pack %s: %s", out, e)
        return exit_code_for(e)
    return 0

if __name__ == "__main__":
    sys.exit(main())
