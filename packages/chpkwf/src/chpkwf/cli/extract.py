from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import add_logging_args, exit_code_for, setup_logging
from chpkcodec import extract_variant
from chpkdata import encode_pixels, format_for_path, to_base64
from chpkwf.api import atomic_write

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Extraction d'une variante par accès direct")
    p.add_argument("input", help="Fichier .chpk")
    p.add_argument("name", help="Nom de la variante")
    p.add_argument("-o", "--out", default=None, help="Image de sortie (format d'après le suffixe)")
    p.add_argument("--base64", action="store_true", help="Écrit une data URI PNG sur stdout")
    add_logging_args(p)
    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    if not args.out and not args.base64:
        logging.error("--out ou --base64 requis")
        return 2
    try:
        img = extract_variant(Path(args.input), args.name)
        if args.out:
            out = Path(args.out)
            atomic_write(out, encode_pixels(img, format_for_path(out)))
            logging.info("→ %s (%dx%d)", out, img.width, img.height)
        if args.base64:
            sys.stdout.write(to_base64(img) + "\n")
    except Exception as e:
        logging.exception("Échec extract '%s' depuis %s: %s", args.name, args.input, e)
        return exit_code_for(e)
    return 0

if __name__ == "__main__":
    sys.exit(main())
