from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import add_diff_args, add_logging_args, diff_config, exit_code_for, input_source, setup_logging
from chpkcodec import add_images
from chpkwf.api import load_images

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Ajoute des variantes à un .chpk existant")
    p.add_argument("pack", help="Fichier .chpk (réécrit atomiquement)")
    p.add_argument("inputs", nargs="+", help="Motif glob ou liste de fichiers")
    p.add_argument("--with-extension", action="store_true")
    add_diff_args(p)
    add_logging_args(p)
    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    try:
        cfg = diff_config(args)
        images = load_images(input_source(args.inputs), with_extension=args.with_extension)
        entries = add_images(args.pack, images, cfg)
        logging.info("→ %s: +%d variantes (%d au total)", args.pack, len(images), len(entries))
    except Exception as e:
        logging.exception("Échec add %s: %s", args.pack, e)
        return exit_code_for(e)
    return 0

if __name__ == "__main__":
    sys.exit(main())
