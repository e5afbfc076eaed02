from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import add_logging_args, exit_code_for, setup_logging
from chpkwf.api import unpack

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Unpack .chpk -> images")
    p.add_argument("input", help="Fichier .chpk")
    p.add_argument("-o", "--out", default=None, help="Dossier (toutes les variantes) ou fichier (avec --variant)")
    p.add_argument("--variant", default=None, help="Une seule variante vers --out")
    p.add_argument("--map", nargs="+", metavar="NAME=PATH", default=None, help="Paires variante=chemin")
    add_logging_args(p)
    return p.parse_args(argv)

def _parse_map(items):
    mapping = {}
    for item in items:
        name, sep, path = item.partition("=")
        if not sep or not name or not path:
            raise ValueError(f"--map attend NAME=PATH, reçu {item!r}")
        mapping[name] = path
    return mapping

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    try:
        if args.map:
            target = _parse_map(args.map)
        elif args.out:
            target = args.out
        else:
            logging.error("--out ou --map requis")
            return 2
        written = unpack(args.input, target, variant=args.variant)
        for p in written:
            logging.info("→ %s", p)
    except Exception as e:
        logging.exception("Échec unpack %s: %s", args.input, e)
        return exit_code_for(e)
    return 0

if __name__ == "__main__":
    sys.exit(main())
