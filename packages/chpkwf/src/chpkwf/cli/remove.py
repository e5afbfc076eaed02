from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import add_logging_args, exit_code_for, setup_logging
from chpkcodec import remove_variants

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Retire des variantes d'un .chpk (index réécrit en place)")
    p.add_argument("pack", help="Fichier .chpk")
    p.add_argument("names", nargs="+", help="Variantes à retirer")
    add_logging_args(p)
    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    try:
        remaining = remove_variants(args.pack, args.names)
        logging.info("→ %s: %d variante(s) restante(s)", args.pack, len(remaining))
    except Exception as e:
        logging.exception("Échec remove %s: %s", args.pack, e)
        return exit_code_for(e)
    return 0

if __name__ == "__main__":
    sys.exit(main())
