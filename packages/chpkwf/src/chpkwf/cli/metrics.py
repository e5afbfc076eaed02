from __future__ import annotations
import argparse, csv, logging, sys
from pathlib import Path

from .common import add_logging_args, setup_logging
from chpkdata import load_pixels
from chpkmetrics import compare

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Metrics PSNR/SSIM entre images de référence et reconstructions")
    p.add_argument("--pairs", nargs="+", metavar=("REF:HAT"), help="Paires ref:recon (ex: ref.png:recon.png)")
    p.add_argument("--out-csv", required=True)
    add_logging_args(p)
    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    rows = [("ref", "hat", "psnr", "ssim", "differing_pixels")]
    failed = 0
    for pair in args.pairs or []:
        try:
            ref_s, hat_s = pair.split(":", 1)
            s = compare(load_pixels(ref_s), load_pixels(hat_s))
            rows.append((ref_s, hat_s, f"{s['psnr']:.3f}", f"{s['ssim']:.5f}", str(s["differing_pixels"])))
        except Exception as e:
            failed += 1
            logging.exception("Paire invalide '%s': %s", pair, e)

    out_csv = Path(args.out_csv); out_csv.parent.mkdir(parents=True, exist_ok=True)
    with open(out_csv, "w", newline="", encoding="utf-8") as f:
        csv.writer(f).writerows(rows)
    logging.info("→ écrit %s", out_csv)
    return 0 if failed == 0 else 1

if __name__ == "__main__":
    sys.exit(main())
