from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path
from typing import Any, Dict

from .common import add_logging_args, exit_code_for, setup_logging
from chpkcodec import container_stats, deserialize, read_container
from chpkcodec.mutate import read_header
from chpkdata import encode_pixels, format_for_path
from chpkwf.api import atomic_write

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Inspection d'un .chpk (stats, figures, visualisations)")
    p.add_argument("input", help="Fichier .chpk")
    p.add_argument("--json", default=None, help="(Optionnel) stats JSON")
    p.add_argument("--plot", default=None, help="(Optionnel) histogramme PNG des tailles de variantes")
    p.add_argument("--viz", default=None, help="(Optionnel) image des régions partagées")
    p.add_argument("--viz-variant", nargs=2, metavar=("NAME", "OUT"), default=None,
                   help="(Optionnel) patches de NAME en surimpression")
    add_logging_args(p)
    return p.parse_args(argv)

def collect_stats(path: Path) -> Dict[str, Any]:
    container = deserialize(read_container(path))
    stats = container_stats(container)
    header = read_header(path)
    blocks = {e.name: e.byte_length for e in header.index}
    for row in stats["per_variant"]:
        row["block_bytes"] = blocks[row["name"]]
    stats["file_bytes"] = path.stat().st_size
    stats["base_stored_bytes"] = len(header.base_payload)
    return stats

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    path = Path(args.input)
    try:
        stats = collect_stats(path)
        logging.info("%s: %dx%dx%d, %d variantes, %d octets",
                     path, stats["width"], stats["height"], stats["channels"], stats["variants"], stats["file_bytes"])
        for row in stats["per_variant"]:
            logging.info("  %-24s patches=%-4d pixels=%-8d bloc=%d o", row["name"], row["patches"], row["pixels"], row["block_bytes"])
        if args.json:
            atomic_write(Path(args.json), json.dumps(stats, ensure_ascii=False, indent=2).encode("utf-8"))
        if args.plot:
            from chpkviz import plot_variant_sizes
            plot_variant_sizes(stats, args.plot)
            logging.info("→ figure %s", args.plot)
        if args.viz or args.viz_variant:
            from chpkviz import visualize_compression, visualize_variant_patches
            container = deserialize(read_container(path))
            if args.viz:
                out = Path(args.viz)
                atomic_write(out, encode_pixels(visualize_compression(container), format_for_path(out)))
                logging.info("→ visualisation %s", out)
            if args.viz_variant:
                name, out_s = args.viz_variant
                out = Path(out_s)
                atomic_write(out, encode_pixels(visualize_variant_patches(container, name), format_for_path(out)))
                logging.info("→ patches '%s' %s", name, out)
    except Exception as e:
        logging.exception("Échec inspect %s: %s", path, e)
        return exit_code_for(e)
    return 0

if __name__ == "__main__":
    sys.exit(main())
