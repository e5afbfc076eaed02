from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import add_diff_args, add_logging_args, exit_code_for, merge_cfg, setup_logging
from chpkwf.orchestrator import plan_pack, run_pack

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="CHPK - Pack batch : un .chpk par sous-dossier de personnage")
    p.add_argument("--root", required=True, help="Dossier racine (un sous-dossier d'images par personnage)")
    p.add_argument("--out", required=True, help="Dossier de sortie .chpk")
    p.add_argument("--manifest", default=None, help="(Optionnel) chemin du manifeste JSON (réutilisé s'il existe)")
    p.add_argument("--stats-jsonl", default=None, help="(Optionnel) JSONL stats par item")
    p.add_argument("--resume", action="store_true", help="Skip les items déjà faits et valides")
    p.add_argument("--only-plan", action="store_true", help="Créer le manifeste et s'arrêter")
    add_diff_args(p)
    add_logging_args(p)
    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    try:
        mani_path = args.manifest
        if mani_path is None or not Path(mani_path).exists():
            mani_path = plan_pack(args.root, args.out, merge_cfg(args), manifest_path=args.manifest)
        if args.only_plan:
            logging.info("Manifeste créé: %s", mani_path)
            return 0
        summary = run_pack(mani_path, resume=args.resume, stats_jsonl=args.stats_jsonl)
    except Exception as e:
        logging.exception("Échec batch %s: %s", args.root, e)
        return exit_code_for(e)
    logging.info("Terminé: %d/%d OK, %d erreurs", summary["done"], summary["total"], summary["errors"])
    return 0 if summary["errors"] == 0 else 1

if __name__ == "__main__":
    sys.exit(main())
