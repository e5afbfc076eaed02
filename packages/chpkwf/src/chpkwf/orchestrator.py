from __future__ import annotations
import os, json, time, logging, hashlib, traceback
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Any, Optional

from chpkcodec import MAGIC, DiffConfig
from chpkdata import scan_images

from .api import chpk_name, pack_files

log = logging.getLogger("chpk.orchestrator")

MANIFEST_KIND = "chpk_pack_manifest_v1"

# --- Local helpers ----------------------------------------------------------

def _write_json_atomic(p: Path, obj: Any) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp, p)

def _read_json(p: Path) -> Any:
    return json.loads(p.read_text(encoding="utf-8"))

def _looks_like_chpk(p: Path) -> bool:
    try:
        with open(p, "rb") as f:
            return f.read(4) == MAGIC
    except OSError:
        return False

def _sha256(p: Path, nbytes: int = 1_048_576) -> str:
    h = hashlib.sha256()
    with open(p, "rb") as f:
        while True:
            b = f.read(nbytes)
            if not b:
                break
            h.update(b)
    return h.hexdigest()

# --- Public Orchestration API ----------------------------------------------

def plan_pack(root: str, out_dir: str, cfg: Dict[str, Any] | None = None,
              manifest_path: Optional[str] = None) -> str:
    """
    Un item par sous-dossier de `root` contenant des images (un personnage).
    Les images sont triées par nom : la première sert de base.
    """
    src = Path(root)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    cfg_obj = DiffConfig.from_sources(cfg or {})
    items: list[dict[str, Any]] = []
    for d in sorted(p for p in src.iterdir() if p.is_dir()):
        images = scan_images(d)
        if not images:
            continue
        items.append({
            "id": d.name,
            "in": [str(p) for p in images],
            "out": str(out / chpk_name(d.name)),
            "state": "todo",
        })
    if not items:
        raise RuntimeError(f"Aucun dossier d'images trouvé sous: {src}")

    mani = {
        "kind": MANIFEST_KIND,
        "run": {"start_ts": time.time()},
        "cfg": asdict(cfg_obj),
        "items": items,
    }
    if manifest_path is None:
        mdir = out.parent / "manifests"
        mdir.mkdir(parents=True, exist_ok=True)
        manifest_path = str(mdir / f"pack_{int(time.time())}.json")
    mp = Path(manifest_path)
    _write_json_atomic(mp, mani)
    log.info("plan_pack: %d item(s) -> %s", len(items), mp)
    return str(mp)

def run_pack(manifest_path: str, resume: bool = True, stats_jsonl: Optional[str] = None) -> Dict[str, Any]:
    """Exécute un manifest (mono-process, verrou fichier par item, checkpoint après chaque item)."""
    mp = Path(manifest_path)
    if not mp.exists():
        raise FileNotFoundError(f"Manifest introuvable: {mp}")
    mani = _read_json(mp)
    if mani.get("kind") != MANIFEST_KIND:
        raise ValueError(f"manifest kind inattendu: {mani.get('kind')!r}")
    cfg = DiffConfig.from_sources(mani.get("cfg", {}), read_env=False)

    stats_fp: Optional[Path] = Path(stats_jsonl) if stats_jsonl else None
    if stats_fp:
        stats_fp.parent.mkdir(parents=True, exist_ok=True)

    total = len(mani["items"]); done = 0; errors = 0; skipped = 0
    for it in mani["items"]:
        out_p = Path(it["out"])
        if resume and it.get("state") == "done" and out_p.exists() and _looks_like_chpk(out_p):
            done += 1
            continue

        lock = out_p.with_suffix(out_p.suffix + ".lock")
        out_p.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(str(lock), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            os.close(fd)
        except FileExistsError:
            log.warning("item %s verrouillé (%s), ignoré", it["id"], lock)
            skipped += 1
            continue

        try:
            it["state"] = "running"
            it["t0"] = time.time()
            container = pack_files(it["in"], out_p, cfg)
            it["state"] = "done"
            it["variants"] = len(container.variants)
            it["elapsed_s"] = time.time() - it["t0"]
            it["size"] = out_p.stat().st_size
            it["sha256"] = _sha256(out_p)
            it.pop("error", None)
            done += 1
            if stats_fp:
                with open(stats_fp, "a", encoding="utf-8") as f:
                    f.write(json.dumps({
                        "event": "pack_done",
                        "id": it["id"],
                        "out": it["out"],
                        "variants": it["variants"],
                        "size": it["size"],
                        "elapsed_s": it["elapsed_s"],
                    }, ensure_ascii=False) + "\n")
        except Exception as e:
            it["state"] = "error"
            it["error"] = f"{type(e).__name__}: {e}"
            it["traceback"] = traceback.format_exc(limit=3)
            errors += 1
            log.error("item %s: %s", it["id"], it["error"])
        finally:
            lock.unlink(missing_ok=True)
            _write_json_atomic(mp, mani)  # checkpoint après chaque item

    mani.setdefault("run", {})["end_ts"] = time.time()
    _write_json_atomic(mp, mani)
    return {"total": total, "done": done, "errors": errors, "skipped": skipped}
