from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .app.container import build_container
from .app.orchestrator import Orchestrator
from .config import Config, load_config
from .types import ConfigOverrides


def _make_orchestrator(cfg: Config) -> Orchestrator:
    container = build_container("rowguard", cfg)
    return Orchestrator(container=container, cfg=cfg, logger=logging.getLogger("rowguard.main"))


def run_validation(
    input_path: Path,
    out_dir: Path,
    cfg: Config | None = None,
    rules_path: Path | None = None,
    job_id: str | None = None,
) -> int:
    orch = _make_orchestrator(cfg or Config())
    return orch.run(input_path, rules_path, out_dir, job_id)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Validate a CSV/XLSX upload against row rules")
    ap.add_argument("--input", required=True, type=Path, help="Path to the CSV or XLSX file")
    ap.add_argument("--rules", required=False, type=Path, help="Optional rules.yaml")
    ap.add_argument("--out", required=False, type=Path, default=Path("runs"), help="Output dir")
    ap.add_argument("--job-id", required=False, help="Job identifier (default: input file stem)")
    ap.add_argument("--config", required=False, type=Path, help="Optional YAML config file")
    ap.add_argument("--batch-size", required=False, type=int, help="Rows per batch")
    ap.add_argument(
        "--threshold",
        required=False,
        type=float,
        help="Stop once the error rate exceeds this percentage (default from config)",
    )
    ap.add_argument("--preview-rows", required=False, type=int, help="Rows kept in the preview")
    ap.add_argument(
        "--max-errors", required=False, type=int, help="Max errors to echo in the log"
    )
    args = ap.parse_args(argv)

    overrides: ConfigOverrides = {}
    if args.batch_size is not None:
        overrides["batch_size"] = int(args.batch_size)
    if args.threshold is not None:
        overrides["stop_on_error_threshold"] = float(args.threshold)
    if args.preview_rows is not None:
        overrides["max_preview_rows"] = int(args.preview_rows)
    if args.max_errors is not None:
        overrides["max_errors"] = int(args.max_errors)
    cfg = load_config(args.config, overrides=overrides)

    try:
        return run_validation(args.input, args.out, cfg, args.rules, args.job_id)
    except Exception as exc:  # pragma: no cover
        logging.basicConfig(level=logging.ERROR)
        logging.exception("Unhandled exception: %s", exc)
        return 3


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
