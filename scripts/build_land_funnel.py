from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apps.api.app.config import LAND_OUTPUT_DIR  # noqa: E402
from apps.api.app.land_funnel import RunLog, process_workbooks, write_funnel_reports  # noqa: E402
from apps.api.app.land_funnel.stages import stage_summary  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build Scouted/Retrieved/Contacted land files and CRM imports")
    parser.add_argument("--input", required=True, help="Input register (.xlsx, sheet Hoja1 or Sheet1)")
    parser.add_argument("--results", required=True, help="Results bundle (.xlsx) from the enrichment pipeline")
    parser.add_argument("--outdir", default=LAND_OUTPUT_DIR)
    parser.add_argument("--json", action="store_true", help="Print a JSON summary instead of log lines")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input)
    results_path = Path(args.results)
    for path in (input_path, results_path):
        if not path.exists():
            parser.error(f"file not found: {path}")

    log = RunLog()
    run = process_workbooks(
        input_path.read_bytes(),
        results_path.read_bytes(),
        input_name=input_path.name,
        results_name=results_path.name,
        log=log,
    )
    written = {}
    if run.ok:
        written = write_funnel_reports(outdir=Path(args.outdir), output=run.output, log=log)

    if args.json:
        payload = {
            "ok": run.ok,
            "stages": stage_summary(run.output) if run.ok else [],
            "files": written,
            "logs": log.as_dicts(),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        for entry in log.entries:
            print(f"[{entry.type.upper():7}] {entry.message}")

    return 0 if run.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
