from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple

from .errors import EmptyStageError
from .formatter import StageRef, crm_table, verification_table
from .io import write_delimited_bytes, write_workbook_bytes
from .logs import LogFunction, logger_log
from .stages import STAGES, FunnelOutput, StageSpec, resolve_stage


SHAPE_XLSX = "xlsx"
SHAPE_CSV = "csv"
SHAPES: Tuple[str, ...] = (SHAPE_XLSX, SHAPE_CSV)

MEDIA_TYPES: Dict[str, str] = {
    SHAPE_XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    SHAPE_CSV: "text/csv; charset=utf-8",
}


def _stage(stage: StageRef) -> StageSpec:
    return stage if isinstance(stage, StageSpec) else resolve_stage(stage)


def stage_file_name(stage: StageRef, shape: str) -> str:
    spec = _stage(stage)
    if shape == SHAPE_XLSX:
        return f"{spec.file_stem}.xlsx"
    if shape == SHAPE_CSV:
        return f"{spec.file_stem}_CRM.csv"
    raise ValueError(f"Unknown output shape '{shape}'. Valid shapes: {', '.join(SHAPES)}.")


def render_stage(output: FunnelOutput, stage: StageRef, shape: str) -> Tuple[str, bytes]:
    """Encode one stage as ``(file name, payload)``; empty stages are refused."""
    spec = _stage(stage)
    file_name = stage_file_name(spec, shape)
    if not output.records(spec.key):
        raise EmptyStageError(f"No data available to download for {file_name}.")
    if shape == SHAPE_XLSX:
        headers, rows = verification_table(output, spec)
        return file_name, write_workbook_bytes(headers, rows)
    headers, rows = crm_table(output, spec)
    return file_name, write_delimited_bytes(headers, rows)


def write_funnel_reports(
    *,
    outdir: Path,
    output: FunnelOutput,
    log: LogFunction = logger_log,
) -> Dict[str, str]:
    outdir.mkdir(parents=True, exist_ok=True)
    written: Dict[str, str] = {}
    for spec in STAGES:
        for shape in SHAPES:
            try:
                file_name, payload = render_stage(output, spec, shape)
            except EmptyStageError as exc:
                log(str(exc), "error")
                continue
            path = outdir / file_name
            path.write_bytes(payload)
            written[f"{spec.key}_{shape}"] = str(path)
            log(f"{file_name} written.", "success")
    return written
