from __future__ import annotations

import asyncio
from typing import Dict, List

from fastapi import APIRouter, File, HTTPException, Path, Query, UploadFile
from fastapi.responses import Response

from apps.api.app.config import MAX_UPLOAD_MB
from apps.api.app.land_funnel import (
    EmptyStageError,
    LandFunnelError,
    RunLog,
    SchemaValidationError,
    load_workbook,
    process_workbooks,
    render_stage,
)
from apps.api.app.land_funnel.report import MEDIA_TYPES
from apps.api.app.land_funnel.service import FunnelRun
from apps.api.app.land_funnel.stages import stage_summary
from apps.api.app.schemas import FunnelRunResponse, ValidationResponse


router = APIRouter(prefix="/funnel", tags=["land-funnel"])


async def _read_upload(upload: UploadFile) -> bytes:
    content = await upload.read()
    if len(content) > MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"{upload.filename} exceeds {MAX_UPLOAD_MB} MB")
    return content


def status_for_error(exc: LandFunnelError) -> int:
    if isinstance(exc, SchemaValidationError):
        return 422
    if isinstance(exc, EmptyStageError):
        return 404
    return 400


def _http_error(exc: LandFunnelError, logs: List[Dict[str, str]]) -> HTTPException:
    return HTTPException(status_code=status_for_error(exc), detail={"message": str(exc), "logs": logs})


async def _run(input_file: UploadFile, results_file: UploadFile) -> FunnelRun:
    input_content = await _read_upload(input_file)
    results_content = await _read_upload(results_file)
    run = await asyncio.to_thread(
        process_workbooks,
        input_content,
        results_content,
        input_name=input_file.filename or "input.xlsx",
        results_name=results_file.filename or "results.xlsx",
    )
    if not run.ok:
        raise _http_error(run.error or LandFunnelError("Transformation failed"), run.log.as_dicts())
    return run


@router.post("/validate/{kind}", response_model=ValidationResponse)
async def validate_file(
    kind: str = Path(..., pattern="^(input|results)$"),
    file: UploadFile = File(...),
):
    content = await _read_upload(file)
    log = RunLog()
    loaded = await asyncio.to_thread(load_workbook, kind, content, file.filename or f"{kind}.xlsx", log)
    return {
        "kind": kind,
        "file_name": loaded.file_name,
        "is_valid": loaded.is_valid,
        "errors": loaded.validation.errors,
        "sheets": {name: len(rows) for name, rows in (loaded.sheets or {}).items()},
        "logs": log.as_dicts(),
    }


@router.post("/run", response_model=FunnelRunResponse)
async def run_funnel(
    input_file: UploadFile = File(...),
    results_file: UploadFile = File(...),
):
    run = await _run(input_file, results_file)
    return {
        "ok": True,
        "stages": stage_summary(run.output),
        "duplicate_parcels": run.output.duplicate_count,
        "ambiguous_parcel_ids": sorted(run.output.ambiguous_keys),
        "logs": run.log.as_dicts(),
    }


@router.post("/export/{stage}")
async def export_stage(
    stage: str = Path(..., pattern="^(scouted|retrieved|contacted)$"),
    shape: str = Query(default="xlsx", pattern="^(xlsx|csv)$"),
    input_file: UploadFile = File(...),
    results_file: UploadFile = File(...),
):
    run = await _run(input_file, results_file)
    try:
        file_name, payload = render_stage(run.output, stage, shape)
    except LandFunnelError as exc:
        run.log(str(exc), "error")
        raise _http_error(exc, run.log.as_dicts()) from exc
    return Response(
        content=payload,
        media_type=MEDIA_TYPES[shape],
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
