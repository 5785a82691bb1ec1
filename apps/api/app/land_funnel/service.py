from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .errors import LandFunnelError, PipelineInputError, SchemaValidationError, WorkbookDecodeError
from .io import Sheets, read_workbook_sheets
from .logs import LogFunction, RunLog, logger_log
from .stages import FunnelOutput, run_pipeline
from .validation import ValidationResult, validate_input_sheets, validate_results_sheets


INPUT_KIND = "input"
RESULTS_KIND = "results"
FILE_KINDS = (INPUT_KIND, RESULTS_KIND)

PRECONDITION_MESSAGE = "Both Input and Results files must be loaded and valid before running."


@dataclass
class LoadedWorkbook:
    kind: str
    file_name: str
    sheets: Optional[Sheets] = None
    validation: ValidationResult = field(default_factory=lambda: ValidationResult(is_valid=False))
    error: Optional[LandFunnelError] = None

    @property
    def is_valid(self) -> bool:
        return self.sheets is not None and self.validation.is_valid


@dataclass
class FunnelRun:
    log: RunLog
    output: Optional[FunnelOutput] = None
    error: Optional[LandFunnelError] = None
    input_file: Optional[LoadedWorkbook] = None
    results_file: Optional[LoadedWorkbook] = None

    @property
    def ok(self) -> bool:
        return self.output is not None


def validate_sheets(kind: str, sheets: Sheets) -> ValidationResult:
    if kind == INPUT_KIND:
        return validate_input_sheets(sheets)
    if kind == RESULTS_KIND:
        return validate_results_sheets(sheets)
    raise ValueError(f"Unknown file kind '{kind}'. Valid kinds: {', '.join(FILE_KINDS)}.")


def load_workbook(kind: str, content: bytes, file_name: str, log: LogFunction = logger_log) -> LoadedWorkbook:
    """Decode and validate one uploaded file; problems become log lines, never exceptions."""
    try:
        sheets = read_workbook_sheets(content)
    except WorkbookDecodeError as exc:
        message = f"Error processing {file_name}: {exc}"
        log(message, "error")
        return LoadedWorkbook(
            kind=kind,
            file_name=file_name,
            validation=ValidationResult(is_valid=False, errors=[message]),
            error=exc,
        )

    validation = validate_sheets(kind, sheets)
    if not validation.is_valid:
        for message in validation.errors:
            log(message, "error")
        return LoadedWorkbook(
            kind=kind,
            file_name=file_name,
            validation=validation,
            error=SchemaValidationError(validation.errors),
        )

    log(f"'{file_name}' loaded and validated successfully.", "success")
    return LoadedWorkbook(kind=kind, file_name=file_name, sheets=sheets, validation=validation)


def run_land_funnel(
    input_sheets: Optional[Sheets],
    results_sheets: Optional[Sheets],
    log: LogFunction = logger_log,
) -> FunnelOutput:
    if input_sheets is None or results_sheets is None:
        raise PipelineInputError(PRECONDITION_MESSAGE)
    return run_pipeline(input_sheets, results_sheets, log=log)


def process_workbooks(
    input_content: bytes,
    results_content: bytes,
    *,
    input_name: str = "input.xlsx",
    results_name: str = "results.xlsx",
    log: Optional[RunLog] = None,
) -> FunnelRun:
    run_log = log if log is not None else RunLog()
    input_file = load_workbook(INPUT_KIND, input_content, input_name, run_log)
    results_file = load_workbook(RESULTS_KIND, results_content, results_name, run_log)
    run = FunnelRun(log=run_log, input_file=input_file, results_file=results_file)

    for loaded in (input_file, results_file):
        if loaded.error is not None:
            run_log(PRECONDITION_MESSAGE, "error")
            run.error = loaded.error
            return run

    run_log("Starting transformation process...")
    try:
        run.output = run_land_funnel(input_file.sheets, results_file.sheets, run_log)
    except LandFunnelError as exc:
        run_log(f"Transformation failed: {exc}", "error")
        run.error = exc
        return run

    run_log("Transformation complete. Output files are ready for download.", "success")
    return run
