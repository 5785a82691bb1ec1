from .errors import (
    EmptyStageError,
    LandFunnelError,
    PipelineInputError,
    SchemaValidationError,
    WorkbookDecodeError,
)
from .logs import LogEntry, RunLog
from .report import render_stage, write_funnel_reports
from .service import FunnelRun, LoadedWorkbook, load_workbook, process_workbooks, run_land_funnel
from .stages import STAGES, FunnelOutput

__all__ = [
    "EmptyStageError",
    "FunnelOutput",
    "FunnelRun",
    "LandFunnelError",
    "LoadedWorkbook",
    "LogEntry",
    "PipelineInputError",
    "RunLog",
    "STAGES",
    "SchemaValidationError",
    "WorkbookDecodeError",
    "load_workbook",
    "process_workbooks",
    "render_stage",
    "run_land_funnel",
    "write_funnel_reports",
]
