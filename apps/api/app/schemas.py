from typing import Dict, List

from pydantic import BaseModel, Field


class LogEntryModel(BaseModel):
    message: str
    type: str
    timestamp: str


class ValidationResponse(BaseModel):
    kind: str
    file_name: str
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    sheets: Dict[str, int] = Field(default_factory=dict)
    logs: List[LogEntryModel] = Field(default_factory=list)


class StageSummary(BaseModel):
    stage: str
    lead_status: str
    rows: int


class FunnelRunResponse(BaseModel):
    ok: bool
    stages: List[StageSummary] = Field(default_factory=list)
    duplicate_parcels: int = 0
    ambiguous_parcel_ids: List[str] = Field(default_factory=list)
    logs: List[LogEntryModel] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    app: str
