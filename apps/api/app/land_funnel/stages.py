from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from apps.api.app.config import ALL_OWNERS_MAX_LENGTH

from .io import Sheets
from .keys import BaseParcelSet, Parcel, build_base_parcels
from .logs import LogFunction, logger_log
from .owners import OwnerResolver, ResolvedParcel
from .provinces import PROVINCE_LOOKUP, ProvinceLookup
from .records import input_sheet_name, parse_input_rows, parse_results_bundle


SCOUTED = "scouted"
RETRIEVED = "retrieved"
CONTACTED = "contacted"


@dataclass(frozen=True)
class StageSpec:
    key: str
    lead_status: str
    file_stem: str
    has_owners: bool


STAGES: Tuple[StageSpec, ...] = (
    StageSpec(SCOUTED, "Scouted", "1_Scouted_Lands", False),
    StageSpec(RETRIEVED, "Retrieved", "2_Retrieved_Data", True),
    StageSpec(CONTACTED, "Contacted", "3_Contacted_Data", True),
)

STAGES_BY_KEY: Dict[str, StageSpec] = {stage.key: stage for stage in STAGES}


def resolve_stage(key: str) -> StageSpec:
    stage = STAGES_BY_KEY.get(str(key or "").strip().lower())
    if stage is None:
        valid = ", ".join(STAGES_BY_KEY)
        raise ValueError(f"Unknown stage '{key}'. Valid stages: {valid}.")
    return stage


@dataclass(frozen=True)
class FunnelOutput:
    scouted: Tuple[Parcel, ...]
    retrieved: Tuple[ResolvedParcel, ...]
    contacted: Tuple[ResolvedParcel, ...]
    duplicate_count: int = 0
    ambiguous_keys: frozenset = frozenset()

    def records(self, stage: str) -> Tuple[object, ...]:
        return getattr(self, resolve_stage(stage).key)

    def counts(self) -> Dict[str, int]:
        return {stage.key: len(self.records(stage.key)) for stage in STAGES}


def run_pipeline(
    input_sheets: Sheets,
    results_sheets: Sheets,
    log: LogFunction = logger_log,
    lookup: ProvinceLookup = PROVINCE_LOOKUP,
    max_owners_length: int = ALL_OWNERS_MAX_LENGTH,
) -> FunnelOutput:
    """Scouted -> Retrieved -> Contacted over already validated sheets."""
    log("Preparing base parcels (Scouted)...")
    input_rows = parse_input_rows(input_sheets.get(input_sheet_name(input_sheets)) or [])
    base: BaseParcelSet = build_base_parcels(input_rows, lookup=lookup, log=log)
    scouted = base.parcels
    log(f"-> Scouted stage generated with {len(scouted)} rows.", "success")

    log("Resolving owners (Retrieved)...")
    bundle = parse_results_bundle(results_sheets)
    resolver = OwnerResolver(bundle, ambiguous_keys=base.ambiguous_keys, max_owners_length=max_owners_length)
    resolved = resolver.resolve_all(scouted, log=log)
    retrieved = tuple(record for record in resolved if record.owner_count > 0)
    log(f"-> Retrieved stage generated with {len(retrieved)} rows.", "success")

    log("Matching mailing manifest (Contacted)...")
    if not bundle.mailing_keys:
        log("Mailing manifest is empty: no parcel is marked as contacted.", "warning")
    contacted = tuple(record for record in retrieved if record.parcel_id in bundle.mailing_keys)
    log(f"-> Contacted stage generated with {len(contacted)} rows.", "success")

    return FunnelOutput(
        scouted=scouted,
        retrieved=retrieved,
        contacted=contacted,
        duplicate_count=base.duplicate_count,
        ambiguous_keys=base.ambiguous_keys,
    )


def stage_summary(output: FunnelOutput) -> List[Mapping[str, object]]:
    return [
        {"stage": stage.key, "lead_status": stage.lead_status, "rows": len(output.records(stage.key))}
        for stage in STAGES
    ]
