from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple, Union

from apps.api.app.config import CRM_PLACEHOLDER_LAST_NAME

from .keys import Parcel, compose_external_id
from .owners import ResolvedParcel
from .stages import RETRIEVED, SCOUTED, FunnelOutput, StageSpec, resolve_stage


FIRST_NAME_LIMIT = 40
LAST_NAME_LIMIT = 80
ALL_OWNERS_LIMIT = 255

CRM_HEADERS: Tuple[str, ...] = (
    "Land External ID",
    "Lead Status",
    "Land Province",
    "Land Region",
    "Municipality",
    "Sezione",
    "Foglio",
    "Particella",
    "Cadastral Area (Ha)",
    "Main Owner Name",
    "Main Owner Last Name",
    "Email",
    "Fiscal Code",
    "CP",
    "Has Various Owners",
    "Number of Owners",
    "All Owners",
)

PARCEL_VERIFICATION_HEADERS: Tuple[str, ...] = (
    "Parcel_ID",
    "Land External ID",
    "Province",
    "Region",
    "Municipality",
    "Section",
    "Sheet",
    "Parcel",
    "Catastral Area (Ha)",
    "CP",
)

OWNER_VERIFICATION_HEADERS: Tuple[str, ...] = PARCEL_VERIFICATION_HEADERS + (
    "Main Owner Name",
    "Main Owner Last Name",
    "Fiscal Code",
    "Email",
    "Number of Owners",
    "All Owners",
)

StageRecord = Union[Parcel, ResolvedParcel]
StageRef = Union[str, StageSpec]

_WHITESPACE_RE = re.compile(r"\s+")


def _stage(stage: StageRef) -> StageSpec:
    return stage if isinstance(stage, StageSpec) else resolve_stage(stage)


def sanitize(value: object) -> str:
    """One-line text: newlines, tabs and runs of spaces collapse to a single space."""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def truncate(value: str, limit: int) -> str:
    return value[:limit]


def format_area(parcel: Parcel) -> str:
    if parcel.area_ha is None:
        return parcel.area
    text = ("%.10f" % parcel.area_ha).rstrip("0").rstrip(".")
    return text.replace(".", ",")


def _split(record: StageRecord) -> Tuple[Parcel, Optional[ResolvedParcel]]:
    if isinstance(record, ResolvedParcel):
        return record.parcel, record
    return record, None


def verification_headers(stage: StageRef) -> Tuple[str, ...]:
    return OWNER_VERIFICATION_HEADERS if _stage(stage).has_owners else PARCEL_VERIFICATION_HEADERS


def to_verification_row(record: StageRecord, stage: StageRef) -> Dict[str, object]:
    parcel, owner = _split(record)
    row: Dict[str, object] = {
        "Parcel_ID": parcel.parcel_id,
        "Land External ID": parcel.external_id,
        "Province": parcel.province_name or parcel.province_raw,
        "Region": parcel.region,
        "Municipality": parcel.municipality,
        "Section": parcel.section,
        "Sheet": parcel.sheet,
        "Parcel": parcel.parcel,
        "Catastral Area (Ha)": parcel.area,
        "CP": owner.cp if owner is not None else parcel.cp,
    }
    if _stage(stage).has_owners:
        row.update(
            {
                "Main Owner Name": owner.main_owner_name if owner else "",
                "Main Owner Last Name": owner.main_owner_last_name if owner else "",
                "Fiscal Code": owner.fiscal_code if owner else "",
                "Email": owner.email if owner else "",
                "Number of Owners": owner.owner_count if owner else 0,
                "All Owners": owner.all_owners if owner else "",
            }
        )
    return {key: ("" if value is None else value) for key, value in row.items()}


def map_to_csv_row(record: StageRecord, stage: StageRef) -> Dict[str, str]:
    spec = _stage(stage)
    parcel, owner = _split(record)
    external_id = compose_external_id(
        parcel.province_code,
        parcel.municipality,
        parcel.section,
        parcel.sheet,
        parcel.parcel,
    )

    if spec.key == SCOUTED:
        owner = None
        first_name, last_name = "", CRM_PLACEHOLDER_LAST_NAME
    else:
        first_name = owner.main_owner_name if owner else ""
        last_name = owner.main_owner_last_name if owner else ""
        if spec.key == RETRIEVED and not sanitize(last_name):
            last_name = f"Unknown {external_id}"

    owner_count = owner.owner_count if owner else 0
    row = {
        "Land External ID": external_id,
        "Lead Status": spec.lead_status,
        "Land Province": parcel.province_name or parcel.province_code,
        "Land Region": parcel.region,
        "Municipality": parcel.municipality,
        "Sezione": parcel.section,
        "Foglio": parcel.sheet,
        "Particella": parcel.parcel,
        "Cadastral Area (Ha)": format_area(parcel),
        "Main Owner Name": first_name,
        "Main Owner Last Name": last_name,
        "Email": owner.email if owner else "",
        "Fiscal Code": owner.fiscal_code if owner else "",
        "CP": owner.cp if owner else parcel.cp,
        "Has Various Owners": "TRUE" if owner_count > 1 else "FALSE",
        "Number of Owners": str(owner_count),
        "All Owners": owner.all_owners if owner else "",
    }
    clean = {key: sanitize(value) for key, value in row.items()}
    clean["Main Owner Name"] = truncate(clean["Main Owner Name"], FIRST_NAME_LIMIT)
    clean["Main Owner Last Name"] = truncate(clean["Main Owner Last Name"], LAST_NAME_LIMIT)
    clean["All Owners"] = truncate(clean["All Owners"], ALL_OWNERS_LIMIT)
    return clean


def verification_table(output: FunnelOutput, stage: StageRef) -> Tuple[Sequence[str], List[Dict[str, object]]]:
    spec = _stage(stage)
    rows = [to_verification_row(record, spec) for record in output.records(spec.key)]
    return verification_headers(spec), rows


def crm_table(output: FunnelOutput, stage: StageRef) -> Tuple[Sequence[str], List[Dict[str, str]]]:
    spec = _stage(stage)
    rows = [map_to_csv_row(record, spec) for record in output.records(spec.key)]
    return CRM_HEADERS, rows
