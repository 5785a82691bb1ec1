from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from apps.api.app.utils.names import compact_upper

from .io import safe_float
from .logs import LogFunction, logger_log
from .provinces import PROVINCE_LOOKUP, ProvinceLookup
from .records import InputParcelRow


EMPTY_SECTION = "X"
SHEET_WIDTH = 4
PARCEL_WIDTH = 5
INTEGRAL_RE = re.compile(r"^\d+(?:\.0+)?$")


@dataclass(frozen=True)
class Parcel:
    parcel_id: str
    province_raw: str
    province_code: str
    province_name: str
    region: str
    municipality: str
    section: str
    sheet: str
    parcel: str
    area: str
    area_ha: Optional[float]
    cp: str
    external_id: str

    @property
    def municipality_key(self) -> str:
        return compact_upper(self.municipality)


@dataclass(frozen=True)
class BaseParcelSet:
    parcels: Tuple[Parcel, ...]
    duplicate_count: int
    ambiguous_keys: FrozenSet[str]
    skipped_blank_keys: int = 0


def pad_number(value: str, width: int) -> str:
    text = str(value or "").strip()
    if INTEGRAL_RE.match(text):
        return str(int(text.split(".")[0])).zfill(width)
    return text.rjust(width, "0")


def normalize_section(value: str) -> str:
    return str(value or "").strip() or EMPTY_SECTION


def compose_external_id(province_code: str, municipality: str, section: str, sheet: str, parcel: str) -> str:
    """``PC-MUNICIPALITY-S-0042-00007`` from raw spatial attributes."""
    return "-".join(
        (
            province_code,
            compact_upper(municipality),
            normalize_section(section),
            pad_number(sheet, SHEET_WIDTH),
            pad_number(parcel, PARCEL_WIDTH),
        )
    )


def parcel_from_row(row: InputParcelRow, lookup: ProvinceLookup = PROVINCE_LOOKUP) -> Parcel:
    province = lookup.resolve(row.provincia)
    return Parcel(
        parcel_id=row.parcel_id,
        province_raw=row.provincia,
        province_code=province.code,
        province_name=province.name,
        region=province.region,
        municipality=row.comune,
        section=row.sezione,
        sheet=row.foglio,
        parcel=row.particella,
        area=row.area,
        area_ha=safe_float(row.area, None),
        cp=row.cp,
        external_id=compose_external_id(province.code, row.comune, row.sezione, row.foglio, row.particella),
    )


def build_base_parcels(
    rows: Sequence[InputParcelRow],
    lookup: ProvinceLookup = PROVINCE_LOOKUP,
    log: LogFunction = logger_log,
) -> BaseParcelSet:
    parcels: List[Parcel] = []
    seen_ids: Set[str] = set()
    ids_by_key: Dict[str, Set[str]] = defaultdict(set)
    duplicates = 0
    blank = 0

    for row in rows:
        if not row.parcel_id:
            blank += 1
            continue
        parcel = parcel_from_row(row, lookup)
        ids_by_key[parcel.parcel_id].add(parcel.external_id)
        if parcel.external_id in seen_ids:
            duplicates += 1
            continue
        seen_ids.add(parcel.external_id)
        parcels.append(parcel)

    ambiguous = frozenset(key for key, ids in ids_by_key.items() if len(ids) > 1)

    if blank:
        log(f"Skipped {blank} input rows without Parcel_ID.", "warning")
    if duplicates:
        log(f"Removed {duplicates} duplicate parcels (same Land External ID).", "warning")
    if ambiguous:
        sample = ", ".join(sorted(ambiguous)[:10])
        log(
            f"{len(ambiguous)} Parcel_ID values map to more than one physical parcel; "
            f"owners for these are matched by municipality only ({sample}).",
            "warning",
        )
    return BaseParcelSet(
        parcels=tuple(parcels),
        duplicate_count=duplicates,
        ambiguous_keys=ambiguous,
        skipped_blank_keys=blank,
    )
