from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .io import Sheets, cell_text, resolve_column


INPUT_SHEET_ALIASES: Tuple[str, ...] = ("Hoja1", "Sheet1")
INPUT_REQUIRED_COLUMNS: Tuple[str, ...] = (
    "provincia",
    "comune",
    "foglio",
    "particella",
    "Area",
    "Sezione",
    "CP",
    "Parcel_ID",
)

RAW_OWNERS_SHEET = "All_Raw_Data"
NORMALIZED_OWNERS_SHEET = "Owners_Normalized"
COMPANIES_SHEET = "All_Companies_Found"
MAILING_SHEET = "Final_Mailing_By_Parcel"

RESULTS_REQUIRED_COLUMNS: Dict[str, Tuple[str, ...]] = {
    RAW_OWNERS_SHEET: ("Parcel_ID", "cf_owner", "denominazione_owner", "nome", "cognome"),
    NORMALIZED_OWNERS_SHEET: ("Parcel_ID", "owner_name", "owner_cf", "quota"),
    COMPANIES_SHEET: ("cf", "pec_email"),
}

MAILING_COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "parcel_id": ("Parcel_ID", "Elenco_Parcel_ID", "parcel id", "parcelid", "id_parcel"),
    "name": ("owner_name", "nome_owner", "denominazione", "nominativo", "name", "nome"),
    "fiscal_code": ("owner_cf", "cf_owner", "cf", "codice_fiscale", "fiscal_code"),
}

RAW_MUNICIPALITY_ALIASES: Tuple[str, ...] = (
    "comune",
    "municipality",
    "comune_immobile",
    "comune_catastale",
    "nome_comune",
)
RAW_FULL_NAME_ALIASES: Tuple[str, ...] = ("nominativo", "owner_name", "nome_completo")
RAW_CP_ALIASES: Tuple[str, ...] = ("CP",)


@dataclass(frozen=True)
class InputParcelRow:
    parcel_id: str
    provincia: str
    comune: str
    foglio: str
    particella: str
    area: str
    sezione: str
    cp: str


@dataclass(frozen=True)
class RawOwnerRow:
    parcel_id: str
    cf: str
    denominazione: str
    nome: str
    cognome: str
    full_name: str = ""
    cp: str = ""
    municipality: Optional[str] = None


@dataclass(frozen=True)
class NormalizedOwnerRow:
    parcel_id: str
    owner_name: str
    owner_cf: str
    quota: str


@dataclass(frozen=True)
class RawOwnerTable:
    rows: Tuple[RawOwnerRow, ...] = ()
    has_municipality: bool = False


@dataclass(frozen=True)
class ResultsBundle:
    raw_owners: RawOwnerTable = field(default_factory=RawOwnerTable)
    normalized_owners: Tuple[NormalizedOwnerRow, ...] = ()
    company_emails: Mapping[str, str] = field(default_factory=dict)
    mailing_keys: FrozenSet[str] = frozenset()


def fiscal_code(value: object) -> str:
    return cell_text(value).upper()


def input_sheet_name(sheets: Mapping[str, object]) -> str:
    for name in INPUT_SHEET_ALIASES:
        if name in sheets:
            return name
    return ""


def _columns(rows: Sequence[Mapping[str, object]]) -> List[str]:
    return list(rows[0].keys()) if rows else []


def parse_input_rows(rows: Sequence[Mapping[str, object]]) -> List[InputParcelRow]:
    return [
        InputParcelRow(
            parcel_id=cell_text(row.get("Parcel_ID")),
            provincia=cell_text(row.get("provincia")),
            comune=cell_text(row.get("comune")),
            foglio=cell_text(row.get("foglio")),
            particella=cell_text(row.get("particella")),
            area=cell_text(row.get("Area")),
            sezione=cell_text(row.get("Sezione")),
            cp=cell_text(row.get("CP")),
        )
        for row in rows
    ]


def parse_raw_owner_rows(rows: Sequence[Mapping[str, object]]) -> RawOwnerTable:
    columns = _columns(rows)
    municipality_col = resolve_column(columns, RAW_MUNICIPALITY_ALIASES)
    full_name_col = resolve_column(columns, RAW_FULL_NAME_ALIASES)
    cp_col = resolve_column(columns, RAW_CP_ALIASES)

    parsed: List[RawOwnerRow] = []
    for row in rows:
        parsed.append(
            RawOwnerRow(
                parcel_id=cell_text(row.get("Parcel_ID")),
                cf=fiscal_code(row.get("cf_owner")),
                denominazione=cell_text(row.get("denominazione_owner")),
                nome=cell_text(row.get("nome")),
                cognome=cell_text(row.get("cognome")),
                full_name=cell_text(row.get(full_name_col)) if full_name_col else "",
                cp=cell_text(row.get(cp_col)) if cp_col else "",
                municipality=cell_text(row.get(municipality_col)) if municipality_col else None,
            )
        )
    return RawOwnerTable(rows=tuple(parsed), has_municipality=bool(municipality_col))


def parse_normalized_owner_rows(rows: Sequence[Mapping[str, object]]) -> List[NormalizedOwnerRow]:
    return [
        NormalizedOwnerRow(
            parcel_id=cell_text(row.get("Parcel_ID")),
            owner_name=cell_text(row.get("owner_name")),
            owner_cf=fiscal_code(row.get("owner_cf")),
            quota=cell_text(row.get("quota")),
        )
        for row in rows
    ]


def parse_company_emails(rows: Sequence[Mapping[str, object]]) -> Dict[str, str]:
    emails: Dict[str, str] = {}
    for row in rows:
        cf = fiscal_code(row.get("cf"))
        email = cell_text(row.get("pec_email"))
        if not cf or not email:
            continue
        if cf not in emails:
            emails[cf] = email
    return emails


def parse_mailing_keys(rows: Sequence[Mapping[str, object]]) -> FrozenSet[str]:
    key_col = resolve_column(_columns(rows), MAILING_COLUMN_ALIASES["parcel_id"])
    if not key_col:
        return frozenset()
    keys = {cell_text(row.get(key_col)) for row in rows}
    keys.discard("")
    return frozenset(keys)


def parse_results_bundle(sheets: Sheets) -> ResultsBundle:
    return ResultsBundle(
        raw_owners=parse_raw_owner_rows(sheets.get(RAW_OWNERS_SHEET) or []),
        normalized_owners=tuple(parse_normalized_owner_rows(sheets.get(NORMALIZED_OWNERS_SHEET) or [])),
        company_emails=parse_company_emails(sheets.get(COMPANIES_SHEET) or []),
        mailing_keys=parse_mailing_keys(sheets.get(MAILING_SHEET) or []),
    )
