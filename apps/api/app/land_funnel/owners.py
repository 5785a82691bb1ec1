from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from apps.api.app.config import ALL_OWNERS_MAX_LENGTH
from apps.api.app.utils.names import clean_owner_name, collapse_spaces, compact_upper

from .io import cell_text
from .keys import Parcel
from .logs import LogFunction, logger_log
from .records import NormalizedOwnerRow, RawOwnerRow, ResultsBundle


MISSING_MARK = "N/A"
ELLIPSIS = "..."


@dataclass(frozen=True)
class ResolvedParcel:
    parcel: Parcel
    main_owner_name: str = ""
    main_owner_last_name: str = ""
    fiscal_code: str = ""
    email: str = ""
    cp: str = ""
    owner_count: int = 0
    all_owners: str = ""

    @property
    def parcel_id(self) -> str:
        return self.parcel.parcel_id

    @property
    def external_id(self) -> str:
        return self.parcel.external_id


def is_company_cf(cf: str) -> bool:
    """Italian companies carry an 11-digit VAT-style code; people an alphanumeric one."""
    text = str(cf or "").strip()
    return bool(text) and text[0].isdigit()


def _to_float(text: str) -> Optional[float]:
    try:
        value = float(text.strip().replace(",", "."))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_quota(value: object) -> float:
    text = cell_text(value)
    if not text:
        return 0.0
    if "/" in text:
        numerator, _, denominator = text.partition("/")
        num = _to_float(numerator)
        den = _to_float(denominator)
        if num is None or not den:
            return 0.0
        return num / den
    parsed = _to_float(text)
    return parsed if parsed is not None else 0.0


def bounded_join(entries: Iterable[str], max_length: int) -> str:
    current = ""
    for entry in entries:
        separator = ", " if current else ""
        if len(current) + len(separator) + len(entry) > max_length:
            if not current:
                current = entry[: max_length - len(ELLIPSIS)] + ELLIPSIS
            else:
                current += ", " + ELLIPSIS
            break
        current += separator + entry
    return current


def raw_display_name(row: RawOwnerRow) -> str:
    denominazione = clean_owner_name(row.denominazione)
    if denominazione:
        return denominazione
    composed = collapse_spaces(f"{clean_owner_name(row.nome)} {clean_owner_name(row.cognome)}")
    return composed or clean_owner_name(row.full_name)


def split_person_name(row: RawOwnerRow) -> Optional[Tuple[str, str]]:
    last = clean_owner_name(row.cognome)
    if not last:
        return None
    return clean_owner_name(row.nome), last


def raw_owner_names(row: RawOwnerRow) -> Tuple[str, str]:
    person = split_person_name(row)
    if person is not None:
        return person
    fallback = clean_owner_name(row.denominazione) or clean_owner_name(row.full_name)
    return "", fallback or clean_owner_name(row.nome)


def _normalized_entries(rows: Sequence[NormalizedOwnerRow]) -> List[str]:
    seen: Set[Tuple[str, str, str]] = set()
    entries: List[str] = []
    for row in rows:
        name = clean_owner_name(row.owner_name)
        cf = row.owner_cf
        quota = row.quota.strip()
        key = (name, cf, quota)
        if not (name or cf) or key in seen:
            continue
        seen.add(key)
        entries.append(f"{name} [{cf or MISSING_MARK}, {quota or MISSING_MARK}]".strip())
    return entries


def _raw_entries(rows: Sequence[RawOwnerRow]) -> List[str]:
    seen: Set[Tuple[str, str]] = set()
    entries: List[str] = []
    for row in rows:
        name = raw_display_name(row)
        key = (name, row.cf)
        if not (name or row.cf) or key in seen:
            continue
        seen.add(key)
        entries.append(f"{name} [{row.cf or MISSING_MARK}]".strip())
    return entries


def _group_by_parcel(rows: Iterable) -> Dict[str, list]:
    grouped: Dict[str, list] = defaultdict(list)
    for row in rows:
        if row.parcel_id:
            grouped[row.parcel_id].append(row)
    return dict(grouped)


class OwnerResolver:
    """Picks one main owner per parcel and summarises all co-owners.

    Raw candidates are narrowed by municipality and by the company-first
    rule; the normalized owner table, restricted to the surviving fiscal
    codes, decides the main owner by highest quota.
    """

    def __init__(
        self,
        bundle: ResultsBundle,
        ambiguous_keys: AbstractSet[str] = frozenset(),
        max_owners_length: int = ALL_OWNERS_MAX_LENGTH,
    ):
        self._raw_by_key: Mapping[str, List[RawOwnerRow]] = _group_by_parcel(bundle.raw_owners.rows)
        self._normalized_by_key: Mapping[str, List[NormalizedOwnerRow]] = _group_by_parcel(
            bundle.normalized_owners
        )
        self._has_municipality = bundle.raw_owners.has_municipality
        self._company_emails = bundle.company_emails
        self._ambiguous_keys = frozenset(ambiguous_keys)
        self._max_owners_length = max_owners_length

    def candidates_for(self, parcel: Parcel) -> List[RawOwnerRow]:
        candidates = list(self._raw_by_key.get(parcel.parcel_id, []))
        if not candidates:
            return []

        if self._has_municipality:
            target = parcel.municipality_key
            filtered = [row for row in candidates if target in compact_upper(row.municipality or "")]
            if filtered or parcel.parcel_id in self._ambiguous_keys:
                candidates = filtered

        if any(is_company_cf(row.cf) for row in candidates):
            candidates = [row for row in candidates if is_company_cf(row.cf)]
        return candidates

    def resolve(self, parcel: Parcel) -> ResolvedParcel:
        survivors = self.candidates_for(parcel)
        if not survivors:
            return ResolvedParcel(parcel=parcel, cp=parcel.cp)

        valid_cfs = {row.cf for row in survivors if row.cf}
        cp = next((row.cp for row in survivors if row.cp), "") or parcel.cp
        provisional = survivors[0]

        normalized = [
            row for row in self._normalized_by_key.get(parcel.parcel_id, []) if row.owner_cf in valid_cfs
        ]
        main_normalized: Optional[NormalizedOwnerRow] = None
        best_quota = 0.0
        for row in normalized:
            quota = parse_quota(row.quota)
            if main_normalized is None or quota > best_quota:
                main_normalized = row
                best_quota = quota

        if main_normalized is not None:
            fiscal_code = main_normalized.owner_cf
            match = next((row for row in survivors if row.cf == fiscal_code), None)
            person = split_person_name(match) if match is not None else None
            if person is not None:
                first_name, last_name = person
            else:
                first_name = ""
                last_name = clean_owner_name(main_normalized.owner_name)
                if not last_name and match is not None:
                    last_name = raw_display_name(match)
        else:
            fiscal_code = provisional.cf
            first_name, last_name = raw_owner_names(provisional)

        entries = _normalized_entries(normalized)
        if not entries:
            entries = _raw_entries(survivors)

        return ResolvedParcel(
            parcel=parcel,
            main_owner_name=first_name,
            main_owner_last_name=last_name,
            fiscal_code=fiscal_code,
            email=self._company_emails.get(fiscal_code, "") if fiscal_code else "",
            cp=cp,
            owner_count=len(entries),
            all_owners=bounded_join(entries, self._max_owners_length),
        )

    def resolve_all(self, parcels: Sequence[Parcel], log: LogFunction = logger_log) -> List[ResolvedParcel]:
        resolved = [self.resolve(parcel) for parcel in parcels]
        without_owner = [record for record in resolved if record.owner_count == 0]
        log(f"Resolved owners for {len(resolved) - len(without_owner)} of {len(resolved)} parcels.")
        if without_owner:
            log(f"{len(without_owner)} parcels have no owner data and are left out of Retrieved.", "warning")
        blocked = sorted({r.parcel_id for r in without_owner if r.parcel_id in self._ambiguous_keys})
        if blocked:
            log(
                "No owner matched the municipality for ambiguous Parcel_ID values: "
                + ", ".join(blocked[:10])
                + (" ..." if len(blocked) > 10 else ""),
                "warning",
            )
        return resolved
