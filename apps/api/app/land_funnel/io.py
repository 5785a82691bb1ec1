from __future__ import annotations

import csv
import io
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .errors import WorkbookDecodeError


Sheets = Dict[str, List[Dict[str, object]]]

UTF8_BOM = "\ufeff"


def cell_text(value: object) -> str:
    """Spreadsheet cell -> stripped text; integral floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value).strip()


def safe_float(value: object, default: Optional[float] = 0.0) -> Optional[float]:
    raw = cell_text(value)
    if not raw:
        return default
    raw = raw.replace(",", ".")
    try:
        return float(raw)
    except ValueError:
        return default


def resolve_column(columns: Iterable[str], candidates: Sequence[str]) -> str:
    """First column matching one of ``candidates`` case-insensitively, or ``""``."""
    by_lower: Dict[str, str] = {}
    for column in columns:
        by_lower.setdefault(str(column).strip().lower(), column)
    for candidate in candidates:
        found = by_lower.get(candidate.strip().lower())
        if found is not None:
            return found
    return ""


def _clean_header(value: object) -> str:
    return str(value).strip().lstrip(UTF8_BOM)


def _frame_rows(frame: pd.DataFrame) -> List[Dict[str, object]]:
    frame = frame.rename(columns=_clean_header)
    frame = frame.astype(object).where(pd.notna(frame), "")
    rows: List[Dict[str, object]] = []
    for record in frame.to_dict(orient="records"):
        if all(cell_text(value) == "" for value in record.values()):
            continue
        rows.append({str(key): value for key, value in record.items()})
    return rows


def read_workbook_sheets(content: bytes) -> Sheets:
    """Decode an ``.xlsx`` payload into ``{sheet name: [row, ...]}``."""
    if not content:
        raise WorkbookDecodeError("The file is empty.")
    try:
        frames = pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=object, engine="openpyxl")
    except Exception as exc:
        raise WorkbookDecodeError(f"Unable to read workbook: {exc}") from exc
    return {str(name): _frame_rows(frame) for name, frame in frames.items()}


def write_workbook_bytes(
    headers: Sequence[str],
    rows: Iterable[Mapping[str, object]],
    sheet_name: str = "Sheet1",
) -> bytes:
    frame = pd.DataFrame([{h: row.get(h, "") for h in headers} for row in rows], columns=list(headers))
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


def write_delimited_bytes(headers: Sequence[str], rows: Iterable[Mapping[str, object]]) -> bytes:
    """Quoted CSV with CRLF rows and a leading BOM, as spreadsheet tools expect."""
    handle = io.StringIO(newline="")
    writer = csv.DictWriter(
        handle,
        fieldnames=list(headers),
        quoting=csv.QUOTE_ALL,
        lineterminator="\r\n",
        extrasaction="ignore",
    )
    writer.writeheader()
    for row in rows:
        writer.writerow({k: row.get(k, "") for k in writer.fieldnames})
    return (UTF8_BOM + handle.getvalue()).encode("utf-8")
