from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

from .io import resolve_column
from .records import (
    INPUT_REQUIRED_COLUMNS,
    INPUT_SHEET_ALIASES,
    MAILING_COLUMN_ALIASES,
    MAILING_SHEET,
    RESULTS_REQUIRED_COLUMNS,
    input_sheet_name,
)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _found(columns: Sequence[str]) -> str:
    return ", ".join(str(c) for c in columns) or "none"


def _missing_columns(row: Mapping[str, object], required: Sequence[str]) -> List[str]:
    return [col for col in required if col not in row]


def validate_input_sheets(sheets: Mapping[str, Sequence[Mapping[str, object]]]) -> ValidationResult:
    errors: List[str] = []
    name = input_sheet_name(sheets)
    if not name:
        aliases = " or ".join(f"'{alias}'" for alias in INPUT_SHEET_ALIASES)
        errors.append(
            f"Input file is missing required sheet: {aliases}. Found sheets: {_found(list(sheets.keys()))}."
        )
        return ValidationResult(is_valid=False, errors=errors)

    rows = sheets[name]
    if not rows:
        errors.append(f"Input file sheet '{name}' is empty.")
    else:
        first_row = rows[0]
        missing = _missing_columns(first_row, INPUT_REQUIRED_COLUMNS)
        if missing:
            errors.append(
                f"Input file is missing columns: {', '.join(missing)}. "
                f"Found columns: {_found(list(first_row.keys()))}."
            )
    return ValidationResult(is_valid=not errors, errors=errors)


def validate_results_sheets(sheets: Mapping[str, Sequence[Mapping[str, object]]]) -> ValidationResult:
    """Check the four Results sheets.

    An empty sheet is accepted as an empty data set; column checks only run
    when the sheet has at least one row.
    """
    errors: List[str] = []
    required_sheets = list(RESULTS_REQUIRED_COLUMNS.keys()) + [MAILING_SHEET]
    for sheet in required_sheets:
        if sheet not in sheets:
            errors.append(f"Results file is missing required sheet: '{sheet}'.")

    for sheet, required in RESULTS_REQUIRED_COLUMNS.items():
        rows = sheets.get(sheet) or []
        if not rows:
            continue
        first_row = rows[0]
        missing = _missing_columns(first_row, required)
        if missing:
            errors.append(
                f"Results file sheet '{sheet}' is missing columns: {', '.join(missing)}. "
                f"Found columns: {_found(list(first_row.keys()))}."
            )

    mailing_rows = sheets.get(MAILING_SHEET) or []
    if mailing_rows:
        columns = list(mailing_rows[0].keys())
        for logical, aliases in MAILING_COLUMN_ALIASES.items():
            if not resolve_column(columns, aliases):
                errors.append(
                    f"Results file sheet '{MAILING_SHEET}' has no {logical} column "
                    f"(accepted: {', '.join(aliases)}). Found columns: {_found(columns)}."
                )

    return ValidationResult(is_valid=not errors, errors=errors)
