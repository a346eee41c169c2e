"""
staff_roster.py

Turns roster input into an ordered list of calendar_layout.User.

Two sources:
- inline names sharing one default work-hours string
- a .csv / .xlsx table with "Name" and "WorkHours" columns (row 1 = headers)

WorkHours values are display strings ("8:00-5:00", "7-3") and are kept verbatim.
"""

from __future__ import annotations

import csv
import re
from datetime import datetime, time
from pathlib import Path
from typing import Iterable, List, Optional, Sequence
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from calendar_layout import InvalidInput, User

DEFAULT_WORK_HOURS = "8:00-5:00"

NAME_HEADER = "Name"
HOURS_HEADER = "WorkHours"

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


# ----------------------------
# Helpers
# ----------------------------

def _normalize_header_key(value) -> str:
    """Normalize column headers so minor spacing/punctuation differences still match."""
    return re.sub(r"[^a-z0-9]", "", str(value).strip().lower())


def norm_name(x) -> str:
    return re.sub(r"\s+", " ", str(x).strip())


def hours_text(value, default: str) -> str:
    """Cell value -> display string. Strings pass through untouched (only trimmed)."""
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        return f"{value.hour}:{value.minute:02d}"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_name_list(s: str) -> List[str]:
    """'Alice, Bob,,Carol' -> ['Alice', 'Bob', 'Carol']"""
    return [norm_name(p) for p in str(s).split(",") if p.strip()]


# ----------------------------
# Loaders
# ----------------------------

def users_from_names(names: Iterable[str], default_work_hours: str = DEFAULT_WORK_HOURS) -> List[User]:
    users = [User(norm_name(n), default_work_hours) for n in names if n is not None and str(n).strip()]
    if not users:
        raise InvalidInput("User list is empty; provide at least one name.")
    return users


def _users_from_rows(header: Sequence, rows: Iterable[Sequence], source: str,
                     default_work_hours: str) -> List[User]:
    cols = {_normalize_header_key(h): i for i, h in enumerate(header) if h is not None}
    c_name = cols.get(_normalize_header_key(NAME_HEADER))
    c_hours = cols.get(_normalize_header_key(HOURS_HEADER))
    missing = [label for label, c in ((NAME_HEADER, c_name), (HOURS_HEADER, c_hours)) if c is None]
    if missing:
        raise InvalidInput(f"{source} is missing required column(s): {', '.join(missing)}")

    users: List[User] = []
    for row in rows:
        nv = row[c_name] if c_name < len(row) else None
        if nv is None or not str(nv).strip():
            continue
        hv = row[c_hours] if c_hours < len(row) else None
        users.append(User(norm_name(nv), hours_text(hv, default_work_hours)))

    if not users:
        raise InvalidInput(f"{source} has no named users.")
    return users


def _read_csv(path: Path) -> List[List[Optional[str]]]:
    try:
        with path.open(newline="", encoding="utf-8-sig") as fh:
            return [row for row in csv.reader(fh)]
    except (UnicodeDecodeError, csv.Error) as e:
        raise InvalidInput(f"Roster CSV {path} is not readable UTF-8 CSV: {e}") from e


def _read_xlsx(path: Path, sheet: Optional[str]) -> List[List]:
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError) as e:
        raise InvalidInput(f"Roster workbook {path} is not a valid .xlsx file: {e}") from e
    try:
        if sheet:
            if sheet not in wb.sheetnames:
                raise InvalidInput(f"Missing roster sheet '{sheet}' in {path}")
            ws = wb[sheet]
        else:
            ws = wb.worksheets[0]
        return [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def load_users_table(path, default_work_hours: str = DEFAULT_WORK_HOURS,
                     sheet: Optional[str] = None) -> List[User]:
    p = Path(path)
    if not p.is_file():
        raise InvalidInput(f"Roster file not found: {p}")

    suffix = p.suffix.lower()
    if suffix == ".csv":
        if sheet:
            raise InvalidInput("--sheet only applies to .xlsx roster files")
        rows = _read_csv(p)
    elif suffix in EXCEL_SUFFIXES:
        rows = _read_xlsx(p, sheet)
    else:
        raise InvalidInput(f"Unsupported roster file type '{p.suffix}'. Use .csv or .xlsx")

    if not rows:
        raise InvalidInput(f"Roster file {p} is empty.")
    return _users_from_rows(rows[0], rows[1:], str(p), default_work_hours)
