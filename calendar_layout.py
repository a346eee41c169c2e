"""
calendar_layout.py

Pure layout engine for the yearly staff calendar.

Pipeline per month:
    year -> month_catalog -> expand_workdays -> group_weeks -> plan_month

LOCKED SHEET GEOMETRY:
- Column A holds user names; Mon..Fri occupy columns B..F; column G is a spacer.
- Title sits in B2 (merged B2:F2).
- Week blocks start at row 4. For a block starting at row R with U users:
    weekday names: row R
    ISO dates:     row R+1
    user k:        row R+2+k
  Next block starts at R + U + 3 (one blank separator row).
- The first week of a month is shifted right so its first business day lands
  under its real weekday column; every later week starts at Monday (column B).

Nothing here touches a workbook. plan_month emits LayoutCommand values that
render_calendar_xlsx.py applies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from openpyxl.utils import get_column_letter


class InvalidInput(ValueError):
    """Bad year, empty roster, malformed name tables or roster sources."""


# ----------------------------
# Constants / settings
# ----------------------------

MIN_YEAR = 1
MAX_YEAR = 9998  # December needs date(year + 1, 1, 1)

NAME_COL = 1
FIRST_DAY_COL = 2   # B = Monday slot
WORKDAY_SLOTS = 5
LAST_DAY_COL = FIRST_DAY_COL + WORKDAY_SLOTS - 1   # F = Friday slot
SPACER_COL = LAST_DAY_COL + 1                        # G

TITLE_ROW = 2
FIRST_WEEK_ROW = 4
BAND_HEIGHT = 2     # weekday-name row + date row
WEEK_GAP = 1

TEXT_FORMAT = "@"

MAX_SHEET_NAME = 31
SHEET_NAME_FORBIDDEN = set(":\\/?*[]")


@dataclass(frozen=True)
class LayoutSettings:
    title_text: str = "Staff Calendar"
    first_column_width: int = 13
    zoom_level: int = 100
    day_column_width: int = 12
    spacer_column_width: int = 2
    title_font_size: int = 16
    band_fill: str = "DDEBF7"
    font_name: str = "Calibri"


# ----------------------------
# Data model
# ----------------------------

@dataclass(frozen=True)
class User:
    name: str
    work_hours: str


@dataclass(frozen=True)
class Day:
    date: date

    @property
    def weekday(self) -> int:
        """Monday=0 .. Sunday=6."""
        return self.date.weekday()


@dataclass(frozen=True)
class Week:
    week_number: int
    days: Tuple[Day, ...]


@dataclass(frozen=True)
class Month:
    number: int
    name: str
    abbreviation: str
    weeks: Tuple[Week, ...] = ()


@dataclass(frozen=True)
class LocaleNames:
    """Ordered display names; weekday_names is Monday-first."""
    month_names: Tuple[str, ...]
    month_abbreviations: Tuple[str, ...]
    weekday_names: Tuple[str, ...]


# ----------------------------
# Layout commands
# ----------------------------

@dataclass(frozen=True)
class CreateSheet:
    sheet: str


@dataclass(frozen=True)
class SetCell:
    sheet: str
    row: int
    col: int
    value: str
    bold: bool = False
    centered: bool = False
    text_format: bool = False
    font_size: Optional[int] = None


@dataclass(frozen=True)
class MergeCells:
    """Merge and center."""
    sheet: str
    first_row: int
    first_col: int
    last_row: int
    last_col: int


@dataclass(frozen=True)
class StyleRange:
    sheet: str
    first_row: int
    first_col: int
    last_row: int
    last_col: int
    fill: Optional[str] = None
    border: bool = True


@dataclass(frozen=True)
class SetColumnWidth:
    sheet: str
    column: str
    width: float


@dataclass(frozen=True)
class SetZoom:
    sheet: str
    percent: int


@dataclass(frozen=True)
class SetUsedRangeFont:
    sheet: str
    font_name: str


LayoutCommand = Union[
    CreateSheet, SetCell, MergeCells, StyleRange, SetColumnWidth, SetZoom, SetUsedRangeFont
]


# ----------------------------
# Helpers
# ----------------------------

def validate_year(year: int) -> int:
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidInput(f"Year must be an integer, got {year!r}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidInput(f"Year out of range: {year}. Expected {MIN_YEAR}..{MAX_YEAR}")
    return year


def _require_names(label: str, names: Sequence[str], count: int) -> List[str]:
    """First `count` entries by position; any blank among them is an error."""
    picked = [None if n is None else str(n).strip() for n in list(names)[:count]]
    if len(picked) < count:
        raise InvalidInput(f"Need {count} {label}, got {len(picked)}")
    blanks = [i + 1 for i, n in enumerate(picked) if not n]
    if blanks:
        raise InvalidInput(f"Blank {label} at position(s) {blanks}")
    return picked


def validate_sheet_name(name: str) -> str:
    """Excel sheet-name rules: 1..31 chars, none of :\\/?*[], no leading/trailing apostrophe."""
    if len(name) > MAX_SHEET_NAME:
        raise InvalidInput(f"Sheet name {name!r} is longer than {MAX_SHEET_NAME} characters")
    bad = sorted(set(name) & SHEET_NAME_FORBIDDEN)
    if bad:
        raise InvalidInput(f"Sheet name {name!r} contains forbidden character(s): {''.join(bad)}")
    if name.startswith("'") or name.endswith("'"):
        raise InvalidInput(f"Sheet name {name!r} cannot start or end with an apostrophe")
    return name


def week_of_year(d: date) -> int:
    """Week 1 contains January 1; weeks start on Monday."""
    jan1 = date(d.year, 1, 1)
    return (d.timetuple().tm_yday - 1 + jan1.weekday()) // 7 + 1


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1) - timedelta(days=1)
    else:
        end = date(year, month + 1, 1) - timedelta(days=1)
    return start, end


# ----------------------------
# MonthCatalog / WorkdayExpander / WeekGrouper
# ----------------------------

def month_catalog(year: int, month_names: Sequence[str], month_abbreviations: Sequence[str]) -> List[Month]:
    validate_year(year)
    names = _require_names("month names", month_names, 12)
    abbrs = _require_names("month abbreviations", month_abbreviations, 12)
    for a in abbrs:
        validate_sheet_name(a)
    if len({a.lower() for a in abbrs}) != 12:
        raise InvalidInput(f"Month abbreviations must be unique (sheet names): {abbrs}")
    return [Month(number=i + 1, name=names[i], abbreviation=abbrs[i]) for i in range(12)]


def expand_workdays(year: int, month: int) -> List[Day]:
    start, end = month_bounds(year, month)
    days: List[Day] = []
    d = start
    while d <= end:
        if d.weekday() < 5:
            days.append(Day(d))
        d += timedelta(days=1)
    return days


def group_weeks(days: Sequence[Day]) -> List[Week]:
    weeks: List[Week] = []
    current: List[Day] = []
    last_number: Optional[int] = None

    for day in days:
        number = week_of_year(day.date)
        if number != last_number:
            if current:
                weeks.append(Week(last_number, tuple(current)))
            current = []
            last_number = number
        current.append(day)

    if current:
        weeks.append(Week(last_number, tuple(current)))
    return weeks


# ----------------------------
# LayoutPlanner
# ----------------------------

def first_week_offset(week: Week) -> int:
    """Mon -> 0 .. Fri -> 4."""
    return week.days[0].weekday


def plan_month(
    month: Month,
    users: Sequence[User],
    weekday_names: Sequence[str],
    settings: LayoutSettings = LayoutSettings(),
) -> List[LayoutCommand]:
    if not users:
        raise InvalidInput("User list is empty; nothing to place under each week.")
    if not month.weeks:
        raise InvalidInput(f"Month {month.number} ({month.name}) has no weeks.")
    day_names = _require_names("weekday names", weekday_names, WORKDAY_SLOTS)

    sheet = month.abbreviation
    cmds: List[LayoutCommand] = [CreateSheet(sheet)]

    cmds.append(SetColumnWidth(sheet, get_column_letter(NAME_COL), settings.first_column_width))
    for col in range(FIRST_DAY_COL, LAST_DAY_COL + 1):
        cmds.append(SetColumnWidth(sheet, get_column_letter(col), settings.day_column_width))
    cmds.append(SetColumnWidth(sheet, get_column_letter(SPACER_COL), settings.spacer_column_width))

    cmds.append(SetCell(
        sheet, TITLE_ROW, FIRST_DAY_COL, f"{settings.title_text} - {month.name}",
        bold=True, font_size=settings.title_font_size,
    ))
    cmds.append(MergeCells(sheet, TITLE_ROW, FIRST_DAY_COL, TITLE_ROW, LAST_DAY_COL))

    row = FIRST_WEEK_ROW
    for idx, week in enumerate(month.weeks):
        cmds.append(StyleRange(
            sheet, row, FIRST_DAY_COL, row + BAND_HEIGHT - 1, LAST_DAY_COL,
            fill=settings.band_fill,
        ))

        for k, user in enumerate(users):
            r = row + BAND_HEIGHT + k
            cmds.append(StyleRange(sheet, r, NAME_COL, r, LAST_DAY_COL))
            cmds.append(SetCell(sheet, r, NAME_COL, user.name, bold=True))

        offset = first_week_offset(week) if idx == 0 else 0
        for j, day in enumerate(week.days):
            col = FIRST_DAY_COL + offset + j
            cmds.append(SetCell(sheet, row, col, day_names[day.weekday], bold=True, centered=True))
            cmds.append(SetCell(sheet, row + 1, col, day.date.isoformat(), bold=True, centered=True))
            for k, user in enumerate(users):
                cmds.append(SetCell(sheet, row + BAND_HEIGHT + k, col, user.work_hours, text_format=True))

        row += len(users) + BAND_HEIGHT + WEEK_GAP

    cmds.append(SetUsedRangeFont(sheet, settings.font_name))
    cmds.append(SetZoom(sheet, settings.zoom_level))
    return cmds


# ----------------------------
# Year driver
# ----------------------------

def build_months(year: int, locale_names: LocaleNames) -> List[Month]:
    out = []
    for m in month_catalog(year, locale_names.month_names, locale_names.month_abbreviations):
        weeks = tuple(group_weeks(expand_workdays(year, m.number)))
        out.append(replace(m, weeks=weeks))
    return out


def plan_year(
    year: int,
    users: Sequence[User],
    locale_names: LocaleNames,
    settings: LayoutSettings = LayoutSettings(),
) -> Iterator[Tuple[Month, List[LayoutCommand]]]:
    """
    Validates everything eagerly, then returns a lazy per-month iterator.
    Stopping iteration early is how a caller cancels between months.
    """
    if not users:
        raise InvalidInput("User list is empty; nothing to place under each week.")
    _require_names("weekday names", locale_names.weekday_names, WORKDAY_SLOTS)
    months = build_months(year, locale_names)
    users = tuple(users)
    return ((m, plan_month(m, users, locale_names.weekday_names, settings)) for m in months)
