#!/usr/bin/env python3
"""
build_year_calendar.py

End-to-end yearly staff calendar builder:
- Reads the roster (inline --users or a --users-file table with Name / WorkHours)
- Plans one sheet per month (business days grouped by calendar week, one row per user)
- Writes "<save-location>/<out-name>.xlsx", replacing any existing file

Usage:
    python build_year_calendar.py --year 2024 --users "Alice,Bob" --work-hours "8-5"
    python build_year_calendar.py --year 2025 --users-file staff.csv --zoom 90
"""

from __future__ import annotations

import argparse
import calendar
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from calendar_layout import InvalidInput, LayoutSettings, LocaleNames, User, plan_year, validate_year
from render_calendar_xlsx import PersistenceFailure, RendererUnavailable, open_renderer, output_path
from staff_roster import DEFAULT_WORK_HOURS, load_users_table, parse_name_list, users_from_names

DEFAULT_TITLE = "Staff Calendar"
DEFAULT_FIRST_COLUMN_WIDTH = 13
DEFAULT_ZOOM = 100


def default_locale_names() -> LocaleNames:
    """Name tables from the calendar module (current LC_TIME, never changed here)."""
    return LocaleNames(
        month_names=tuple(calendar.month_name[1:]),
        month_abbreviations=tuple(calendar.month_abbr[1:]),
        weekday_names=tuple(calendar.day_name),
    )


def default_out_name(year: int) -> str:
    return f"{year} Staff Schedule"


def build_calendar(year: int, users: Sequence[User], out_path, settings: LayoutSettings,
                   locale_names: Optional[LocaleNames] = None, verbose: bool = True) -> Path:
    months = plan_year(year, users, locale_names or default_locale_names(), settings)

    with open_renderer() as renderer:
        for month, cmds in months:
            if verbose:
                print(f"Building {month.name} {year} ({len(month.weeks)} weeks)...")
            renderer.apply(cmds)
        return renderer.finalize(out_path)


def load_users(args) -> List[User]:
    if args.users_file:
        return load_users_table(args.users_file, default_work_hours=args.work_hours, sheet=args.sheet)
    return users_from_names(parse_name_list(args.users), default_work_hours=args.work_hours)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Build a yearly staff calendar workbook (one sheet per month).")
    ap.add_argument("--year", type=int, required=True)
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--users", help="Comma-separated names, all sharing --work-hours")
    src.add_argument("--users-file", help="CSV or XLSX with 'Name' and 'WorkHours' columns")
    ap.add_argument("--sheet", default=None, help="Worksheet name in an .xlsx --users-file (default: first; rejected for .csv)")
    ap.add_argument("--work-hours", default=DEFAULT_WORK_HOURS,
                    help=f"Hours string for --users, and fallback for blank WorkHours cells (default {DEFAULT_WORK_HOURS})")
    ap.add_argument("--title", default=DEFAULT_TITLE)
    ap.add_argument("--first-column-width", type=int, default=DEFAULT_FIRST_COLUMN_WIDTH)
    ap.add_argument("--zoom", type=int, default=DEFAULT_ZOOM)
    ap.add_argument("--out-name", default=None, help="Output file name without extension (default '<year> Staff Schedule')")
    ap.add_argument("--save-location", default=".", help="Output directory (default: current directory)")
    ap.add_argument("--quiet", action="store_true", help="Only print the final path")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        year = validate_year(args.year)
        if args.first_column_width <= 0:
            raise InvalidInput("--first-column-width must be positive")
        if not 10 <= args.zoom <= 400:
            raise InvalidInput("--zoom must be between 10 and 400")
        users = load_users(args)
        settings = LayoutSettings(
            title_text=args.title,
            first_column_width=args.first_column_width,
            zoom_level=args.zoom,
        )
        out = output_path(args.save_location, args.out_name or default_out_name(year))
        saved = build_calendar(year, users, out, settings, verbose=not args.quiet)
    except InvalidInput as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return 2
    except (RendererUnavailable, PersistenceFailure) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled; nothing saved.", file=sys.stderr)
        return 130

    print(f"✅ Excel: {saved}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
