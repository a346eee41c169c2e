"""
render_calendar_xlsx.py

Applies calendar_layout commands to an openpyxl workbook and saves it.

Usage:
    with open_renderer() as r:
        for month, cmds in plan_year(...):
            r.apply(cmds)
        r.finalize(Path("2024 Staff Schedule.xlsx"))

The workbook is closed on every path out of the with-block, including errors.
Nothing is written to disk unless finalize() is reached.
"""

from __future__ import annotations

from contextlib import contextmanager
from copy import copy
from pathlib import Path
from typing import Dict, Iterable, Iterator

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from calendar_layout import (
    TEXT_FORMAT,
    CreateSheet,
    LayoutCommand,
    MergeCells,
    SetCell,
    SetColumnWidth,
    SetUsedRangeFont,
    SetZoom,
    StyleRange,
)


class RendererUnavailable(RuntimeError):
    """Raised when the spreadsheet backend cannot be initialized."""


class PersistenceFailure(RuntimeError):
    """Raised when the finished workbook cannot be saved."""


XLSX_SUFFIX = ".xlsx"

ALIGN_CENTER = Alignment(horizontal="center", vertical="center")

THIN_BORDER = Border(left=Side(style='thin'),
                     right=Side(style='thin'),
                     top=Side(style='thin'),
                     bottom=Side(style='thin'))


class XlsxRenderer:
    def __init__(self, wb: Workbook):
        self.wb = wb
        self._default_sheet = wb.active
        self._sheets: Dict[str, object] = {}

    def _ws(self, name: str):
        try:
            return self._sheets[name]
        except KeyError:
            raise KeyError(f"Sheet '{name}' used before CreateSheet") from None

    def apply(self, commands: Iterable[LayoutCommand]) -> None:
        for cmd in commands:
            self.apply_one(cmd)

    def apply_one(self, cmd: LayoutCommand) -> None:
        if isinstance(cmd, CreateSheet):
            ws = self.wb.create_sheet(cmd.sheet)
            ws.sheet_view.showGridLines = False
            self._sheets[cmd.sheet] = ws

        elif isinstance(cmd, SetCell):
            cell = self._ws(cmd.sheet).cell(cmd.row, cmd.col)
            if cmd.text_format:
                cell.number_format = TEXT_FORMAT
            cell.value = cmd.value
            if cmd.bold or cmd.font_size:
                cell.font = Font(bold=cmd.bold, size=cmd.font_size or 11)
            if cmd.centered:
                cell.alignment = ALIGN_CENTER

        elif isinstance(cmd, MergeCells):
            ws = self._ws(cmd.sheet)
            ws.merge_cells(start_row=cmd.first_row, start_column=cmd.first_col,
                           end_row=cmd.last_row, end_column=cmd.last_col)
            ws.cell(cmd.first_row, cmd.first_col).alignment = ALIGN_CENTER

        elif isinstance(cmd, StyleRange):
            ws = self._ws(cmd.sheet)
            fill = PatternFill("solid", fgColor=cmd.fill) if cmd.fill else None
            for rr in range(cmd.first_row, cmd.last_row + 1):
                for cc in range(cmd.first_col, cmd.last_col + 1):
                    cell = ws.cell(rr, cc)
                    if fill is not None:
                        cell.fill = fill
                    if cmd.border:
                        cell.border = THIN_BORDER

        elif isinstance(cmd, SetColumnWidth):
            self._ws(cmd.sheet).column_dimensions[cmd.column].width = cmd.width

        elif isinstance(cmd, SetZoom):
            self._ws(cmd.sheet).sheet_view.zoomScale = cmd.percent

        elif isinstance(cmd, SetUsedRangeFont):
            ws = self._ws(cmd.sheet)
            for row in ws.iter_rows():
                for cell in row:
                    font = copy(cell.font)
                    font.name = cmd.font_name
                    cell.font = font

        else:
            raise TypeError(f"Unknown layout command: {cmd!r}")

    def finalize(self, out_path) -> Path:
        """Drop the default sheet, activate the first month, save (replacing any existing file)."""
        out = Path(out_path)
        if self._sheets and self._default_sheet is not None and self._default_sheet.title in self.wb.sheetnames:
            self.wb.remove(self._default_sheet)
            self._default_sheet = None
        self.wb.active = 0

        if not out.parent.is_dir():
            raise PersistenceFailure(f"Save location does not exist: {out.parent}")
        try:
            self.wb.save(out)
        except OSError as e:
            raise PersistenceFailure(f"Could not save workbook to {out}: {e}") from e
        return out


@contextmanager
def open_renderer() -> Iterator[XlsxRenderer]:
    try:
        wb = Workbook()
    except Exception as e:
        raise RendererUnavailable(f"Could not initialize openpyxl workbook: {e}") from e
    try:
        yield XlsxRenderer(wb)
    finally:
        wb.close()


def output_path(save_location, file_name: str) -> Path:
    name = file_name if file_name.lower().endswith(XLSX_SUFFIX) else f"{file_name}{XLSX_SUFFIX}"
    return Path(save_location) / name
